"""Second-pass ahead-of-time compiler invocation."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Protocol, Sequence

from .errors import CompilerError
from .logging import get_logger


@dataclass(frozen=True)
class CompilerOptions:
    """Arguments handed to the compiler after the bundle has been pruned."""

    entry_point: str
    root_dir: str
    ts_config_path: str
    app_module_class: str
    app_module_path: str
    for_optimization: bool = False


class Compiler(Protocol):
    def compile(self, options: CompilerOptions) -> None:
        ...


class SubprocessCompiler:
    """Runs the compiler as an external command; a non-zero exit is fatal."""

    def __init__(
        self,
        command: Sequence[str],
        runner: Callable[..., object] | None = None,
    ) -> None:
        self.command = list(command)
        self._runner = runner or self._default_runner
        self.logger = get_logger("compiler")

    def build_args(self, options: CompilerOptions) -> List[str]:
        values = {
            "entry_point": options.entry_point,
            "root_dir": options.root_dir,
            "ts_config": options.ts_config_path,
            "app_module_class": options.app_module_class,
            "app_module_path": options.app_module_path,
        }
        return [part.format(**values) for part in self.command]

    def compile(self, options: CompilerOptions) -> None:
        args = self.build_args(options)
        self.logger.info("Running second-pass compile: %s", " ".join(args))
        try:
            self._runner(args, cwd=Path(options.root_dir))
        except (OSError, subprocess.CalledProcessError) as exc:
            raise CompilerError(f"Compiler failed: {exc}") from exc

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> None:
        subprocess.run(list(args), cwd=str(cwd), check=True, text=True)


__all__ = ["Compiler", "CompilerOptions", "SubprocessCompiler"]
