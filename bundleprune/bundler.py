"""Adapters that obtain the dependency graph from an external bundler."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Protocol

from .errors import PreconditionError
from .graph import DependencyMap


class Bundler(Protocol):
    """Produces webpack-style stats describing which module imports which."""

    def run(self) -> Dict[str, Any]:
        ...


class StatsFileBundler:
    """Reads a stats document written by a previous bundler run."""

    def __init__(self, stats_path: Path) -> None:
        self.stats_path = stats_path

    def run(self) -> Dict[str, Any]:
        try:
            payload = json.loads(self.stats_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise PreconditionError(f"Bundler stats not found at {self.stats_path}") from exc
        except json.JSONDecodeError as exc:
            raise PreconditionError(f"Bundler stats at {self.stats_path} are not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise PreconditionError(f"Bundler stats at {self.stats_path} must be a JSON object")
        return payload


def build_dependency_map(bundler: Bundler) -> DependencyMap:
    return DependencyMap.from_webpack_stats(bundler.run())


__all__ = ["Bundler", "StatsFileBundler", "build_dependency_map"]
