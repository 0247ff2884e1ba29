"""Configuration loading for bundleprune (bundleprune.yml + environment toggles)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILE_NAME = "bundleprune.yml"

ENV_PURGE_DECORATORS = "BUNDLEPRUNE_PURGE_DECORATORS"
ENV_MANUAL_TREESHAKING = "BUNDLEPRUNE_MANUAL_TREESHAKING"
ENV_PRINT_DEPENDENCY_TREE = "BUNDLEPRUNE_PRINT_DEPENDENCY_TREE"

_TRUTHY = {"true", "yes", "1", "on"}
_FALSY = {"false", "no", "0", "off", ""}


@dataclass(frozen=True)
class OptimizationFlags:
    """Feature toggles gating the pipeline stages for a single run."""

    purge_decorators: bool = False
    manual_tree_shaking: bool = False
    print_dependency_trees: bool = False

    @property
    def enabled(self) -> bool:
        return self.purge_decorators or self.manual_tree_shaking


@dataclass
class PruneConfig:
    """Resolved paths and settings for an optimization run."""

    root: Path
    src_dir: Path
    build_dir: Path
    library_dir: Path
    bundle_path: Path
    metadata_path: Path
    public_entry_point: Path
    module_file: Path
    components_dir: Path
    optimization_components_dir: Path
    stats_file: Path
    app_entry_point: Path
    ts_config: Path
    app_module_path: Path
    module_class: str = "IonicModule"
    app_module_class: str = "AppModule"
    factory_suffix: str = ".module.ngfactory.js"
    bundle_output_name: str = "main.js"
    compiler_command: List[str] = field(default_factory=lambda: ["ngc", "-p", "{ts_config}"])
    flags: OptimizationFlags = field(default_factory=OptimizationFlags)


def load_config(config_path: Path, environ: Mapping[str, str] | None = None) -> PruneConfig:
    """Load configuration from disk, applying environment toggle overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    paths = _as_dict(data.get("paths"))
    library_dir = _resolve(root, paths.get("library_dir"), "node_modules/ionic-angular")
    build_dir = _resolve(root, paths.get("build_dir"), "www/build")
    components_dir = _resolve(root, paths.get("components_dir"), library_dir / "components")

    app = _as_dict(data.get("app"))
    src_dir = _resolve(root, paths.get("src_dir"), "src")

    library = _as_dict(data.get("library"))
    compiler = _as_dict(data.get("compiler"))
    command = _as_str_list(compiler.get("command")) or ["ngc", "-p", "{ts_config}"]

    file_flags = _flags_from_mapping(_as_dict(data.get("optimization")))

    config = PruneConfig(
        root=root,
        src_dir=src_dir,
        build_dir=build_dir,
        library_dir=library_dir,
        bundle_path=_resolve(root, paths.get("bundle"), library_dir / "index.fesm.js"),
        metadata_path=_resolve(root, paths.get("metadata"), library_dir / "index.fesm.metadata.json"),
        public_entry_point=_resolve(root, paths.get("public_entry_point"), library_dir / "index.js"),
        module_file=_resolve(root, library.get("module_file"), library_dir / "module.js"),
        components_dir=components_dir,
        optimization_components_dir=_resolve(
            root, paths.get("optimization_components_dir"), components_dir
        ),
        stats_file=_resolve(root, paths.get("stats_file"), build_dir / "stats.json"),
        app_entry_point=_resolve(root, app.get("entry_point"), src_dir / "app" / "main.ts"),
        ts_config=_resolve(root, app.get("ts_config"), "tsconfig.json"),
        app_module_path=_resolve(root, app.get("module_path"), src_dir / "app" / "app.module.ts"),
        module_class=_as_str(library.get("module_class")) or "IonicModule",
        app_module_class=_as_str(app.get("module_class")) or "AppModule",
        factory_suffix=_as_str(app.get("factory_suffix")) or ".module.ngfactory.js",
        bundle_output_name=_as_str(paths.get("bundle_output_name")) or "main.js",
        compiler_command=command,
        flags=file_flags,
    )
    config.flags = load_flags(os.environ if environ is None else environ, defaults=file_flags)
    return config


def load_flags(
    environ: Mapping[str, str], *, defaults: OptimizationFlags | None = None
) -> OptimizationFlags:
    """Read the optimization toggles once; environment values win over defaults."""
    base = defaults or OptimizationFlags()
    overrides: Dict[str, bool] = {}
    for key, attr in (
        (ENV_PURGE_DECORATORS, "purge_decorators"),
        (ENV_MANUAL_TREESHAKING, "manual_tree_shaking"),
        (ENV_PRINT_DEPENDENCY_TREE, "print_dependency_trees"),
    ):
        if key not in environ:
            continue
        value = _as_bool(environ[key])
        if value is None:
            raise ConfigError(f"{key} must be a boolean value, got {environ[key]!r}")
        overrides[attr] = value
    return replace(base, **overrides)


def _flags_from_mapping(data: Dict[str, Any]) -> OptimizationFlags:
    values: Dict[str, bool] = {}
    for attr in ("purge_decorators", "manual_tree_shaking", "print_dependency_trees"):
        raw = data.get(attr)
        if raw is None:
            continue
        value = _as_bool(raw)
        if value is None:
            raise ConfigError(f"optimization.{attr} must be a boolean value, got {raw!r}")
        values[attr] = value
    return OptimizationFlags(**values)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _resolve(root: Path, value: Any, default: Path | str) -> Path:
    raw = _as_str(value)
    candidate = Path(raw) if raw else Path(default)
    if not candidate.is_absolute():
        candidate = root / candidate
    return candidate


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "ENV_MANUAL_TREESHAKING",
    "ENV_PRINT_DEPENDENCY_TREE",
    "ENV_PURGE_DECORATORS",
    "OptimizationFlags",
    "PruneConfig",
    "load_config",
    "load_flags",
]
