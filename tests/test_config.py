"""Tests for bundleprune.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from bundleprune.config import (
    ENV_MANUAL_TREESHAKING,
    ENV_PRINT_DEPENDENCY_TREE,
    ENV_PURGE_DECORATORS,
    ConfigError,
    OptimizationFlags,
    PruneConfig,
    load_config,
    load_flags,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    root = tmp_path.resolve()
    assert isinstance(config, PruneConfig)
    assert config.root == root
    assert config.library_dir == root / "node_modules" / "ionic-angular"
    assert config.bundle_path == config.library_dir / "index.fesm.js"
    assert config.metadata_path == config.library_dir / "index.fesm.metadata.json"
    assert config.public_entry_point == config.library_dir / "index.js"
    assert config.module_file == config.library_dir / "module.js"
    assert config.stats_file == root / "www" / "build" / "stats.json"
    assert config.optimization_components_dir == config.components_dir
    assert config.module_class == "IonicModule"
    assert config.factory_suffix == ".module.ngfactory.js"
    assert config.compiler_command == ["ngc", "-p", "{ts_config}"]
    assert config.flags == OptimizationFlags()
    assert config.flags.enabled is False


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / "bundleprune.yml"
    config_file.write_text(
        """
paths:
  library_dir: "vendor/ui"
  build_dir: "dist"
  bundle_output_name: "app.js"
app:
  ts_config: "tsconfig.aot.json"
  module_class: "RootModule"
  factory_suffix: ".factory.js"
library:
  module_class: "UiModule"
compiler:
  command: "ngc -p {ts_config} --skipMetadataEmit"
optimization:
  purge_decorators: true
  manual_tree_shaking: "yes"
""",
        encoding="utf-8",
    )

    config = load_config(config_file, environ={})

    root = tmp_path.resolve()
    assert config.library_dir == root / "vendor" / "ui"
    assert config.bundle_path == root / "vendor" / "ui" / "index.fesm.js"
    assert config.stats_file == root / "dist" / "stats.json"
    assert config.bundle_output_name == "app.js"
    assert config.ts_config == root / "tsconfig.aot.json"
    assert config.app_module_class == "RootModule"
    assert config.factory_suffix == ".factory.js"
    assert config.module_class == "UiModule"
    assert config.compiler_command == ["ngc", "-p", "{ts_config}", "--skipMetadataEmit"]
    assert config.flags == OptimizationFlags(purge_decorators=True, manual_tree_shaking=True)


def test_environment_overrides_file_flags(tmp_path: Path) -> None:
    (tmp_path / "bundleprune.yml").write_text(
        "optimization:\n  purge_decorators: true\n", encoding="utf-8"
    )

    config = load_config(
        tmp_path,
        environ={ENV_PURGE_DECORATORS: "false", ENV_MANUAL_TREESHAKING: "1"},
    )

    assert config.flags.purge_decorators is False
    assert config.flags.manual_tree_shaking is True


def test_load_config_reads_process_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv(ENV_PRINT_DEPENDENCY_TREE, "on")

    config = load_config(tmp_path)

    assert config.flags.print_dependency_trees is True


def test_load_flags_rejects_non_boolean_values() -> None:
    with pytest.raises(ConfigError):
        load_flags({ENV_MANUAL_TREESHAKING: "sometimes"})


def test_load_config_rejects_non_boolean_file_flags(tmp_path: Path) -> None:
    (tmp_path / "bundleprune.yml").write_text(
        "optimization:\n  manual_tree_shaking: maybe\n", encoding="utf-8"
    )

    with pytest.raises(ConfigError, match="optimization.manual_tree_shaking"):
        load_config(tmp_path, environ={})


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / "bundleprune.yml").write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_load_config_reports_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / "bundleprune.yml").write_text("paths: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path, environ={})
