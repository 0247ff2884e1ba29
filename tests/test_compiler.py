"""Tests for the second-pass compiler wrapper."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from bundleprune.compiler import CompilerOptions, SubprocessCompiler
from bundleprune.errors import CompilerError

OPTIONS = CompilerOptions(
    entry_point="/app/src/app/main.ts",
    root_dir="/app",
    ts_config_path="/app/tsconfig.json",
    app_module_class="AppModule",
    app_module_path="/app/src/app/app.module.ts",
)


def test_build_args_substitutes_placeholders() -> None:
    compiler = SubprocessCompiler(["ngc", "-p", "{ts_config}", "--module={app_module_class}"])

    assert compiler.build_args(OPTIONS) == ["ngc", "-p", "/app/tsconfig.json", "--module=AppModule"]
    assert OPTIONS.for_optimization is False


def test_compile_invokes_runner_in_root_dir() -> None:
    calls = []

    def fake_runner(args, *, cwd):
        calls.append((list(args), cwd))

    SubprocessCompiler(["ngc", "-p", "{ts_config}"], runner=fake_runner).compile(OPTIONS)

    assert calls == [(["ngc", "-p", "/app/tsconfig.json"], Path("/app"))]


def test_compile_failures_raise_compiler_error() -> None:
    def failing_runner(args, *, cwd):
        raise subprocess.CalledProcessError(2, list(args))

    with pytest.raises(CompilerError, match="Compiler failed"):
        SubprocessCompiler(["ngc"], runner=failing_runner).compile(OPTIONS)


def test_missing_executable_raises_compiler_error(monkeypatch) -> None:
    def fake_run(*args, **kwargs):
        raise FileNotFoundError("ngc")

    monkeypatch.setattr("bundleprune.compiler.subprocess.run", fake_run)

    with pytest.raises(CompilerError):
        SubprocessCompiler(["ngc"]).compile(OPTIONS)
