"""CLI entrypoints for bundleprune commands."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigError, PruneConfig, load_config
from .errors import OptimizationError
from .logging import configure_logging, get_logger
from .orchestrator import OptimizationPipeline
from .stores import FileCache


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bundleprune",
        description="Strip decorators and unused library modules from an AoT-compiled bundle.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Run the optimization pass between the two compiler invocations.",
    )
    _add_verbose_option(run_parser, suppress_default=True)
    run_parser.add_argument(
        "config",
        nargs="?",
        default=".",
        help="Path to bundleprune.yml or its directory (defaults to current directory).",
    )
    run_parser.add_argument(
        "--purge-decorators",
        action="store_true",
        help="Strip decorator metadata from compiled scripts.",
    )
    run_parser.add_argument(
        "--manual-tree-shaking",
        action="store_true",
        help="Remove library providers and components the application never reaches.",
    )
    run_parser.add_argument(
        "--print-dependency-tree",
        action="store_true",
        help="Log the dependency map before and after tree shaking.",
    )
    run_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file, or to bundleprune.log inside this directory.",
    )
    return parser


def _apply_cli_flags(config: PruneConfig, args: argparse.Namespace) -> PruneConfig:
    flags = config.flags
    if args.purge_decorators:
        flags = replace(flags, purge_decorators=True)
    if args.manual_tree_shaking:
        flags = replace(flags, manual_tree_shaking=True)
    if args.print_dependency_tree:
        flags = replace(flags, print_dependency_trees=True)
    return replace(config, flags=flags)


def _load_working_set(config: PruneConfig) -> FileCache:
    """Seed the working set with the files the first compile left behind."""
    cache = FileCache()
    cache.read_glob(config.src_dir, "**/*.ts")
    cache.read_glob(config.src_dir, f"**/*{config.factory_suffix}")
    cache.read_glob(config.build_dir, "**/*.js")
    if config.module_file.is_file():
        cache.read_and_cache(config.module_file)
    get_logger("cli").debug("Loaded %d files into the working set", len(cache))
    return cache


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for bundleprune commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=getattr(args, "log_file", None))

    if args.command == "run":
        try:
            config = load_config(Path(args.config), os.environ)
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        config = _apply_cli_flags(config, args)
        pipeline = OptimizationPipeline(config, _load_working_set(config))
        try:
            outcome = pipeline.run()
        except OptimizationError as exc:
            parser.exit(1, f"bundleprune run failed: {exc}\nRun with --verbose for more details.\n")
        if outcome.skipped:
            print("No optimizations enabled; bundle left untouched")
        else:
            print(f"Purged {len(outcome.purged_modules)} unused library modules")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
