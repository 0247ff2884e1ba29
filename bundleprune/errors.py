"""Exception hierarchy shared by the pruning pipeline."""

from __future__ import annotations


class BundlePruneError(RuntimeError):
    """Base class for every error raised by bundleprune."""


class ConfigError(BundlePruneError):
    """Raised when the configuration file cannot be parsed."""


class ConflictingEditError(BundlePruneError):
    """Raised when two text patches target overlapping ranges."""


class PreconditionError(BundlePruneError):
    """Raised when a cache entry required by a purge step is missing."""


class BundleNotAvailableError(PreconditionError):
    """Raised when the bundle is missing from the working set."""


class CompilerError(BundlePruneError):
    """Raised when the second-pass compiler invocation fails."""


class OptimizationError(BundlePruneError):
    """Wraps any stage failure; ``fatal`` marks the build as unrecoverable."""

    def __init__(self, message: str, *, fatal: bool = True) -> None:
        super().__init__(message)
        self.fatal = fatal


__all__ = [
    "BundleNotAvailableError",
    "BundlePruneError",
    "CompilerError",
    "ConfigError",
    "ConflictingEditError",
    "OptimizationError",
    "PreconditionError",
]
