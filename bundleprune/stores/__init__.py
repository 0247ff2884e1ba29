"""Working-set storage for in-flight text artifacts."""

from .file_cache import FileCache

__all__ = ["FileCache"]
