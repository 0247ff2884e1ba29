"""Text editing primitives used by every purge step."""

from .patch import Edit, PatchedString
from .sourcemap import SourceMap, encode_vlq

__all__ = ["Edit", "PatchedString", "SourceMap", "encode_vlq"]
