"""Strips decorator metadata that the ahead-of-time compiled output no longer needs."""

from __future__ import annotations

import re
from typing import Optional

from .editing import PatchedString
from .logging import get_logger
from .treeshake.locator import ScanningLocator

PURE_ANNOTATION = "/*#__PURE__*/"

_STATIC_DECORATOR_FIELD = re.compile(
    r"^[ \t]*[A-Za-z_$][\w$]*\.(?:decorators|propDecorators)\s*=\s*(?=[\[{])", re.MULTILINE
)
_STATIC_CTOR_FIELD = re.compile(
    r"^[ \t]*[A-Za-z_$][\w$]*\.ctorParameters\s*=\s*", re.MULTILINE
)
_TRANSPILED_DECORATOR = re.compile(
    r"^[ \t]*(?:[A-Za-z_$][\w$]*\s*=\s*)?__decorate\s*\(", re.MULTILINE
)
_IIFE_CLASS = re.compile(r"\bvar\s+[A-Za-z_$][\w$]*\s*=\s*(?=\(function\s*\(\)\s*\{)")
_NOCOLLAPSE = re.compile(r"/\*\*?\s*(?:\*\s*)?@nocollapse\s*\*/[ \t]*\n?")
_NOCOLLAPSE_WINDOW = 200

_locator = ScanningLocator()
logger = get_logger("decorators")


def purge_static_field_decorators(file_path: str, patched: PatchedString) -> PatchedString:
    """Remove ``Cls.decorators = [...]`` and ``Cls.propDecorators = {...}`` statements."""
    text = patched.original
    for match in _STATIC_DECORATOR_FIELD.finditer(text):
        if not _locator.is_code(text, match.start()):
            continue
        close = _locator.find_matching(text, match.end())
        if close is None:
            logger.debug("Unbalanced decorator field in %s at %d", file_path, match.start())
            continue
        patched.remove(match.start(), _statement_end(text, close + 1))
    return patched


def purge_static_ctor_fields(file_path: str, patched: PatchedString) -> PatchedString:
    """Remove ``Cls.ctorParameters = function () { ... };`` (or arrow) statements."""
    text = patched.original
    for match in _STATIC_CTOR_FIELD.finditer(text):
        if not _locator.is_code(text, match.start()):
            continue
        close = _value_end(text, match.end())
        if close is None:
            logger.debug("Unbalanced ctorParameters in %s at %d", file_path, match.start())
            continue
        start = _nocollapse_start(text, match.start())
        patched.remove(start, _statement_end(text, close))
    return patched


def purge_transpiled_decorators(file_path: str, patched: PatchedString) -> PatchedString:
    """Remove ``__decorate([...], Cls)`` calls emitted by the TypeScript compiler."""
    text = patched.original
    for match in _TRANSPILED_DECORATOR.finditer(text):
        if not _locator.is_code(text, match.start()):
            continue
        close = _locator.find_matching(text, match.end() - 1)
        if close is None:
            logger.debug("Unbalanced __decorate call in %s at %d", file_path, match.start())
            continue
        patched.remove(match.start(), _statement_end(text, close + 1))
    return patched


def add_pure_annotation(file_path: str, patched: PatchedString) -> PatchedString:
    """Mark ``var Cls = (function () { ... }())`` class wrappers as side-effect free."""
    text = patched.original
    for match in _IIFE_CLASS.finditer(text):
        if text.startswith(PURE_ANNOTATION, match.end()):
            continue
        if not _locator.is_code(text, match.start()):
            continue
        patched.insert(match.end(), PURE_ANNOTATION)
    return patched


def purge_decorators(file_path: str, content: str) -> PatchedString:
    """Run every decorator purge over one script and return the pending edits."""
    patched = PatchedString(content)
    purge_static_field_decorators(file_path, patched)
    purge_static_ctor_fields(file_path, patched)
    purge_transpiled_decorators(file_path, patched)
    add_pure_annotation(file_path, patched)
    return patched


def _value_end(text: str, start: int) -> Optional[int]:
    """Return the index just past an assigned function, arrow or literal value."""
    function = re.compile(r"function\b[^(]*\(").match(text, start)
    if function:
        params_close = _locator.find_matching(text, function.end() - 1)
        if params_close is None:
            return None
        brace = text.find("{", params_close)
        close = _locator.find_matching(text, brace) if brace != -1 else None
        return None if close is None else close + 1
    arrow = re.compile(r"\(\s*\)\s*=>\s*").match(text, start)
    if arrow:
        start = arrow.end()
    if start < len(text) and text[start] in "([{":
        close = _locator.find_matching(text, start)
        return None if close is None else close + 1
    return None


def _statement_end(text: str, index: int) -> int:
    semicolon = re.compile(r"[ \t]*;?[ \t]*\n?").match(text, index)
    return semicolon.end() if semicolon else index


def _nocollapse_start(text: str, start: int) -> int:
    window = max(0, start - _NOCOLLAPSE_WINDOW)
    for comment in _NOCOLLAPSE.finditer(text, window, start):
        if comment.end() == start:
            return comment.start()
    return start


__all__ = [
    "PURE_ANNOTATION",
    "add_pure_annotation",
    "purge_decorators",
    "purge_static_ctor_fields",
    "purge_static_field_decorators",
    "purge_transpiled_decorators",
]
