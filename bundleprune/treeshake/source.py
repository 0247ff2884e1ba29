"""Source-text purge functions for the bundle, its entry point and factory files."""

from __future__ import annotations

import posixpath
import re
from typing import AbstractSet, Dict, Iterable, List, Optional

from ..editing import PatchedString
from ..errors import PreconditionError
from .locator import ReferenceLocator, ScanningLocator, Span

FOR_ROOT = "forRoot"
PROVIDERS_KEY = "providers"
MODULE_START_MARKER = "/* start {} */"
MODULE_END_MARKER = "/* end {} */"

_WILDCARD_IMPORT = re.compile(
    r"import\s+\*\s+as\s+([A-Za-z_$][\w$]*)\s+from\s+(['\"])([^'\"]+)\2\s*;?"
)
_MEMBER_ACCESS = re.compile(r"\s*\.\s*[A-Za-z_$][\w$]*")
_EXPORT_FROM = re.compile(r"export\s*\{([^}]*)\}\s*from\s*(['\"])([^'\"]+)\2\s*;?")
_EXPORT_CLAUSE = re.compile(r"export\s*\{([^}]*)\}(\s*from\s*(['\"])[^'\"]+\3)?\s*;?")
_JS_EXTENSION = re.compile(r"\.(js|ts|mjs)$")

_DEFAULT_LOCATOR = ScanningLocator()


def purge_provider_class_name_from_module_for_root(
    patched: PatchedString,
    class_name: str,
    *,
    module_class: str,
    locator: Optional[ReferenceLocator] = None,
) -> PatchedString:
    """Drop ``class_name`` from the providers array returned by ``forRoot``.

    A provider already missing from the array is left alone, but the array
    itself must be found.
    """
    locator = locator or _DEFAULT_LOCATOR
    text = patched.original
    body = locator.locate_static_factory(text, module_class, FOR_ROOT)
    if body is None:
        raise PreconditionError(f"{module_class}.{FOR_ROOT} not found in bundle")
    providers = locator.locate_array_property(text, PROVIDERS_KEY, within=body)
    if providers is None:
        raise PreconditionError(f"{module_class}.{FOR_ROOT} has no {PROVIDERS_KEY} array")
    elements = locator.split_elements(text, providers)
    for index, element in enumerate(elements):
        if element.text(text) != class_name:
            continue
        if index + 1 < len(elements):
            patched.remove(element.start, elements[index + 1].start)
        else:
            end = element.end
            # keep the array well formed when a trailing comma follows
            trailing = re.match(r"\s*,", text[end : providers.end - 1])
            if trailing:
                end += trailing.end()
            patched.remove(element.start, end)
    return patched


def purge_module_from_bundle(
    patched: PatchedString,
    module_path: str,
    *,
    library_dir: Optional[str] = None,
    symbols: Iterable[str] = (),
    locator: Optional[ReferenceLocator] = None,
) -> PatchedString:
    """Remove the code a purged module contributed to the flattened bundle.

    Bundles that bracket each module between ``/* start <path> */`` and
    ``/* end <path> */`` comments lose the whole bracketed region, ``<path>``
    being relative to ``library_dir``. Otherwise the class block of every
    public symbol of the module is removed, static member assignments included.
    """
    locator = locator or _DEFAULT_LOCATOR
    text = patched.original
    if library_dir:
        region = _marked_region(text, posixpath.relpath(module_path, library_dir))
        if region is not None:
            patched.remove(region.start, region.end)
            return patched
    for symbol in symbols:
        block = locator.locate_class_block(text, symbol)
        if block is not None:
            patched.remove(block.start, block.end)
    return patched


def purge_component_factory_import_and_usage(
    file_path: str,
    patched: PatchedString,
    factory_path: str,
    *,
    locator: Optional[ReferenceLocator] = None,
) -> PatchedString:
    """Comment out a generated factory import and null out its usages.

    ``factory_path`` is the generated factory module of the purged component;
    the wildcard import of that module in ``file_path`` is disabled and each
    ``namespace.Symbol`` usage becomes ``null``.
    """
    locator = locator or _DEFAULT_LOCATOR
    text = patched.original
    target = _strip_extension(factory_path)
    for match in _WILDCARD_IMPORT.finditer(text):
        if not locator.is_code(text, match.start()):
            continue
        if not _import_matches(file_path, match.group(3), target):
            continue
        namespace = match.group(1)
        patched.overwrite(match.start(), match.end(), f"/*{match.group(0)}*/")
        for reference in locator.locate_class_reference(text, namespace):
            if match.start() <= reference.start < match.end():
                continue
            access = _MEMBER_ACCESS.match(text, reference.end)
            if access:
                patched.overwrite(reference.start, access.end(), "null")
    return patched


def get_public_api_symbols(entry_point_path: str, content: str) -> Dict[str, List[str]]:
    """Index ``export { ... } from './x'`` statements by extensionless relative path."""
    symbols: Dict[str, List[str]] = {}
    for match in _EXPORT_FROM.finditer(content):
        specifier = match.group(3)
        if not specifier.startswith("."):
            continue
        key = _strip_extension(posixpath.normpath(specifier))
        exported = symbols.setdefault(key, [])
        for item in _split_export_items(match.group(1)):
            name = _exported_name(item)
            if name not in exported:
                exported.append(name)
    return symbols


def resolve_module_symbols(
    entry_point_path: str, module_path: str, symbol_map: Dict[str, List[str]]
) -> List[str]:
    relative = posixpath.relpath(module_path, posixpath.dirname(entry_point_path))
    return list(symbol_map.get(_strip_extension(relative), []))


def purge_exported_symbols_from_bundle(
    patched: PatchedString, symbols: AbstractSet[str]
) -> PatchedString:
    """Remove ``symbols`` from every export clause of the bundle."""
    if not symbols:
        return patched
    text = patched.original
    for match in _EXPORT_CLAUSE.finditer(text):
        items = _split_export_items(match.group(1))
        kept = [item for item in items if _exported_name(item) not in symbols]
        if len(kept) == len(items):
            continue
        if not kept:
            patched.remove(match.start(), match.end())
            continue
        inner = Span(match.start(1), match.end(1))
        patched.overwrite(inner.start, inner.end, " " + ", ".join(kept) + " ")
    return patched


def _marked_region(text: str, relative_path: str) -> Optional[Span]:
    for name in (relative_path, _strip_extension(relative_path)):
        start = text.find(MODULE_START_MARKER.format(name))
        if start == -1:
            continue
        end_marker = MODULE_END_MARKER.format(name)
        end = text.find(end_marker, start)
        if end != -1:
            return Span(start, end + len(end_marker))
    return None


def _import_matches(file_path: str, specifier: str, target: str) -> bool:
    specifier = _strip_extension(specifier)
    if specifier.startswith("."):
        resolved = posixpath.normpath(posixpath.join(posixpath.dirname(file_path), specifier))
        return resolved == target
    return target == specifier or target.endswith("/" + specifier)


def _strip_extension(path: str) -> str:
    return _JS_EXTENSION.sub("", path)


def _split_export_items(clause: str) -> List[str]:
    return [" ".join(item.split()) for item in clause.split(",") if item.strip()]


def _exported_name(item: str) -> str:
    parts = item.split()
    if len(parts) == 3 and parts[1] == "as":
        return parts[2]
    return parts[0]


__all__ = [
    "get_public_api_symbols",
    "purge_component_factory_import_and_usage",
    "purge_exported_symbols_from_bundle",
    "purge_module_from_bundle",
    "purge_provider_class_name_from_module_for_root",
    "resolve_module_symbols",
]
