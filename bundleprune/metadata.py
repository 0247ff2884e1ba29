"""Pure transforms that keep the metadata document consistent with the bundle.

Every public function takes a metadata document and returns a new one; the
input is never mutated. The document follows the flat-module metadata layout:
``origins`` maps class names to origin paths and ``metadata`` maps class names
to class nodes carrying ``decorators`` and ``statics``.
"""

from __future__ import annotations

import copy
from functools import reduce
from typing import Any, Callable, Dict, Iterable, Iterator, List, Tuple

MetadataDocument = Dict[str, Any]
Transform = Callable[[MetadataDocument], MetadataDocument]

DEFAULT_MODULE_CLASS = "IonicModule"
DECLARATIONS_KEY = "declarations"
EXPORTS_KEY = "exports"
ENTRY_COMPONENTS_KEY = "entryComponents"
PROVIDERS_KEY = "providers"
MODULE_LIST_KEYS = (DECLARATIONS_KEY, EXPORTS_KEY, ENTRY_COMPONENTS_KEY, PROVIDERS_KEY)


def compose(*transforms: Transform) -> Transform:
    """Chain transforms left to right."""
    return lambda document: reduce(lambda current, step: step(current), transforms, document)


def purge_unused_provider(
    document: MetadataDocument, class_name: str, module_class: str = DEFAULT_MODULE_CLASS
) -> MetadataDocument:
    return compose(
        lambda doc: remove_class_from_origins(doc, class_name),
        lambda doc: remove_class_from_metadata_root(doc, class_name),
        lambda doc: remove_provider_from_module(doc, class_name, module_class),
    )(document)


def purge_unused_entry_component(
    document: MetadataDocument, class_name: str, module_class: str = DEFAULT_MODULE_CLASS
) -> MetadataDocument:
    return compose(
        lambda doc: remove_module_declarations(doc, class_name, module_class),
        lambda doc: remove_module_exports(doc, class_name, module_class),
        lambda doc: remove_module_entry_components(doc, class_name, module_class),
        lambda doc: remove_class_from_origins(doc, class_name),
        lambda doc: remove_class_from_metadata_root(doc, class_name),
    )(document)


def remove_class_from_origins(document: MetadataDocument, class_name: str) -> MetadataDocument:
    return _without_key(document, "origins", class_name)


def remove_class_from_metadata_root(
    document: MetadataDocument, class_name: str
) -> MetadataDocument:
    return _without_key(document, "metadata", class_name)


def remove_module_declarations(
    document: MetadataDocument, class_name: str, module_class: str = DEFAULT_MODULE_CLASS
) -> MetadataDocument:
    return _remove_module_entry(document, class_name, module_class, DECLARATIONS_KEY)


def remove_module_exports(
    document: MetadataDocument, class_name: str, module_class: str = DEFAULT_MODULE_CLASS
) -> MetadataDocument:
    return _remove_module_entry(document, class_name, module_class, EXPORTS_KEY)


def remove_module_entry_components(
    document: MetadataDocument, class_name: str, module_class: str = DEFAULT_MODULE_CLASS
) -> MetadataDocument:
    return _remove_module_entry(document, class_name, module_class, ENTRY_COMPONENTS_KEY)


def remove_provider_from_module(
    document: MetadataDocument, class_name: str, module_class: str = DEFAULT_MODULE_CLASS
) -> MetadataDocument:
    """Filter ``statics.forRoot.value.providers`` of the aggregator class."""
    updated = copy.deepcopy(document)
    module_node = _metadata(updated).get(module_class)
    providers = _for_root_providers(module_node)
    if providers is not None:
        module_node["statics"]["forRoot"]["value"][PROVIDERS_KEY] = [
            entry for entry in providers if _reference_name(entry) != class_name
        ]
    return updated


def synchronize(document: MetadataDocument, class_names: Iterable[str]) -> MetadataDocument:
    """Strip every trace of ``class_names`` from maps and module lists.

    Applies to all module classes in the document, not only the aggregator, so
    no declaration, export, entry component or provider list keeps a dangling
    reference once its owning module has been purged.
    """
    names = set(class_names)
    if not names:
        return copy.deepcopy(document)
    updated = copy.deepcopy(document)
    for key in ("origins", "metadata"):
        mapping = updated.get(key)
        if isinstance(mapping, dict):
            updated[key] = {name: value for name, value in mapping.items() if name not in names}
    for _, owner, list_key, entries in _iter_module_lists(updated):
        owner[list_key] = [entry for entry in entries if _reference_name(entry) not in names]
    return updated


def find_dangling_references(document: MetadataDocument) -> List[Tuple[str, str, str]]:
    """Return ``(module class, list key, name)`` for local references to missing classes."""
    known = set(_metadata(document))
    dangling: List[Tuple[str, str, str]] = []
    for class_name, _, list_key, entries in _iter_module_lists(document):
        for entry in entries:
            if not isinstance(entry, dict) or "module" in entry:
                continue
            name = _reference_name(entry)
            if name is not None and name not in known:
                dangling.append((class_name, list_key, name))
    return dangling


def _remove_module_entry(
    document: MetadataDocument, class_name: str, module_class: str, argument_field: str
) -> MetadataDocument:
    updated = copy.deepcopy(document)
    for argument in _module_arguments(_metadata(updated).get(module_class)):
        entries = argument.get(argument_field)
        if isinstance(entries, list):
            argument[argument_field] = [
                entry for entry in entries if _reference_name(entry) != class_name
            ]
    return updated


def _without_key(document: MetadataDocument, map_key: str, class_name: str) -> MetadataDocument:
    updated = copy.deepcopy(document)
    mapping = updated.get(map_key)
    if isinstance(mapping, dict):
        mapping.pop(class_name, None)
    return updated


def _metadata(document: MetadataDocument) -> Dict[str, Any]:
    node = document.get("metadata")
    return node if isinstance(node, dict) else {}


def _module_arguments(class_node: Any) -> Iterator[Dict[str, Any]]:
    if not isinstance(class_node, dict):
        return
    decorators = class_node.get("decorators")
    if not isinstance(decorators, list):
        return
    for decorator in decorators:
        if not isinstance(decorator, dict):
            continue
        arguments = decorator.get("arguments")
        if not isinstance(arguments, list):
            continue
        for argument in arguments:
            if isinstance(argument, dict):
                yield argument


def _for_root_providers(class_node: Any) -> List[Any] | None:
    try:
        providers = class_node["statics"]["forRoot"]["value"][PROVIDERS_KEY]
    except (KeyError, TypeError):
        return None
    return providers if isinstance(providers, list) else None


def _iter_module_lists(
    document: MetadataDocument,
) -> Iterator[Tuple[str, Dict[str, Any], str, List[Any]]]:
    for class_name, class_node in list(_metadata(document).items()):
        for argument in _module_arguments(class_node):
            for key in MODULE_LIST_KEYS:
                entries = argument.get(key)
                if isinstance(entries, list):
                    yield class_name, argument, key, entries
        if not isinstance(class_node, dict):
            continue
        statics = class_node.get("statics")
        if not isinstance(statics, dict):
            continue
        for static in statics.values():
            value = static.get("value") if isinstance(static, dict) else None
            if isinstance(value, dict) and isinstance(value.get(PROVIDERS_KEY), list):
                yield class_name, value, PROVIDERS_KEY, value[PROVIDERS_KEY]


def _reference_name(entry: Any) -> Any:
    return entry.get("name") if isinstance(entry, dict) else None


__all__ = [
    "DEFAULT_MODULE_CLASS",
    "MetadataDocument",
    "compose",
    "find_dangling_references",
    "purge_unused_entry_component",
    "purge_unused_provider",
    "remove_class_from_metadata_root",
    "remove_class_from_origins",
    "remove_module_declarations",
    "remove_module_entry_components",
    "remove_module_exports",
    "remove_provider_from_module",
    "synchronize",
]
