"""Removes purged providers and components from the aggregator's registrations."""

from __future__ import annotations

from typing import AbstractSet, List, Mapping, Optional, Sequence, Set

from ..analyzers.descriptors import ComponentDescriptor, ProviderDescriptor
from ..editing import PatchedString
from ..logging import get_logger
from ..models import CacheEntry
from ..metadata import MetadataDocument, purge_unused_entry_component, purge_unused_provider
from ..stores import FileCache
from .locator import ReferenceLocator, ScanningLocator
from .source import (
    purge_component_factory_import_and_usage,
    purge_module_from_bundle,
    purge_provider_class_name_from_module_for_root,
)


class RegistrationPruner:
    """Applies one generic purge per descriptor row found in the purge set.

    Rows absent from the purge set, or already pruned by an earlier run, leave
    the bundle, the factory files and the metadata untouched. The code of every
    purged module is cut from the bundle in the same pass as the provider edits.
    """

    def __init__(
        self,
        file_cache: FileCache,
        *,
        bundle_path: str,
        module_class: str,
        factory_suffix: str = ".module.ngfactory.js",
        library_dir: Optional[str] = None,
        locator: Optional[ReferenceLocator] = None,
    ) -> None:
        self.file_cache = file_cache
        self.bundle_path = bundle_path
        self.module_class = module_class
        self.factory_suffix = factory_suffix
        self.library_dir = library_dir
        self.locator = locator or ScanningLocator()
        self.logger = get_logger("treeshake.registrations")

    def prune(
        self,
        purged_modules: Mapping[str, AbstractSet[str]],
        document: MetadataDocument,
        *,
        providers: Sequence[ProviderDescriptor],
        components: Sequence[ComponentDescriptor],
        module_symbols: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> MetadataDocument:
        document = self.prune_bundle(purged_modules, document, providers, module_symbols)
        return self.prune_components(purged_modules, document, components)

    def prune_bundle(
        self,
        purged_modules: Mapping[str, AbstractSet[str]],
        document: MetadataDocument,
        providers: Sequence[ProviderDescriptor],
        module_symbols: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> MetadataDocument:
        """Drop purged providers from ``forRoot`` and purged module code, in one pass."""
        if not purged_modules:
            return document

        bundle = self.file_cache.require(self.bundle_path, purpose="purge providers")
        patched = PatchedString(bundle.content)
        for row in providers:
            if row.module_path not in purged_modules:
                continue
            self.logger.debug("Purging provider %s", row.class_name)
            purge_provider_class_name_from_module_for_root(
                patched, row.class_name, module_class=self.module_class, locator=self.locator
            )
            document = purge_unused_provider(document, row.class_name, self.module_class)

        module_symbols = module_symbols or {}
        seen: Set[str] = set()
        for module_path in sorted(purged_modules):
            symbols = [name for name in module_symbols.get(module_path, ()) if name not in seen]
            seen.update(symbols)
            purge_module_from_bundle(
                patched,
                module_path,
                library_dir=self.library_dir,
                symbols=symbols,
                locator=self.locator,
            )
        if patched.has_changed():
            self.file_cache.put(self.bundle_path, patched.to_string())
        return document

    def prune_components(
        self,
        purged_modules: Mapping[str, AbstractSet[str]],
        document: MetadataDocument,
        components: Sequence[ComponentDescriptor],
    ) -> MetadataDocument:
        rows = [row for row in components if row.component_path in purged_modules]
        if not rows:
            return document

        for factory_file in self._factory_files():
            patched = PatchedString(factory_file.content)
            for row in rows:
                purge_component_factory_import_and_usage(
                    factory_file.path, patched, row.factory_path, locator=self.locator
                )
            if patched.has_changed():
                self.logger.debug("Purged component factories from %s", factory_file.path)
                self.file_cache.put(factory_file.path, patched.to_string())

        for row in rows:
            self.logger.debug("Purging entry component %s", row.class_name)
            document = purge_unused_entry_component(document, row.class_name, self.module_class)
        return document

    def _factory_files(self) -> List[CacheEntry]:
        return [
            entry for entry in self.file_cache.get_all() if entry.path.endswith(self.factory_suffix)
        ]


__all__ = ["RegistrationPruner"]
