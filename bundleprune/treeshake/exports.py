"""Removes purged symbols from the bundle's export list."""

from __future__ import annotations

from typing import AbstractSet, Dict, List, Mapping, Optional, Set

from ..editing import PatchedString
from ..errors import BundleNotAvailableError
from ..logging import get_logger
from .source import (
    get_public_api_symbols,
    purge_exported_symbols_from_bundle,
    resolve_module_symbols,
)


class ExportPurger:
    """Maps purged module paths to public symbols and drops their export clauses."""

    def __init__(self) -> None:
        self.logger = get_logger("treeshake.exports")

    def symbols_by_module(
        self,
        purged_modules: Mapping[str, AbstractSet[str]],
        entry_point_path: str,
        entry_point_content: str,
    ) -> Dict[str, List[str]]:
        """Return the public symbols each purged module contributes to the entry point."""
        symbol_map = get_public_api_symbols(entry_point_path, entry_point_content)
        resolved: Dict[str, List[str]] = {}
        for module_path in purged_modules:
            symbols = resolve_module_symbols(entry_point_path, module_path, symbol_map)
            if not symbols:
                self.logger.debug("No public symbols exported for %s", module_path)
            resolved[module_path] = symbols
        return resolved

    def resolve_symbols(
        self,
        purged_modules: Mapping[str, AbstractSet[str]],
        entry_point_path: str,
        entry_point_content: str,
    ) -> Set[str]:
        aggregate: Set[str] = set()
        for symbols in self.symbols_by_module(
            purged_modules, entry_point_path, entry_point_content
        ).values():
            aggregate.update(symbols)
        return aggregate

    def purge(
        self,
        purged_modules: Mapping[str, AbstractSet[str]],
        entry_point_path: str,
        entry_point_content: str,
        bundle: Optional[PatchedString],
    ) -> PatchedString:
        symbols = self.resolve_symbols(purged_modules, entry_point_path, entry_point_content)
        return self.purge_symbols(symbols, bundle)

    def purge_symbols(
        self, symbols: AbstractSet[str], bundle: Optional[PatchedString]
    ) -> PatchedString:
        if bundle is None:
            raise BundleNotAvailableError("bundle not available for export purge")
        self.logger.info("Purging %d exported symbols from the bundle", len(symbols))
        return purge_exported_symbols_from_bundle(bundle, symbols)


__all__ = ["ExportPurger"]
