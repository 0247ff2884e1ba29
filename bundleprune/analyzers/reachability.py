"""Decides which library modules are unreachable from application code."""

from __future__ import annotations

import posixpath
import re
from typing import AbstractSet, Dict, Iterable, List, Sequence, Set

from ..graph import DependencyMap
from ..logging import get_logger
from ..models import CacheEntry, TreeShakeResults
from .descriptors import ComponentDescriptor, ProviderDescriptor


class ReachabilityAnalyzer:
    """Computes the purge set for the known provider and component modules.

    A module is only purged when every referrer is part of the library's own
    wiring (the aggregator module). Purging a module removes its outbound
    edges, which can free further modules; the analysis repeats until no
    descriptor becomes eligible.
    """

    def __init__(
        self,
        module_file_path: str,
        library_dir: str,
        providers: Sequence[ProviderDescriptor],
        components: Sequence[ComponentDescriptor],
    ) -> None:
        self.module_file_path = module_file_path
        self.library_dir = library_dir.rstrip("/")
        self.providers = tuple(providers)
        self.components = tuple(components)
        self._internal = {module_file_path}
        self.logger = get_logger("analyzers.reachability")
        self.passes = 0

    @property
    def candidate_paths(self) -> List[str]:
        paths: List[str] = []
        for path in [p.module_path for p in self.providers] + [
            c.component_path for c in self.components
        ]:
            if path not in paths:
                paths.append(path)
        return paths

    def is_library_module(self, path: str) -> bool:
        return path.startswith(self.library_dir + "/")

    def mark_providers_used_in_source(
        self, dependency_map: DependencyMap, source_files: Iterable[CacheEntry]
    ) -> DependencyMap:
        """Register application sources that mention a provider as its referrers.

        The ahead-of-time compiler drops provider references from generated
        code, so a controller injected by an application class would otherwise
        look unused.
        """
        patterns = {
            provider.module_path: re.compile(rf"\b{re.escape(provider.class_name)}\b")
            for provider in self.providers
        }
        for source in source_files:
            if self.is_library_module(source.path):
                continue
            for provider_path, pattern in patterns.items():
                if not dependency_map.has(provider_path):
                    continue
                if pattern.search(source.content):
                    self.logger.debug("%s uses provider %s", source.path, provider_path)
                    dependency_map.add(provider_path, source.path)
        return dependency_map

    def calculate_unused_components(self, dependency_map: DependencyMap) -> TreeShakeResults:
        working = dependency_map.copy()
        purged: Dict[str, Set[str]] = {}
        candidates = [path for path in self.candidate_paths if working.has(path)]

        self.passes = 0
        while True:
            eligible = [
                path
                for path in candidates
                if path not in purged and self._is_purge_eligible(working, path)
            ]
            if not eligible:
                break
            self.passes += 1
            for path in eligible:
                self._purge(working, path, purged, dependency_map)

        self.logger.debug(
            "Reachability reached a fixed point after %d passes; %d modules purged",
            self.passes,
            len(purged),
        )
        return TreeShakeResults.build(purged, working.without(purged))

    def _is_purge_eligible(self, working: DependencyMap, path: str) -> bool:
        referrers = working.get(path)
        if referrers is None:
            return False
        if any(not self.is_library_module(referrer) for referrer in referrers):
            return False
        return not (referrers - self._internal)

    def _purge(
        self,
        working: DependencyMap,
        path: str,
        purged: Dict[str, Set[str]],
        original: DependencyMap,
    ) -> None:
        pending = [path]
        while pending:
            current = pending.pop()
            if current in purged:
                continue
            purged[current] = set(original.get(current) or ())
            for touched in working.remove_referrer_everywhere(current):
                if touched in purged or touched in self._internal:
                    continue
                if not self.is_library_module(touched):
                    continue
                if not working.get(touched):
                    pending.append(touched)


def calculate_components_used(
    dependency_map: DependencyMap,
    optimization_components_dir: str,
    components_dir: str,
    included_component_dirs: AbstractSet[str],
) -> Set[str]:
    """Return the previously included component directories still referenced."""
    used: Set[str] = set()
    optimization_root = optimization_components_dir.rstrip("/")
    components_root = components_dir.rstrip("/")
    for module_path in dependency_map:
        if not module_path.startswith(optimization_root + "/"):
            continue
        relative_path = posixpath.relpath(module_path, optimization_root)
        component_dir = posixpath.normpath(
            posixpath.join(components_root, posixpath.dirname(relative_path))
        )
        # only directories already included are reported
        if component_dir != components_root and component_dir in included_component_dirs:
            used.add(component_dir)
    return used


__all__ = ["ReachabilityAnalyzer", "calculate_components_used"]
