"""Core data models shared across bundleprune components."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import AbstractSet, Dict, Mapping

from .graph import DependencyMap


@dataclass
class CacheEntry:
    """A single in-flight text artifact held by the working set."""

    path: str
    content: str


@dataclass(frozen=True)
class TreeShakeResults:
    """Outcome of the reachability analysis for one run."""

    purged_modules: Mapping[str, AbstractSet[str]]
    updated_dependency_map: DependencyMap

    @classmethod
    def build(
        cls, purged: Dict[str, AbstractSet[str]], updated: DependencyMap
    ) -> "TreeShakeResults":
        frozen = {path: frozenset(referrers) for path, referrers in purged.items()}
        return cls(purged_modules=MappingProxyType(frozen), updated_dependency_map=updated)

    @classmethod
    def empty(cls, dependency_map: DependencyMap) -> "TreeShakeResults":
        return cls.build({}, dependency_map)
