"""Module dependency graph keyed by the module being depended upon."""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

_LOADER_PREFIX = re.compile(r"^.*!")


class DependencyMap:
    """Maps each module path to the set of module paths that reference it.

    The edge "B imports A" is stored as ``A -> {B}``. A module never refers to
    itself; such edges are dropped on insert.
    """

    def __init__(self, edges: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        self._edges: Dict[str, Set[str]] = {}
        if edges:
            for path, referrers in edges.items():
                self.ensure(path)
                for referrer in referrers:
                    self.add(path, referrer)

    def __contains__(self, path: object) -> bool:
        return path in self._edges

    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[str]:
        return iter(self._edges)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyMap):
            return NotImplemented
        return self._edges == other._edges

    def __repr__(self) -> str:
        return f"DependencyMap({len(self._edges)} modules)"

    def has(self, path: str) -> bool:
        return path in self._edges

    def get(self, path: str) -> Optional[Set[str]]:
        return self._edges.get(path)

    def ensure(self, path: str) -> Set[str]:
        return self._edges.setdefault(path, set())

    def add(self, path: str, referrer: str) -> None:
        referrers = self.ensure(path)
        if referrer != path:
            referrers.add(referrer)

    def narrow(self, path: str, referrer: str) -> bool:
        """Drop one referrer edge; return True when an edge was removed."""
        referrers = self._edges.get(path)
        if referrers is None or referrer not in referrers:
            return False
        referrers.discard(referrer)
        return True

    def remove_referrer_everywhere(self, referrer: str) -> List[str]:
        """Drop ``referrer`` from every set; return the paths that lost an edge."""
        touched: List[str] = []
        for path in self._edges:
            if self.narrow(path, referrer):
                touched.append(path)
        return touched

    def paths(self) -> List[str]:
        return list(self._edges)

    def items(self) -> Iterator[Tuple[str, Set[str]]]:
        return iter(self._edges.items())

    def copy(self) -> "DependencyMap":
        return DependencyMap({path: set(referrers) for path, referrers in self._edges.items()})

    def without(self, paths: Iterable[str]) -> "DependencyMap":
        excluded = set(paths)
        return DependencyMap(
            {
                path: {referrer for referrer in referrers if referrer not in excluded}
                for path, referrers in self._edges.items()
                if path not in excluded
            }
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {path: sorted(referrers) for path, referrers in self._edges.items()}

    @classmethod
    def from_webpack_stats(cls, stats: Mapping[str, Any]) -> "DependencyMap":
        """Build the map from a webpack stats JSON document."""
        dependency_map = cls()
        for module in _iter_stats_modules(stats.get("modules")):
            identifier = module.get("identifier") or module.get("name")
            if not isinstance(identifier, str):
                continue
            module_path = purge_loader_prefix(identifier)
            dependency_map.ensure(module_path)
            reasons = module.get("reasons")
            if not isinstance(reasons, list):
                continue
            for reason in reasons:
                if not isinstance(reason, dict):
                    continue
                referrer = reason.get("moduleIdentifier")
                if isinstance(referrer, str) and referrer:
                    dependency_map.add(module_path, purge_loader_prefix(referrer))
        return dependency_map


def purge_loader_prefix(identifier: str) -> str:
    """Strip ``loader!loader!`` chains from a webpack module identifier."""
    return _LOADER_PREFIX.sub("", identifier)


def format_dependency_map(dependency_map: DependencyMap) -> str:
    lines: List[str] = []
    for path, referrers in sorted(dependency_map.items()):
        lines.append(f"{path} is imported by {len(referrers)} modules")
        for referrer in sorted(referrers):
            lines.append(f"   {referrer}")
    return "\n".join(lines)


def _iter_stats_modules(modules: Any) -> Iterator[Dict[str, Any]]:
    if not isinstance(modules, list):
        return
    for module in modules:
        if not isinstance(module, dict):
            continue
        yield module
        # concatenated (scope hoisted) modules nest their members
        yield from _iter_stats_modules(module.get("modules"))


__all__ = ["DependencyMap", "format_dependency_map", "purge_loader_prefix"]
