"""In-memory working set of text artifacts keyed by path."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from ..errors import PreconditionError
from ..models import CacheEntry


class FileCache:
    """Holds every in-flight artifact of a run; the single source of truth for text."""

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: str) -> Optional[CacheEntry]:
        return self._entries.get(path)

    def set(self, path: str, entry: CacheEntry) -> None:
        self._entries[path] = entry

    def put(self, path: str, content: str) -> CacheEntry:
        entry = CacheEntry(path=path, content=content)
        self._entries[path] = entry
        return entry

    def remove(self, path: str) -> bool:
        return self._entries.pop(path, None) is not None

    def get_all(self) -> List[CacheEntry]:
        return list(self._entries.values())

    def require(self, path: str, *, purpose: str) -> CacheEntry:
        entry = self._entries.get(path)
        if entry is None:
            raise PreconditionError(f"{path} not in cache - unable to {purpose}")
        return entry

    def read_and_cache(self, path: Path | str) -> str:
        """Load a file from disk into the cache unless it is already present."""
        key = Path(path).as_posix()
        entry = self._entries.get(key)
        if entry is not None:
            return entry.content
        content = Path(path).read_text(encoding="utf-8")
        self.put(key, content)
        return content

    def read_glob(self, root: Path, pattern: str) -> int:
        """Cache every file under ``root`` matching ``pattern``; return how many were new."""
        added = 0
        if not root.is_dir():
            return added
        for path in sorted(root.glob(pattern)):
            if path.is_file() and path.as_posix() not in self._entries:
                self.read_and_cache(path)
                added += 1
        return added

    def persist(self, paths: List[str]) -> None:
        """Write the named entries back to disk."""
        for path in paths:
            entry = self._entries.get(path)
            if entry is None:
                continue
            target = Path(entry.path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(entry.content, encoding="utf-8")


__all__ = ["FileCache"]
