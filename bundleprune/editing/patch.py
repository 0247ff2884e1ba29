"""Range-based string editing that keeps enough state to emit a source map."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import List, Tuple

from ..errors import ConflictingEditError
from .sourcemap import SourceMap, SourceMapBuilder


@dataclass(frozen=True)
class Edit:
    """A pending replacement of ``original[start:end]``."""

    start: int
    end: int
    replacement: str
    sequence: int

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


class PatchedString:
    """Collects non-overlapping edits against an immutable original string.

    Edits are recorded in any order and applied left to right by
    :meth:`to_string`. A second round of edits is made by wrapping the output
    of the first round in a new instance.
    """

    def __init__(self, original: str) -> None:
        self.original = original
        self._edits: List[Edit] = []
        self._keys: List[Tuple[int, int, int]] = []
        self._sequence = 0

    def __len__(self) -> int:
        return len(self._edits)

    @property
    def edits(self) -> Tuple[Edit, ...]:
        return tuple(self._edits)

    def has_changed(self) -> bool:
        return any(
            edit.replacement != self.original[edit.start : edit.end] for edit in self._edits
        )

    def overwrite(self, start: int, end: int, replacement: str) -> "PatchedString":
        """Replace ``original[start:end]``; ``start == end`` inserts."""
        if start < 0 or end > len(self.original) or start > end:
            raise ValueError(
                f"Invalid range [{start}, {end}) for text of length {len(self.original)}"
            )
        self._check_conflicts(start, end)
        edit = Edit(start=start, end=end, replacement=replacement, sequence=self._sequence)
        self._sequence += 1
        key = (start, end, edit.sequence)
        index = bisect.bisect_right(self._keys, key)
        self._keys.insert(index, key)
        self._edits.insert(index, edit)
        return self

    def remove(self, start: int, end: int) -> "PatchedString":
        return self.overwrite(start, end, "")

    def insert(self, index: int, text: str) -> "PatchedString":
        return self.overwrite(index, index, text)

    def to_string(self) -> str:
        parts: List[str] = []
        cursor = 0
        for edit in self._edits:
            parts.append(self.original[cursor : edit.start])
            parts.append(edit.replacement)
            cursor = edit.end
        parts.append(self.original[cursor:])
        return "".join(parts)

    def __str__(self) -> str:
        return self.to_string()

    def generate_map(
        self,
        *,
        source: str,
        file: str | None = None,
        include_content: bool = False,
    ) -> SourceMap:
        """Return a v3 source map describing the recorded edits."""
        builder = SourceMapBuilder(self.original)
        cursor = 0
        for edit in self._edits:
            builder.add_original(cursor, edit.start)
            builder.add_replacement(edit.start, edit.replacement)
            cursor = edit.end
        builder.add_original(cursor, len(self.original))
        return builder.build(
            source=source,
            file=file,
            content=self.original if include_content else None,
        )

    def _check_conflicts(self, start: int, end: int) -> None:
        for edit in self._edits:
            if edit.is_insertion and start == end:
                continue
            if edit.is_insertion:
                overlaps = start < edit.start < end
            elif start == end:
                overlaps = edit.start < start < edit.end
            else:
                overlaps = start < edit.end and edit.start < end
            if overlaps:
                raise ConflictingEditError(
                    f"Edit [{start}, {end}) overlaps pending edit [{edit.start}, {edit.end})"
                )


__all__ = ["Edit", "PatchedString"]
