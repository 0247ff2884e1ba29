"""Minimal source map (revision 3) generation for patched text."""

from __future__ import annotations

import bisect
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"


def encode_vlq(value: int) -> str:
    """Encode a signed integer as a base64 VLQ string."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    encoded = []
    while True:
        digit = vlq & 0b11111
        vlq >>= 5
        if vlq:
            digit |= 0b100000
        encoded.append(_BASE64[digit])
        if not vlq:
            return "".join(encoded)


@dataclass
class SourceMap:
    """Serialisable source map document."""

    sources: List[str]
    mappings: str
    file: Optional[str] = None
    sources_content: Optional[List[Optional[str]]] = None
    names: List[str] = field(default_factory=list)
    version: int = 3

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"version": self.version}
        if self.file is not None:
            payload["file"] = self.file
        payload["sources"] = list(self.sources)
        if self.sources_content is not None:
            payload["sourcesContent"] = list(self.sources_content)
        payload["names"] = list(self.names)
        payload["mappings"] = self.mappings
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def __str__(self) -> str:
        return self.to_json()


class SourceMapBuilder:
    """Accumulates generated segments while walking the original text."""

    def __init__(self, original: str) -> None:
        self._original = original
        self._line_starts = [0]
        for index, char in enumerate(original):
            if char == "\n":
                self._line_starts.append(index + 1)
        self._lines: List[List[Tuple[int, int, int]]] = [[]]
        self._generated_column = 0

    def add_original(self, start: int, end: int) -> None:
        """Emit unchanged text, mapping each generated line back to its origin."""
        if start >= end:
            return
        self._add_segment(start)
        position = start
        while True:
            newline = self._original.find("\n", position, end)
            if newline == -1:
                self._generated_column += end - position
                return
            self._new_line()
            position = newline + 1
            if position >= end:
                return
            self._add_segment(position)

    def add_replacement(self, origin: int, text: str) -> None:
        """Emit replacement text, mapped as a whole to ``origin``."""
        if not text:
            return
        self._add_segment(origin)
        lines = text.split("\n")
        for _ in lines[1:]:
            self._new_line()
        self._generated_column += len(lines[-1])

    def build(
        self,
        *,
        source: str,
        file: Optional[str] = None,
        content: Optional[str] = None,
    ) -> SourceMap:
        return SourceMap(
            sources=[source],
            mappings=self._encode(),
            file=file,
            sources_content=[content] if content is not None else None,
        )

    def _locate(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return line, offset - self._line_starts[line]

    def _add_segment(self, offset: int) -> None:
        line, column = self._locate(offset)
        segments = self._lines[-1]
        if segments and segments[-1][0] == self._generated_column:
            return
        segments.append((self._generated_column, line, column))

    def _new_line(self) -> None:
        self._lines.append([])
        self._generated_column = 0

    def _encode(self) -> str:
        encoded_lines: List[str] = []
        previous_line = 0
        previous_column = 0
        for segments in self._lines:
            previous_generated = 0
            encoded_segments: List[str] = []
            for generated, line, column in segments:
                encoded_segments.append(
                    encode_vlq(generated - previous_generated)
                    + encode_vlq(0)
                    + encode_vlq(line - previous_line)
                    + encode_vlq(column - previous_column)
                )
                previous_generated = generated
                previous_line = line
                previous_column = column
            encoded_lines.append(",".join(encoded_segments))
        return ";".join(encoded_lines)


__all__ = ["SourceMap", "SourceMapBuilder", "encode_vlq"]
