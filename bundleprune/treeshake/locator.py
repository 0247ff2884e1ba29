"""Structural matchers used to find class references inside bundle text.

Every purge function locates its target through a :class:`ReferenceLocator`,
so the matching strategy can be swapped without touching the callers. The
default :class:`ScanningLocator` combines anchored regular expressions with a
small scanner that understands brackets, strings, comments and regex literals.
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

_IDENTIFIER_CHARS = re.compile(r"[A-Za-z0-9_$]")
_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}
_LITERAL_START = re.compile(r"['\"`/]")
_REGEX_PRECEDERS = set("(,=:[!&|?{};")
_REGEX_KEYWORDS = {
    "return", "typeof", "case", "do", "else", "in", "of", "void", "throw", "new", "delete",
    "instanceof", "yield", "await",
}
_REGEX_FLAGS = re.compile(r"[A-Za-z]*")
_BLOCK_COMMENT = r"/\*[^*]*\*+(?:[^/*][^*]*\*+)*/"
_NEXT_STATEMENT = re.compile(r"\n\s*(?:var|let|const|function|class|export|import)\b")


@dataclass(frozen=True)
class Span:
    """Half-open character range ``[start, end)``."""

    start: int
    end: int

    def text(self, source: str) -> str:
        return source[self.start : self.end]

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index < self.end


class ReferenceLocator(Protocol):
    """Capability for locating class references and the structures around them."""

    def locate_class_reference(
        self, text: str, class_name: str, *, within: Optional[Span] = None
    ) -> List[Span]:
        """Return spans of ``class_name`` used as a standalone identifier."""

    def locate_static_factory(
        self, text: str, class_name: str, factory_name: str
    ) -> Optional[Span]:
        """Return the body span (braces included) of ``ClassName.factory``."""

    def locate_array_property(
        self, text: str, property_name: str, *, within: Span
    ) -> Optional[Span]:
        """Return the span (brackets included) of ``property: [...]``."""

    def locate_class_block(self, text: str, class_name: str) -> Optional[Span]:
        """Return the span of a class definition plus its static member assignments."""

    def split_elements(self, text: str, container: Span) -> List[Span]:
        """Return the trimmed spans of the top-level items of a bracketed list."""

    def is_code(self, text: str, position: int) -> bool:
        """Return False when ``position`` lies inside a string literal or comment."""


class ScanningLocator:
    """Regex anchors plus a bracket-aware scanner that skips literals and comments."""

    def __init__(self) -> None:
        self._scanned: Optional[Tuple[str, List[int], List[int]]] = None

    def locate_class_reference(
        self, text: str, class_name: str, *, within: Optional[Span] = None
    ) -> List[Span]:
        region = within or Span(0, len(text))
        pattern = re.compile(re.escape(class_name))
        spans: List[Span] = []
        for start, end in self._code_segments(text, region):
            for match in pattern.finditer(text, start, end):
                if self._is_standalone(text, match.start(), match.end()):
                    spans.append(Span(match.start(), match.end()))
        return spans

    def locate_static_factory(
        self, text: str, class_name: str, factory_name: str
    ) -> Optional[Span]:
        name = re.escape(class_name)
        factory = re.escape(factory_name)
        # ES5 output: IonicModule.forRoot = function (a, b) { ... };
        assignment = re.compile(rf"\b{name}\s*\.\s*{factory}\s*=\s*function\b[^(]*\(")
        for match in assignment.finditer(text):
            if self.is_code(text, match.start()):
                return self._function_body(text, match.end() - 1)

        # ES2015 output: class IonicModule { static forRoot(a, b) { ... } }
        declaration = re.compile(rf"\bclass\s+{name}\b[^{{]*\{{")
        for match in declaration.finditer(text):
            if not self.is_code(text, match.start()):
                continue
            close = self.find_matching(text, match.end() - 1)
            if close is None:
                return None
            method = re.compile(rf"\bstatic\s+{factory}\s*\(")
            for inner in method.finditer(text, match.end(), close):
                if self.is_code(text, inner.start()):
                    return self._function_body(text, inner.end() - 1)
        return None

    def locate_array_property(
        self, text: str, property_name: str, *, within: Span
    ) -> Optional[Span]:
        pattern = re.compile(rf"(?<![\w$.]){re.escape(property_name)}\s*:\s*\[")
        for start, end in self._code_segments(text, within):
            for match in pattern.finditer(text, start, end):
                open_index = match.end() - 1
                close = self.find_matching(text, open_index)
                if close is not None and close < within.end:
                    return Span(open_index, close + 1)
        return None

    def locate_class_block(self, text: str, class_name: str) -> Optional[Span]:
        name = re.escape(class_name)
        # ES5 output: var Toast = /*#__PURE__*/(function () { ... }());
        wrapper = re.compile(rf"\bvar\s+{name}\s*=\s*(?:{_BLOCK_COMMENT}\s*)*(?=\(\s*function\b)")
        for match in wrapper.finditer(text):
            if not self.is_code(text, match.start()):
                continue
            close = self.find_matching(text, match.end())
            if close is None:
                return None
            end = close + 1
            call = re.compile(r"\s*\(").match(text, end)
            if call:
                call_close = self.find_matching(text, call.end() - 1)
                if call_close is None:
                    return None
                end = call_close + 1
            return self._with_static_members(text, class_name, match.start(), end)

        # ES2015 output: class Toast { ... } or let Toast = class Toast { ... };
        declaration = re.compile(
            rf"(?:\b(?:var|let|const)\s+{name}\s*=\s*class\b|(?:\bexport\s+)?\bclass\s+{name}\b)"
            rf"[^{{]*\{{"
        )
        for match in declaration.finditer(text):
            if not self.is_code(text, match.start()):
                continue
            close = self.find_matching(text, match.end() - 1)
            if close is None:
                return None
            return self._with_static_members(text, class_name, match.start(), close + 1)
        return None

    def split_elements(self, text: str, container: Span) -> List[Span]:
        elements: List[Span] = []
        depth = 0
        item_start = container.start + 1
        index = container.start + 1
        end = container.end - 1
        while index < end:
            skipped = _skip_literal(text, index)
            if skipped is not None:
                index = skipped
                continue
            char = text[index]
            if char in _OPENERS:
                depth += 1
            elif char in _CLOSERS:
                depth -= 1
            elif char == "," and depth == 0:
                _append_trimmed(text, item_start, index, elements)
                item_start = index + 1
            index += 1
        _append_trimmed(text, item_start, end, elements)
        return elements

    def find_matching(self, text: str, open_index: int) -> Optional[int]:
        """Return the index of the bracket closing ``text[open_index]``."""
        stack = [_OPENERS[text[open_index]]]
        index = open_index + 1
        while index < len(text):
            skipped = _skip_literal(text, index)
            if skipped is not None:
                index = skipped
                continue
            char = text[index]
            if char in _OPENERS:
                stack.append(_OPENERS[char])
            elif char in _CLOSERS:
                if char != stack.pop():
                    return None
                if not stack:
                    return index
            index += 1
        return None

    # ------------------------------------------------------------------
    # Internal helpers

    def _with_static_members(self, text: str, class_name: str, start: int, end: int) -> Span:
        """Extend a class span over ``Cls.x = ...;`` and ``Cls = __decorate(...);`` statements."""
        terminator = re.compile(r"[ \t]*;").match(text, end)
        if terminator:
            end = terminator.end()
        member = re.compile(
            rf"\s*(?:{_BLOCK_COMMENT}\s*)*{re.escape(class_name)}"
            r"\s*(?:\.\s*[A-Za-z_$][\w$]*\s*)*=(?!=)"
        )
        while True:
            match = member.match(text, end)
            if match is None:
                break
            statement_end = self._statement_end(text, match.end())
            if statement_end is None:
                break
            end = statement_end

        line_start = text.rfind("\n", 0, start) + 1
        if not text[line_start:start].strip():
            start = line_start
        trailing = re.compile(r"[ \t]*\n?").match(text, end)
        return Span(start, trailing.end() if trailing else end)

    def _statement_end(self, text: str, index: int) -> Optional[int]:
        depth = 0
        while index < len(text):
            skipped = _skip_literal(text, index)
            if skipped is not None:
                index = skipped
                continue
            char = text[index]
            if char in _OPENERS:
                depth += 1
            elif char in _CLOSERS:
                depth -= 1
                if depth < 0:
                    return None
            elif char == ";" and depth == 0:
                return index + 1
            elif char == "\n" and depth == 0 and _NEXT_STATEMENT.match(text, index):
                return index
            index += 1
        return None

    def _function_body(self, text: str, paren_open: int) -> Optional[Span]:
        paren_close = self.find_matching(text, paren_open)
        if paren_close is None:
            return None
        brace = text.find("{", paren_close)
        if brace == -1:
            return None
        close = self.find_matching(text, brace)
        if close is None:
            return None
        return Span(brace, close + 1)

    def _code_segments(self, text: str, region: Span) -> List[Tuple[int, int]]:
        starts, ends = self._literal_ranges(text)
        segments: List[Tuple[int, int]] = []
        cursor = region.start
        index = max(bisect.bisect_right(starts, region.start) - 1, 0)
        while index < len(starts) and starts[index] < region.end:
            literal_start, literal_end = starts[index], ends[index]
            index += 1
            if literal_end <= cursor:
                continue
            if literal_start > cursor:
                segments.append((cursor, literal_start))
            cursor = min(literal_end, region.end)
        if cursor < region.end:
            segments.append((cursor, region.end))
        return segments

    def is_code(self, text: str, position: int) -> bool:
        starts, ends = self._literal_ranges(text)
        index = bisect.bisect_right(starts, position) - 1
        return index < 0 or position >= ends[index]

    def _literal_ranges(self, text: str) -> Tuple[List[int], List[int]]:
        """Scan ``text`` once for string and comment ranges; cached per text."""
        if self._scanned is not None and self._scanned[0] is text:
            return self._scanned[1], self._scanned[2]
        starts: List[int] = []
        ends: List[int] = []
        position = 0
        while True:
            match = _LITERAL_START.search(text, position)
            if match is None:
                break
            skipped = _skip_literal(text, match.start())
            if skipped is None:
                position = match.start() + 1
                continue
            starts.append(match.start())
            ends.append(skipped)
            position = skipped
        self._scanned = (text, starts, ends)
        return starts, ends

    @staticmethod
    def _is_standalone(text: str, start: int, end: int) -> bool:
        before = text[start - 1] if start > 0 else ""
        after = text[end] if end < len(text) else ""
        if before and (_IDENTIFIER_CHARS.match(before) or before == "."):
            return False
        if after and _IDENTIFIER_CHARS.match(after):
            return False
        return True


def _skip_literal(text: str, index: int) -> Optional[int]:
    """Return the index just past a string, comment or regex starting at ``index``."""
    char = text[index]
    if char in {"'", '"', "`"}:
        cursor = index + 1
        while cursor < len(text):
            current = text[cursor]
            if current == "\\":
                cursor += 2
                continue
            if current == char:
                return cursor + 1
            if current == "\n" and char != "`":
                return cursor
            cursor += 1
        return len(text)
    if char == "/" and index + 1 < len(text):
        following = text[index + 1]
        if following == "/":
            newline = text.find("\n", index)
            return len(text) if newline == -1 else newline
        if following == "*":
            close = text.find("*/", index + 2)
            return len(text) if close == -1 else close + 2
        if _regex_allowed(text, index):
            return _skip_regex(text, index)
    return None


def _regex_allowed(text: str, index: int) -> bool:
    """A slash opens a regex literal only where an expression may start."""
    cursor = index - 1
    while cursor >= 0 and text[cursor] in " \t\r\n":
        cursor -= 1
    if cursor < 0:
        return True
    if text[cursor] in _REGEX_PRECEDERS:
        return True
    start = cursor
    while start >= 0 and _IDENTIFIER_CHARS.match(text[start]):
        start -= 1
    return text[start + 1 : cursor + 1] in _REGEX_KEYWORDS


def _skip_regex(text: str, index: int) -> Optional[int]:
    cursor = index + 1
    in_class = False
    while cursor < len(text):
        current = text[cursor]
        if current == "\\":
            cursor += 2
            continue
        if current == "\n":
            return None
        if in_class:
            if current == "]":
                in_class = False
        elif current == "[":
            in_class = True
        elif current == "/":
            flags = _REGEX_FLAGS.match(text, cursor + 1)
            return flags.end() if flags else cursor + 1
        cursor += 1
    return None


def _append_trimmed(text: str, start: int, end: int, elements: List[Span]) -> None:
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    if start < end:
        elements.append(Span(start, end))


__all__ = ["ReferenceLocator", "ScanningLocator", "Span"]
