from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """A concrete source position.

    Offsets are 0-based; line/column are 1-based for user-facing messages.
    """

    offset: int
    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open span [start, end) in a single file."""

    file: str
    start: Position
    end: Position

    def format(self) -> str:
        return f"{self.file}:{self.start.line}:{self.start.column}"


@dataclass(frozen=True, slots=True)
class SourceRange:
    """Half-open range [start, end) of UTF-8 byte offsets."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.start > self.end:
            raise ValueError(f"invalid source range [{self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def overlaps(self, other: SourceRange) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True, slots=True)
class SourceLocation:
    file: str
    line: int
    column: int
    offset: int

    def format(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


class SourceLocationConverter:
    """Resolves offsets of one source text to line/column locations.

    Offsets passed in are indices into the `str`. With `utf8=True` the
    resulting offset and column count UTF-8 bytes, otherwise code points.
    """

    def __init__(self, file: str, text: str, *, utf8: bool = True) -> None:
        self.file = file
        self.length = len(text)
        self._text = text
        self._utf8 = utf8
        self._line_starts = [0]
        self._byte_line_starts = [0]
        byte_offset = 0
        for i, ch in enumerate(text):
            byte_offset += len(ch.encode("utf-8")) if utf8 else 1
            if ch == "\n":
                self._line_starts.append(i + 1)
                self._byte_line_starts.append(byte_offset)

    def position(self, offset: int) -> Position:
        # Offsets past the end resolve to the end of the text.
        offset = max(0, min(offset, self.length))
        line_index = bisect_right(self._line_starts, offset) - 1
        prefix = self._text[self._line_starts[line_index] : offset]
        width = len(prefix.encode("utf-8")) if self._utf8 else len(prefix)
        return Position(
            offset=self._byte_line_starts[line_index] + width,
            line=line_index + 1,
            column=width + 1,
        )

    def location(self, offset: int) -> SourceLocation:
        pos = self.position(offset)
        return SourceLocation(file=self.file, line=pos.line, column=pos.column, offset=pos.offset)
