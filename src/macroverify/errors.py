from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .spans import Span

if TYPE_CHECKING:
    from .diagnostics import Diagnostic
    from .edits import SourceEdit


@dataclass(slots=True)
class ParseError(Exception):
    span: Span
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        base = f"{self.span.format()}: {self.message}"
        if self.hint:
            return f"{base}\nhint: {self.hint}"
        return base


@dataclass(slots=True)
class EditConflictError(Exception):
    """Two source edits touch overlapping ranges of the same text."""

    first: SourceEdit
    second: SourceEdit

    def __str__(self) -> str:
        a, b = self.first, self.second
        return (
            f"overlapping edits: [{a.range.start}, {a.range.end}) -> {a.replacement!r} "
            f"and [{b.range.start}, {b.range.end}) -> {b.replacement!r}"
        )


@dataclass(slots=True)
class MacroExpansionError(Exception):
    """Raised by macro implementations; becomes an error diagnostic on the macro node."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class DiagnosticsError(Exception):
    """Raised by macro implementations to report several diagnostics at once."""

    diagnostics: list[Diagnostic]

    def __str__(self) -> str:
        return "\n".join(d.message for d in self.diagnostics)
