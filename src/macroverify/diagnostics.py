from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .api import parse_source
from .errors import ParseError
from .spans import SourceLocation, SourceLocationConverter
from .syntax import Syntax, TokenSyntax
from .tokens import Trivia


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    REMARK = "remark"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class MessageID:
    """Stable identifier of a diagnostic message, e.g. `MessageID("macros", "not-an-int")`."""

    domain: str
    id: str

    def __str__(self) -> str:
        return f"{self.domain}.{self.id}"


# ---------------------------------------------------------------------------
# Fix-it changes (closed set)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReplaceNode:
    old_node: Syntax
    new_node: Syntax


@dataclass(frozen=True, slots=True)
class ReplaceLeadingTrivia:
    token: TokenSyntax
    new_trivia: Trivia


@dataclass(frozen=True, slots=True)
class ReplaceTrailingTrivia:
    token: TokenSyntax
    new_trivia: Trivia


Change = ReplaceNode | ReplaceLeadingTrivia | ReplaceTrailingTrivia


@dataclass(frozen=True, slots=True)
class FixIt:
    message: str
    changes: tuple[Change, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "changes", tuple(self.changes))

    @classmethod
    def replace(cls, message: str, old_node: Syntax, new_node: Syntax) -> FixIt:
        return cls(message=message, changes=(ReplaceNode(old_node, new_node),))


def _location_in_own_tree(node: Syntax, position: int) -> SourceLocation:
    return SourceLocationConverter("", str(node.root)).location(position)


@dataclass(frozen=True, slots=True)
class Note:
    node: Syntax
    message: str
    position: int | None = None

    @property
    def anchor_position(self) -> int:
        """`position` if given, otherwise the start of `node` after its leading trivia."""
        if self.position is not None:
            return self.position
        return self.node.position_after_skipping_leading_trivia

    @property
    def debug_description(self) -> str:
        loc = _location_in_own_tree(self.node, self.anchor_position)
        return f"{loc.line}:{loc.column}: {self.message}"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A message attached to a syntax node.

    Positions are resolved lazily against the tree `node` lives in at the time
    they are read, so a macro may report on a node before or after placing it
    into its output.
    """

    node: Syntax
    message: str
    severity: Severity = Severity.ERROR
    diagnostic_id: MessageID | None = None
    position: int | None = None
    highlights: Sequence[Syntax] | None = None
    notes: Sequence[Note] = ()
    fix_its: Sequence[FixIt] = ()

    def __post_init__(self) -> None:
        highlights = (self.node,) if self.highlights is None else tuple(self.highlights)
        object.__setattr__(self, "highlights", highlights)
        object.__setattr__(self, "notes", tuple(self.notes))
        object.__setattr__(self, "fix_its", tuple(self.fix_its))

    @property
    def anchor_position(self) -> int:
        if self.position is not None:
            return self.position
        return self.node.position_after_skipping_leading_trivia

    @property
    def debug_description(self) -> str:
        loc = _location_in_own_tree(self.node, self.anchor_position)
        return f"{loc.line}:{loc.column}: {self.severity}: {self.message}"


def syntax_diagnostics(tree: Syntax) -> list[Diagnostic]:
    """Syntax errors in the rendered text of `tree`, anchored at the offending token."""
    try:
        parse_source(str(tree))
    except ParseError as e:
        position = tree.position + e.span.start.offset
        anchor = tree.token_at(position) or tree
        message = e.message if not e.hint else f"{e.message}; {e.hint}"
        return [
            Diagnostic(
                node=anchor,
                message=message,
                diagnostic_id=MessageID("parser", "syntax-error"),
                position=position,
            )
        ]
    return []
