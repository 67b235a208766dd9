from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from .diagnostics import Change, ReplaceLeadingTrivia, ReplaceNode, ReplaceTrailingTrivia
from .errors import EditConflictError
from .spans import SourceRange
from .syntax import Syntax

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceEdit:
    """Replace the text in `range` with `replacement` (an empty range inserts)."""

    range: SourceRange
    replacement: str

    @classmethod
    def replace(cls, start: int, end: int, replacement: str) -> SourceEdit:
        return cls(SourceRange(start, end), replacement)

    @classmethod
    def insert(cls, offset: int, text: str) -> SourceEdit:
        return cls(SourceRange(offset, offset), text)


class PositionResolver(Protocol):
    def position(self, of: int, anchored_at: Syntax) -> int: ...


def edit_for_change(change: Change, context: PositionResolver) -> SourceEdit:
    """Translate one fix-it change into an edit on the original source text."""
    if isinstance(change, ReplaceNode):
        old = change.old_node
        start = context.position(old.position, anchored_at=old)
        end = context.position(old.end_position, anchored_at=old)
        replacement = str(change.new_node)
    elif isinstance(change, ReplaceLeadingTrivia):
        tok = change.token
        start = context.position(tok.position, anchored_at=tok)
        end = context.position(tok.position_after_skipping_leading_trivia, anchored_at=tok)
        replacement = str(change.new_trivia)
    elif isinstance(change, ReplaceTrailingTrivia):
        tok = change.token
        start = context.position(tok.end_position_before_trailing_trivia, anchored_at=tok)
        end = context.position(tok.end_position, anchored_at=tok)
        replacement = str(change.new_trivia)
    else:
        raise TypeError(f"unsupported fix-it change: {type(change).__name__}")
    return SourceEdit(SourceRange(start, end), replacement)


def apply_edits(edits: Iterable[SourceEdit], tree_or_text: Syntax | str) -> str:
    """Apply `edits` to the text of `tree_or_text` in one pass.

    Ranges are UTF-8 byte offsets into the text. Edits are ordered by range
    (insertions at the same offset keep their input order). Edits that share
    an offset only at their boundary are fine; anything else that overlaps
    raises EditConflictError.
    """
    text = tree_or_text if isinstance(tree_or_text, str) else str(tree_or_text)
    ordered = sorted(edits, key=lambda e: (e.range.start, e.range.end))
    if not ordered:
        return text

    data = text.encode("utf-8")
    widest: SourceEdit | None = None
    for e in ordered:
        if e.range.end > len(data):
            raise ValueError(
                f"edit range [{e.range.start}, {e.range.end}) is past the end of the text ({len(data)})"
            )
        if widest is not None and e.range.overlaps(widest.range):
            raise EditConflictError(first=widest, second=e)
        if widest is None or e.range.end > widest.range.end:
            widest = e

    out: list[bytes] = []
    cursor = 0
    for e in ordered:
        out.append(data[cursor : e.range.start])
        out.append(e.replacement.encode("utf-8"))
        cursor = e.range.end
    out.append(data[cursor:])
    logger.debug("applied %d edits", len(ordered))
    return b"".join(out).decode("utf-8")
