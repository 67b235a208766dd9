from __future__ import annotations

from collections.abc import Sequence

from .diagnostics import Diagnostic
from .spans import SourceLocationConverter
from .syntax import Syntax


def annotated_source(tree: Syntax, diags: Sequence[Diagnostic]) -> str:
    """Render `tree` with numbered lines and a caret under every diagnostic.

        1 | let x = 1 +
          |            ^ error: unexpected end of file
    """
    text = str(tree)
    conv = SourceLocationConverter("", text, utf8=False)
    lines = text.split("\n")
    width = len(str(len(lines)))

    by_line: dict[int, list[tuple[int, Diagnostic]]] = {}
    for d in diags:
        loc = conv.location(d.anchor_position - tree.position)
        by_line.setdefault(loc.line, []).append((loc.column, d))

    out: list[str] = []
    for number, line in enumerate(lines, start=1):
        out.append(f"{number:>{width}} | {line}".rstrip())
        for column, d in sorted(by_line.get(number, []), key=lambda x: x[0]):
            out.append(f"{'':>{width}} | {' ' * (column - 1)}^ {d.severity}: {d.message}")
    return "\n".join(out)
