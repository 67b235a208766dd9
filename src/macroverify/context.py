from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .diagnostics import Diagnostic
from .provenance import PositionTranslator, ProvenanceTable, SourceFileInfo
from .spans import SourceLocation
from .syntax import DECL_TYPES, Syntax

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _SharedState:
    source_files: dict[Syntax, SourceFileInfo]
    provenance: ProvenanceTable = field(default_factory=ProvenanceTable)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    unique_names: dict[str, int] = field(default_factory=dict)
    translator: PositionTranslator | None = None

    def get_translator(self) -> PositionTranslator:
        if self.translator is None:
            self.translator = PositionTranslator(self.source_files, self.provenance)
        return self.translator


class MacroExpansionContext:
    """What a macro sees while it expands.

    A root context owns the registered source files, the provenance table and
    the diagnostics list. Contexts created with `sharing_with=` reuse all of
    that and differ only in their lexical context, so one expansion run
    accumulates diagnostics in a single place.
    """

    def __init__(
        self,
        *,
        source_files: Mapping[Syntax, SourceFileInfo] | None = None,
        lexical_context: Sequence[Syntax] = (),
        sharing_with: MacroExpansionContext | None = None,
    ) -> None:
        if sharing_with is not None:
            if source_files:
                raise ValueError("source_files cannot be given together with sharing_with")
            self._shared = sharing_with._shared
        else:
            self._shared = _SharedState(source_files=dict(source_files or {}))
        self.lexical_context: tuple[Syntax, ...] = tuple(lexical_context)

    @property
    def source_files(self) -> Mapping[Syntax, SourceFileInfo]:
        return self._shared.source_files

    @property
    def provenance(self) -> ProvenanceTable:
        return self._shared.provenance

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self._shared.diagnostics

    def detach(self, node: Syntax) -> Syntax:
        """A parentless copy of `node` whose positions still map back to `node`."""
        copy = node.detached()
        self._shared.provenance.record(copy, node)
        logger.debug("detached %s at offset %d", type(node).__name__, node.position)
        return copy

    def diagnose(self, diagnostic: Diagnostic) -> None:
        logger.debug("diagnostic: %s: %s", diagnostic.severity, diagnostic.message)
        self._shared.diagnostics.append(diagnostic)

    def make_unique_name(self, base: str) -> str:
        count = self._shared.unique_names.get(base, 0)
        self._shared.unique_names[base] = count + 1
        return f"__macro_local_{len(base)}{base}fMu{count}_"

    def location(self, position: int, anchored_at: Syntax, file_name: str = "") -> SourceLocation:
        return self._shared.get_translator().location(position, anchored_at, file_name)

    def location_of(self, node: Syntax) -> SourceLocation:
        return self.location(node.position_after_skipping_leading_trivia, node)

    def position(self, of: int, anchored_at: Syntax) -> int:
        """`of` translated to an offset in the original source."""
        return self.location(of, anchored_at).offset


def lexical_context_of(node: Syntax) -> list[Syntax]:
    """Detached copies of the declarations enclosing `node`, innermost first."""
    return [a.detached() for a in node.ancestors() if isinstance(a, DECL_TYPES)]
