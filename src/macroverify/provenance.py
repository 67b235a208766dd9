from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from .spans import SourceLocation, SourceLocationConverter
from .syntax import Syntax

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceFileInfo:
    module_name: str
    full_file_path: str


@dataclass(frozen=True, slots=True)
class ProvenanceRecord:
    """`detached` is a copy of `original` handed to a macro."""

    detached: Syntax
    original: Syntax


class ProvenanceTable:
    """Append-only record of detached copies and the nodes they came from."""

    def __init__(self) -> None:
        self._records: list[ProvenanceRecord] = []
        self._by_node: dict[Syntax, ProvenanceRecord] = {}

    def record(self, detached: Syntax, original: Syntax) -> ProvenanceRecord:
        if detached in self._by_node:
            raise ValueError(f"{type(detached).__name__} already has a provenance record")
        rec = ProvenanceRecord(detached=detached, original=original)
        self._records.append(rec)
        self._by_node[detached] = rec
        return rec

    def original_of(self, node: Syntax) -> Syntax | None:
        rec = self._by_node.get(node)
        return rec.original if rec is not None else None

    def __contains__(self, node: object) -> bool:
        return node in self._by_node

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ProvenanceRecord]:
        return iter(self._records)


class PositionTranslator:
    """Maps positions anchored at (possibly detached) nodes back into source files."""

    def __init__(self, source_files: Mapping[Syntax, SourceFileInfo], provenance: ProvenanceTable) -> None:
        self._source_files = source_files
        self._provenance = provenance
        self._converters: dict[Syntax, SourceLocationConverter] = {}

    def _holder(self, node: Syntax) -> Syntax | None:
        if node in self._provenance:
            return node
        for ancestor in node.ancestors():
            if ancestor in self._provenance:
                return ancestor
        return None

    def translate(self, position: int, node: Syntax) -> tuple[Syntax, int]:
        """Return `(root, offset)` where `offset` is `position` re-based into `root`.

        `position` is measured in the tree `node` currently belongs to. Every
        detached ancestor found on the way up re-bases the offset onto the node
        it was copied from; the walk then continues from that node.
        """
        offset = position
        anchor = node
        seen: set[Syntax] = set()
        while True:
            holder = self._holder(anchor)
            if holder is None or holder in seen:
                break
            seen.add(holder)
            original = self._provenance.original_of(holder)
            if original is None:
                break
            offset = offset - holder.position + original.position
            anchor = original
        return anchor.root, offset

    def location(self, position: int, node: Syntax, file_name: str = "") -> SourceLocation:
        root, offset = self.translate(position, node)
        info = self._source_files.get(root)
        if info is None:
            logger.warning(
                "%s at offset %d is not part of a registered source file; "
                "resolving the location against its own tree",
                type(node).__name__,
                position,
            )
        conv = self._converters.get(root)
        if conv is None:
            conv = SourceLocationConverter(info.full_file_path if info else "", str(root))
            self._converters[root] = conv
        loc = conv.location(offset)
        if file_name:
            return SourceLocation(file=file_name, line=loc.line, column=loc.column, offset=loc.offset)
        return loc
