from __future__ import annotations

import logging

import pytest

from macroverify import MacroExpansionContext, SourceFileInfo, parse_expr, parse_source
from macroverify.provenance import ProvenanceTable

SRC = "let a = 1\nlet b = 22\n"


def _root_context(tree) -> MacroExpansionContext:
    return MacroExpansionContext(source_files={tree: SourceFileInfo("TestModule", "/src/test.mv")})


def test_location_in_registered_file() -> None:
    tree = parse_source(SRC)
    ctx = _root_context(tree)
    lit = tree.items[1].value
    loc = ctx.location_of(lit)
    assert (loc.line, loc.column, loc.offset) == (2, 9, 18)
    assert loc.file == "/src/test.mv"
    assert ctx.location(lit.position, lit, file_name="test.mv").format() == "test.mv:2:9"


def test_detached_copy_maps_back() -> None:
    tree = parse_source(SRC)
    ctx = _root_context(tree)
    copy = ctx.detach(tree.items[1])
    assert copy.parent is None
    assert ctx.provenance.original_of(copy) is tree.items[1]

    loc = ctx.location_of(copy.value)
    assert (loc.line, loc.column) == (2, 9)
    assert ctx.position(copy.value.position, anchored_at=copy.value) == 18


def test_copies_of_copies_map_back() -> None:
    tree = parse_source(SRC)
    ctx = _root_context(tree)
    outer = ctx.detach(tree.items[1])
    inner = ctx.detach(outer.value)
    loc = ctx.location_of(inner.literal)
    assert (loc.line, loc.column) == (2, 9)
    assert len(ctx.provenance) == 2
    assert [r.detached for r in ctx.provenance] == [outer, inner]


def test_copy_placed_in_a_new_tree_still_maps_back() -> None:
    tree = parse_source(SRC)
    ctx = _root_context(tree)
    copy = ctx.detach(tree.items[1])
    # A parentless copy is adopted as-is.
    wrapper = parse_expr("(0)")
    new_tree = wrapper.replacing(wrapper.elements[0], copy)
    placed = new_tree.elements[0]
    assert placed is copy
    assert placed.parent is new_tree.elements

    loc = ctx.location_of(copy.value)
    assert (loc.line, loc.column) == (2, 9)


def test_unregistered_tree_warns_and_uses_its_own_text(caplog: pytest.LogCaptureFixture) -> None:
    tree = parse_source(SRC)
    ctx = _root_context(tree)
    stray = parse_expr("1 +\n  2")
    with caplog.at_level(logging.WARNING, logger="macroverify.provenance"):
        loc = ctx.location_of(stray.right)
    assert (loc.line, loc.column) == (2, 3)
    assert loc.file == ""
    assert "not part of a registered source file" in caplog.text


def test_provenance_table_rejects_duplicates() -> None:
    table = ProvenanceTable()
    a = parse_expr("a")
    b = parse_expr("b")
    table.record(a, b)
    assert a in table
    with pytest.raises(ValueError):
        table.record(a, b)


def test_shared_contexts() -> None:
    tree = parse_source(SRC)
    root = _root_context(tree)
    child = MacroExpansionContext(sharing_with=root, lexical_context=[tree.items[0]])
    assert child.diagnostics is root.diagnostics
    assert child.provenance is root.provenance
    assert child.source_files is root.source_files
    assert child.lexical_context == (tree.items[0],)

    with pytest.raises(ValueError):
        MacroExpansionContext(source_files={tree: SourceFileInfo("M", "f")}, sharing_with=root)


def test_unique_names_are_shared_and_counted_per_base() -> None:
    root = MacroExpansionContext()
    child = MacroExpansionContext(sharing_with=root)
    assert root.make_unique_name("tmp") == "__macro_local_3tmpfMu0_"
    assert child.make_unique_name("tmp") == "__macro_local_3tmpfMu1_"
    assert child.make_unique_name("x") == "__macro_local_1xfMu0_"


def test_locations_count_utf8_bytes() -> None:
    tree = parse_source('let s = "é"\nlet t = "ü" + 1\n')
    ctx = _root_context(tree)
    one = tree.items[1].value.right
    loc = ctx.location_of(one)
    assert (loc.line, loc.column, loc.offset) == (2, 16, 28)
