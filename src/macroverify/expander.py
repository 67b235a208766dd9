from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import cast

from . import syntax as S
from .context import MacroExpansionContext
from .diagnostics import Diagnostic, MessageID, Severity
from .errors import DiagnosticsError, MacroExpansionError
from .macros import (
    DeclarationMacro,
    ExpressionMacro,
    ExtensionMacro,
    MacroSpec,
    MacroTable,
    MemberMacro,
    PeerMacro,
    macro_specs,
)
from .tokens import Trivia, TriviaKind

logger = logging.getLogger(__name__)

ContextFactory = Callable[[S.Syntax], MacroExpansionContext]

# Re-expanding macro output deeper than this is reported as an error.
MAX_EXPANSION_DEPTH = 64


def _checked_node(result: object, name: str) -> S.Syntax:
    if not isinstance(result, S.Syntax):
        raise MacroExpansionError(f"macro '{name}' returned {type(result).__name__}, expected a syntax node")
    return result


def _checked_nodes(result: object, name: str) -> list[S.Syntax]:
    if isinstance(result, (str, bytes)) or not isinstance(result, Iterable):
        raise MacroExpansionError(
            f"macro '{name}' returned {type(result).__name__}, expected a list of syntax nodes"
        )
    return [_checked_node(r, name) for r in result]


def _drop_leading_whitespace(trivia: Trivia) -> Trivia:
    pieces = list(trivia.pieces)
    while pieces and pieces[0].kind in (
        TriviaKind.SPACES,
        TriviaKind.TABS,
        TriviaKind.NEWLINES,
        TriviaKind.CARRIAGE_RETURNS,
    ):
        pieces.pop(0)
    return Trivia(tuple(pieces))


def _indented(node: S.Syntax, indentation: Trivia) -> S.Syntax:
    if not indentation.pieces:
        return node
    return node.rewriting_tokens(
        lambda tok: S.TokenSyntax(
            tok.kind,
            tok.text,
            tok.leading_trivia.indented(indentation),
            tok.trailing_trivia.indented(indentation),
        )
    )


class _Expander:
    def __init__(
        self,
        specs: dict[str, MacroSpec],
        context_factory: ContextFactory,
        indentation_width: Trivia,
    ) -> None:
        self.specs = specs
        self.context_factory = context_factory
        self.indentation_width = indentation_width
        self.depth = 0

    # -----------------------------------------------------------------------
    # Traversal
    # -----------------------------------------------------------------------

    def visit(self, node: S.Syntax) -> S.Syntax:
        if isinstance(node, S.TokenSyntax):
            return node
        if isinstance(node, S.ItemList):
            return self._visit_items(node)
        if isinstance(node, S.MacroExpansion):
            spec = self._spec(node, ExpressionMacro)
            if spec is not None:
                expanded = self._expand_expression(node, spec)
                if expanded is not None:
                    return expanded
        return self._visit_children(node)

    def _visit_children(self, node: S.Syntax) -> S.Syntax:
        if not isinstance(node, S.Node):
            raise TypeError(f"cannot visit {type(node).__name__}")
        children = [self.visit(c) if c is not None else None for c in node.children]
        if all(a is b for a, b in zip(children, node.children)):
            return node
        return node._with_children(children)

    def _visit_items(self, items: S.ItemList) -> S.Syntax:
        original = list(items)
        expanded = self._expand_items(original)
        if len(expanded) == len(original) and all(a is b for a, b in zip(expanded, original)):
            return items
        return S.ItemList(expanded)

    def _expand_items(self, items: Sequence[S.Syntax]) -> list[S.Syntax]:
        out: list[S.Syntax] = []
        for item in items:
            if isinstance(item, S.ExprStmt) and isinstance(item.expression, S.MacroExpansion):
                spec = self._spec(item.expression, DeclarationMacro)
                if spec is not None:
                    produced = self._expand_declaration(item, spec)
                    if produced is not None:
                        out.extend(produced)
                        continue
            if isinstance(item, (S.StructDecl, S.FuncDecl)):
                out.extend(self._expand_attached(item))
                continue
            out.append(self.visit(item))
        return out

    def _spec(self, node: S.MacroExpansion | S.Attribute, role: type) -> MacroSpec | None:
        name = node.macro_name if isinstance(node, S.MacroExpansion) else node.attribute_name
        spec = self.specs.get(name)
        if spec is None or not issubclass(spec.macro, role):
            return None
        return spec

    # -----------------------------------------------------------------------
    # Invocation
    # -----------------------------------------------------------------------

    def _invoke(self, context: MacroExpansionContext, node: S.Syntax, call: Callable[[], object]) -> object | None:
        try:
            return call()
        except DiagnosticsError as e:
            for d in e.diagnostics:
                context.diagnose(d)
        except Exception as e:
            logger.debug("macro raised %s on %s", type(e).__name__, type(node).__name__)
            context.diagnose(
                Diagnostic(
                    node=node,
                    message=str(e),
                    severity=Severity.ERROR,
                    diagnostic_id=MessageID("macros", "expansion-failed"),
                )
            )
        return None

    def _reexpand(self, context: MacroExpansionContext, node: S.Syntax, name: str, fn: Callable[[], object]) -> object | None:
        if self.depth >= MAX_EXPANSION_DEPTH:
            context.diagnose(
                Diagnostic(
                    node=node,
                    message=f"expansion of macro '{name}' exceeds the nesting limit of {MAX_EXPANSION_DEPTH}",
                    diagnostic_id=MessageID("macros", "recursive-expansion"),
                )
            )
            return None
        self.depth += 1
        try:
            return fn()
        finally:
            self.depth -= 1

    def _expand_expression(self, node: S.MacroExpansion, spec: MacroSpec) -> S.Syntax | None:
        context = self.context_factory(node)
        detached = context.detach(node)
        logger.debug("expanding expression macro #%s", node.macro_name)
        macro = cast("type[ExpressionMacro]", spec.macro)
        name = node.macro_name
        result = self._invoke(
            context, detached, lambda: _checked_node(macro.expand_expression(detached, context), name)
        )
        if result is None:
            return None
        out = self._reexpand(context, detached, name, lambda: self.visit(cast(S.Syntax, result)))
        if out is None:
            return None
        out = cast(S.Syntax, out)
        return out.with_leading_trivia(node.leading_trivia).with_trailing_trivia(node.trailing_trivia)

    def _expand_declaration(self, item: S.ExprStmt, spec: MacroSpec) -> list[S.Syntax] | None:
        node = item.expression
        context = self.context_factory(node)
        detached = context.detach(node)
        logger.debug("expanding declaration macro #%s", node.macro_name)
        macro = cast("type[DeclarationMacro]", spec.macro)
        name = node.macro_name
        produced = self._invoke(
            context, detached, lambda: _checked_nodes(macro.expand_declaration(detached, context), name)
        )
        if produced is None:
            return None
        expanded = self._reexpand(
            context, detached, name, lambda: self._expand_items(cast("list[S.Syntax]", produced))
        )
        if expanded is None:
            return None
        expanded = cast("list[S.Syntax]", expanded)

        indentation = item.leading_trivia.indentation
        out: list[S.Syntax] = []
        for i, decl in enumerate(expanded):
            decl = _indented(decl, indentation)
            leading = item.leading_trivia if i == 0 else Trivia.newlines(1) + indentation
            out.append(decl.with_leading_trivia(leading))
        if out and item.trailing_trivia.pieces:
            out[-1] = out[-1].with_trailing_trivia(out[-1].trailing_trivia + item.trailing_trivia)
        return out

    # -----------------------------------------------------------------------
    # Attached macros
    # -----------------------------------------------------------------------

    def _expand_attached(self, decl: S.StructDecl | S.FuncDecl) -> list[S.Syntax]:
        attached: list[tuple[int, S.Attribute, MacroSpec]] = []
        for i, attr in enumerate(decl.attributes):
            spec = self.specs.get(attr.attribute_name)
            if spec is not None and spec.attached:
                attached.append((i, attr, spec))
        if not attached:
            return [self.visit(decl)]

        members: list[S.Syntax] = []
        peers: list[S.Syntax] = []
        extensions: list[S.Syntax] = []
        consumed: set[int] = set()
        inherited = set(decl.inheritance.type_names) if isinstance(decl, S.StructDecl) and decl.inheritance else set()
        is_struct = isinstance(decl, S.StructDecl)

        for index, attr, spec in attached:
            macro = spec.macro
            context = self.context_factory(attr)
            dattr = context.detach(attr)
            if not (
                issubclass(macro, PeerMacro)
                or (is_struct and issubclass(macro, (MemberMacro, ExtensionMacro)))
            ):
                context.diagnose(
                    Diagnostic(
                        node=dattr,
                        message=f"macro '{attr.attribute_name}' cannot be attached to '{decl.keyword.text}'",
                        diagnostic_id=MessageID("macros", "invalid-attachment"),
                    )
                )
                continue
            consumed.add(index)
            ddecl = context.detach(decl)
            name = attr.attribute_name
            logger.debug("expanding attached macro @%s on %s", name, decl.name.text)
            if issubclass(macro, PeerMacro):
                got = self._invoke(
                    context, dattr, lambda: _checked_nodes(macro.expand_peers(dattr, ddecl, context), name)
                )
                peers.extend(self._expand_nested(context, dattr, name, got))
            if is_struct and issubclass(macro, MemberMacro):
                got = self._invoke(
                    context, dattr, lambda: _checked_nodes(macro.expand_members(dattr, ddecl, context), name)
                )
                members.extend(self._expand_nested(context, dattr, name, got))
            if is_struct and issubclass(macro, ExtensionMacro):
                conformances = [c for c in spec.conformances if c not in inherited]
                type_name = decl.name.text
                got = self._invoke(
                    context,
                    dattr,
                    lambda: _checked_nodes(
                        macro.expand_extensions(dattr, ddecl, type_name, conformances, context), name
                    ),
                )
                extensions.extend(self._expand_nested(context, dattr, name, got))

        # Nested macros are expanded while the declaration still sits in its original tree.
        visited = cast("S.StructDecl | S.FuncDecl", self.visit(decl))
        new_decl = self._remove_attributes(visited, consumed)
        indentation = new_decl.leading_trivia.indentation
        if members:
            new_decl = self._add_members(cast(S.StructDecl, new_decl), members, indentation)

        out = [new_decl]
        for extra in (*peers, *extensions):
            extra = _indented(extra, indentation)
            out.append(extra.with_leading_trivia(Trivia.newlines(2) + indentation))
        return out

    def _expand_nested(
        self, context: MacroExpansionContext, anchor: S.Syntax, name: str, got: object | None
    ) -> list[S.Syntax]:
        if got is None:
            return []
        expanded = self._reexpand(context, anchor, name, lambda: self._expand_items(cast("list[S.Syntax]", got)))
        return expanded if isinstance(expanded, list) else []

    def _remove_attributes(self, decl: S.StructDecl | S.FuncDecl, consumed: set[int]) -> S.Node:
        kept: list[S.Syntax] = []
        pending: Trivia | None = None
        for i, attr in enumerate(decl.attributes):
            if i in consumed:
                if pending is None:
                    pending = attr.leading_trivia
                continue
            if pending is not None:
                attr = attr.with_leading_trivia(pending + _drop_leading_whitespace(attr.leading_trivia))
                pending = None
            kept.append(attr)
        keyword = decl.keyword
        if pending is not None:
            keyword = keyword.with_leading_trivia(pending + _drop_leading_whitespace(keyword.leading_trivia))
        return decl.with_fields(attributes=S.AttributeList(kept), keyword=keyword)

    def _add_members(self, decl: S.StructDecl, members: list[S.Syntax], indentation: Trivia) -> S.Node:
        member_indentation = indentation + self.indentation_width
        body = decl.body
        items = list(body.items)
        for member in members:
            member = _indented(member, member_indentation)
            items.append(member.with_leading_trivia(Trivia.newlines(1) + member_indentation))
        rbrace = body.rbrace
        if not rbrace.leading_trivia.contains_newline:
            rbrace = rbrace.with_leading_trivia(Trivia.newlines(1) + indentation)
        new_body = body.with_fields(items=S.ItemList(items), rbrace=rbrace)
        return decl.with_fields(body=new_body)


def expand(
    tree: S.SourceFile,
    macros: MacroTable,
    context_factory: ContextFactory,
    indentation_width: Trivia = Trivia.spaces(4),
) -> S.SourceFile:
    """Expand every known macro in `tree` and return the expanded file.

    `context_factory` is called with each macro node (expansion or attribute)
    and must return the context the macro runs in. Unknown macros are left
    as written.
    """
    expander = _Expander(macro_specs(macros), context_factory, indentation_width)
    return cast(S.SourceFile, expander.visit(tree))
