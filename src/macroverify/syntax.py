from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import ClassVar, cast

from .tokens import Token, TokenKind, Trivia


class Syntax:
    """Base of the lossless syntax tree.

    Nodes are immutable by convention. A node has at most one parent; placing a
    node that already has a parent into another node adopts a copy of it, so
    every tree built from existing nodes leaves the originals untouched.
    Identity (not structure) is used for hashing and equality.
    """

    __slots__ = ("_parent", "_index_in_parent", "_text_length")

    def __init__(self) -> None:
        self._parent: Node | None = None
        self._index_in_parent = 0
        self._text_length = 0

    @property
    def parent(self) -> Node | None:
        return self._parent

    @property
    def index_in_parent(self) -> int:
        return self._index_in_parent

    @property
    def text_length(self) -> int:
        return self._text_length

    @property
    def position(self) -> int:
        """Offset of the node, leading trivia included, within its root."""
        offset = 0
        node: Syntax = self
        while node._parent is not None:
            parent = node._parent
            for sibling in parent._children[: node._index_in_parent]:
                if sibling is not None:
                    offset += sibling._text_length
            node = parent
        return offset

    @property
    def end_position(self) -> int:
        return self.position + self._text_length

    @property
    def root(self) -> Syntax:
        node: Syntax = self
        while node._parent is not None:
            node = node._parent
        return node

    def ancestors(self) -> Iterator[Node]:
        node = self._parent
        while node is not None:
            yield node
            node = node._parent

    def tokens(self) -> Iterator[TokenSyntax]:
        raise NotImplementedError

    @property
    def first_token(self) -> TokenSyntax | None:
        return next(self.tokens(), None)

    @property
    def last_token(self) -> TokenSyntax | None:
        last = None
        for last in self.tokens():
            pass
        return last

    @property
    def leading_trivia(self) -> Trivia:
        tok = self.first_token
        return tok.leading_trivia if tok is not None else Trivia()

    @property
    def trailing_trivia(self) -> Trivia:
        tok = self.last_token
        return tok.trailing_trivia if tok is not None else Trivia()

    @property
    def position_after_skipping_leading_trivia(self) -> int:
        return self.position + len(self.leading_trivia)

    @property
    def end_position_before_trailing_trivia(self) -> int:
        return self.end_position - len(self.trailing_trivia)

    def token_at(self, position: int) -> TokenSyntax | None:
        """The token whose full text (trivia included) covers `position`.

        The end of the tree resolves to its last token.
        """
        offset = self.position
        last: TokenSyntax | None = None
        for tok in self.tokens():
            end = offset + tok.text_length
            if offset <= position < end:
                return tok
            offset = end
            last = tok
        if position == offset:
            return last
        return None

    def __str__(self) -> str:
        return "".join(tok.full_text for tok in self.tokens())

    @property
    def description(self) -> str:
        return str(self)

    @property
    def trimmed_description(self) -> str:
        text = str(self)
        return text[len(self.leading_trivia) : len(text) - len(self.trailing_trivia)]

    @property
    def debug_description(self) -> str:
        lines: list[str] = []
        self._dump(lines, label=None, depth=0)
        return "\n".join(lines)

    def _dump(self, out: list[str], *, label: str | None, depth: int) -> None:
        raise NotImplementedError

    def detached(self) -> Syntax:
        raise NotImplementedError

    def with_leading_trivia(self, trivia: Trivia) -> Syntax:
        tok = self.first_token
        if tok is None:
            return self.detached()
        return self.replacing(tok, tok.with_leading_trivia(trivia))

    def with_trailing_trivia(self, trivia: Trivia) -> Syntax:
        tok = self.last_token
        if tok is None:
            return self.detached()
        return self.replacing(tok, tok.with_trailing_trivia(trivia))

    def rewriting_tokens(self, fn: Callable[[TokenSyntax], TokenSyntax]) -> Syntax:
        """Detached copy with every token passed through `fn`."""
        if isinstance(self, TokenSyntax):
            return fn(self)
        node = cast(Node, self)
        return node._with_children(
            c.rewriting_tokens(fn) if c is not None else None for c in self._children
        )

    def replacing(self, target: Syntax, replacement: Syntax | None) -> Syntax:
        """Copy of this subtree with `target` swapped for `replacement`."""
        if target is self:
            if replacement is None:
                raise ValueError("cannot replace a node with nothing")
            return replacement if replacement._parent is None else replacement.detached()
        path: list[int] = []
        node = target
        while node is not self:
            if node._parent is None:
                raise ValueError(f"{type(target).__name__} is not inside {type(self).__name__}")
            path.append(node._index_in_parent)
            node = node._parent
        path.reverse()
        return cast(Node, self)._rebuilt(path, replacement)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.trimmed_description!r})"


class TokenSyntax(Syntax):
    __slots__ = ("kind", "text", "_leading_trivia", "_trailing_trivia")

    def __init__(
        self,
        kind: TokenKind,
        text: str,
        leading_trivia: Trivia = Trivia(),
        trailing_trivia: Trivia = Trivia(),
    ) -> None:
        super().__init__()
        self.kind = kind
        self.text = text
        self._leading_trivia = leading_trivia
        self._trailing_trivia = trailing_trivia
        self._text_length = len(leading_trivia) + len(text) + len(trailing_trivia)

    @classmethod
    def from_token(cls, tok: Token) -> TokenSyntax:
        return cls(tok.kind, tok.text, tok.leading_trivia, tok.trailing_trivia)

    @classmethod
    def keyword(cls, kind: TokenKind, *, leading: Trivia = Trivia(), trailing: Trivia = Trivia()) -> TokenSyntax:
        return cls(kind, kind.value, leading, trailing)

    @property
    def leading_trivia(self) -> Trivia:
        return self._leading_trivia

    @property
    def trailing_trivia(self) -> Trivia:
        return self._trailing_trivia

    @property
    def full_text(self) -> str:
        return f"{self._leading_trivia}{self.text}{self._trailing_trivia}"

    def tokens(self) -> Iterator[TokenSyntax]:
        yield self

    def with_leading_trivia(self, trivia: Trivia) -> TokenSyntax:
        return TokenSyntax(self.kind, self.text, trivia, self._trailing_trivia)

    def with_trailing_trivia(self, trivia: Trivia) -> TokenSyntax:
        return TokenSyntax(self.kind, self.text, self._leading_trivia, trivia)

    def detached(self) -> TokenSyntax:
        return TokenSyntax(self.kind, self.text, self._leading_trivia, self._trailing_trivia)

    def _dump(self, out: list[str], *, label: str | None, depth: int) -> None:
        prefix = "  " * depth + (f"{label}: " if label else "")
        out.append(f"{prefix}{self.kind.name} {self.text!r}")


class Child:
    """Named child slot of a node class; resolved to an index at class creation."""

    __slots__ = ("name", "index")

    def __init__(self) -> None:
        self.name = ""
        self.index = -1

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Node | None, objtype: type | None = None):
        if obj is None:
            return self
        return obj._children[self.index]


class Node(Syntax):
    __slots__ = ("_children",)

    FIELDS: ClassVar[tuple[str, ...]] = ()

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        fields = [name for name, v in vars(cls).items() if isinstance(v, Child)]
        if fields:
            for i, name in enumerate(fields):
                vars(cls)[name].index = i
            cls.FIELDS = tuple(fields)

    def __init__(self, *args: Syntax | None, **kwargs: Syntax | None) -> None:
        super().__init__()
        if len(args) > len(self.FIELDS):
            raise TypeError(f"{type(self).__name__} takes at most {len(self.FIELDS)} children")
        values: dict[str, Syntax | None] = dict(zip(self.FIELDS, args))
        for name, value in kwargs.items():
            if name not in self.FIELDS:
                raise TypeError(f"{type(self).__name__} has no child {name!r}")
            if name in values:
                raise TypeError(f"{type(self).__name__} got child {name!r} twice")
            values[name] = value
        self._adopt([values.get(name) for name in self.FIELDS])

    def _adopt(self, children: Iterable[Syntax | None]) -> None:
        adopted: list[Syntax | None] = []
        length = 0
        for i, child in enumerate(children):
            if child is not None:
                if child._parent is not None:
                    child = child.detached()
                child._parent = self
                child._index_in_parent = i
                length += child._text_length
            adopted.append(child)
        self._children: tuple[Syntax | None, ...] = tuple(adopted)
        self._text_length = length

    @property
    def children(self) -> tuple[Syntax | None, ...]:
        return self._children

    def _with_children(self, children: Iterable[Syntax | None]) -> Node:
        node = type(self).__new__(type(self))
        Syntax.__init__(node)
        node._adopt(children)
        return node

    def _rebuilt(self, path: list[int], replacement: Syntax | None) -> Node:
        index = path[0]
        children = list(self._children)
        if len(path) == 1:
            children[index] = replacement
        else:
            child = children[index]
            children[index] = cast(Node, child)._rebuilt(path[1:], replacement)
        return self._with_children(children)

    def tokens(self) -> Iterator[TokenSyntax]:
        for child in self._children:
            if child is not None:
                yield from child.tokens()

    def detached(self) -> Node:
        return self._with_children(c.detached() if c is not None else None for c in self._children)

    def with_fields(self, **changes: Syntax | None) -> Node:
        """Copy with the named children replaced."""
        children = list(self._children)
        for name, value in changes.items():
            if name not in self.FIELDS:
                raise TypeError(f"{type(self).__name__} has no child {name!r}")
            children[self.FIELDS.index(name)] = value
        return self._with_children(children)

    def _labels(self) -> Iterator[str]:
        return iter(self.FIELDS)

    def _dump(self, out: list[str], *, label: str | None, depth: int) -> None:
        prefix = "  " * depth + (f"{label}: " if label else "")
        out.append(f"{prefix}{type(self).__name__}")
        for name, child in zip(self._labels(), self._children):
            if child is None:
                out.append("  " * (depth + 1) + f"{name}: nil")
            else:
                child._dump(out, label=name, depth=depth + 1)


class SyntaxCollection(Node):
    """A node whose children are a homogeneous sequence."""

    def __init__(self, elements: Iterable[Syntax] = ()) -> None:
        Syntax.__init__(self)
        self._adopt(elements)

    def __iter__(self) -> Iterator[Syntax]:
        return iter(c for c in self._children if c is not None)

    def __len__(self) -> int:
        return len(self._children)

    def __getitem__(self, index: int) -> Syntax:
        child = self._children[index]
        if child is None:
            raise IndexError(f"no child at index {index}")
        return child

    def _labels(self) -> Iterator[str]:
        return (f"[{i}]" for i in range(len(self._children)))

    def appending(self, element: Syntax) -> SyntaxCollection:
        return self._with_children([*self._children, element])  # type: ignore[return-value]

    def removing(self, element: Syntax) -> SyntaxCollection:
        return self._with_children([c for c in self._children if c is not element])  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


class ItemList(SyntaxCollection):
    pass


class ArgumentList(SyntaxCollection):
    pass


class ParameterList(SyntaxCollection):
    pass


class AttributeList(SyntaxCollection):
    pass


class InheritedTypeList(SyntaxCollection):
    pass


# ---------------------------------------------------------------------------
# File structure / declarations
# ---------------------------------------------------------------------------


class SourceFile(Node):
    items = Child()
    eof = Child()


class Block(Node):
    lbrace = Child()
    items = Child()
    rbrace = Child()


class BindingDecl(Node):
    keyword = Child()
    name = Child()
    equal = Child()
    value = Child()
    semicolon = Child()


class Attribute(Node):
    at = Child()
    name = Child()

    @property
    def attribute_name(self) -> str:
        return self.name.text


class Parameter(Node):
    name = Child()
    comma = Child()


class FuncDecl(Node):
    attributes = Child()
    keyword = Child()
    name = Child()
    lparen = Child()
    params = Child()
    rparen = Child()
    body = Child()


class InheritedType(Node):
    name = Child()
    comma = Child()


class InheritanceClause(Node):
    colon = Child()
    types = Child()

    @property
    def type_names(self) -> list[str]:
        return [t.name.text for t in self.types]


class StructDecl(Node):
    attributes = Child()
    keyword = Child()
    name = Child()
    inheritance = Child()
    body = Child()


class ExtensionDecl(Node):
    keyword = Child()
    name = Child()
    inheritance = Child()
    body = Child()


# ---------------------------------------------------------------------------
# Statements / expressions
# ---------------------------------------------------------------------------


class ExprStmt(Node):
    expression = Child()
    semicolon = Child()


class ReturnStmt(Node):
    keyword = Child()
    expression = Child()
    semicolon = Child()


class InfixExpr(Node):
    left = Child()
    operator = Child()
    right = Child()


class IntegerLiteral(Node):
    literal = Child()


class StringLiteral(Node):
    literal = Child()

    @classmethod
    def from_value(cls, value: str) -> StringLiteral:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return cls(literal=TokenSyntax(TokenKind.STRING, f'"{escaped}"'))

    @property
    def value(self) -> str:
        body = self.literal.text[1:-1]
        out: list[str] = []
        i = 0
        while i < len(body):
            ch = body[i]
            if ch == "\\" and i + 1 < len(body):
                nxt = body[i + 1]
                out.append({"n": "\n", "t": "\t"}.get(nxt, nxt))
                i += 2
                continue
            out.append(ch)
            i += 1
        return "".join(out)


class BooleanLiteral(Node):
    literal = Child()


class DeclReferenceExpr(Node):
    name = Child()


class Argument(Node):
    expression = Child()
    comma = Child()


class CallExpr(Node):
    callee = Child()
    lparen = Child()
    arguments = Child()
    rparen = Child()


class TupleExpr(Node):
    lparen = Child()
    elements = Child()
    rparen = Child()


class MacroExpansion(Node):
    """`#name` or `#name(args)`: a freestanding macro."""

    pound = Child()
    name = Child()
    lparen = Child()
    arguments = Child()
    rparen = Child()

    @property
    def macro_name(self) -> str:
        return self.name.text

    @property
    def argument_expressions(self) -> list[Syntax]:
        if self.arguments is None:
            return []
        return [arg.expression for arg in self.arguments]


DECL_TYPES: tuple[type[Node], ...] = (BindingDecl, FuncDecl, StructDecl, ExtensionDecl)
EXPR_TYPES: tuple[type[Node], ...] = (
    InfixExpr,
    IntegerLiteral,
    StringLiteral,
    BooleanLiteral,
    DeclReferenceExpr,
    CallExpr,
    TupleExpr,
    MacroExpansion,
)
