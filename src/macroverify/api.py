from __future__ import annotations

from pathlib import Path
from typing import cast

from . import syntax as S
from .errors import ParseError
from .language import build_grammar
from .lexer import tokenize
from .parser import Parser
from .tokens import Token


_PARSERS: dict[str, Parser] = {}


def _get_parser(start: str) -> Parser:
    parser = _PARSERS.get(start)
    if parser is None:
        parser = Parser.for_grammar(build_grammar().with_start(start))
        _PARSERS[start] = parser
    return parser


def _absorb_eof_trivia(node: S.Syntax, eof: Token) -> S.Syntax:
    # Fragments have no EOF token to hold trailing text; fold it into the last token.
    if not eof.leading_trivia.pieces:
        return node
    return node.with_trailing_trivia(node.trailing_trivia + eof.leading_trivia)


def parse_source(src: str, *, file: str = "<memory>") -> S.SourceFile:
    toks = tokenize(src, file=file)
    items = _get_parser("Items").parse(toks)
    if not isinstance(items, list):
        raise RuntimeError(f"parser returned unexpected value: {type(items)!r}")
    return S.SourceFile(items=S.ItemList(items), eof=S.TokenSyntax.from_token(toks[-1]))


def parse_items(src: str, *, file: str = "<memory>") -> S.ItemList:
    toks = tokenize(src, file=file)
    items = _get_parser("Items").parse(toks)
    if not isinstance(items, list):
        raise RuntimeError(f"parser returned unexpected value: {type(items)!r}")
    out = S.ItemList(items)
    if not items:
        return out
    return cast(S.ItemList, _absorb_eof_trivia(out, toks[-1]))


def parse_item(src: str, *, file: str = "<memory>") -> S.Syntax:
    items = parse_items(src, file=file)
    if len(items) != 1:
        toks = tokenize(src, file=file)
        raise ParseError(
            span=toks[0].span,
            message=f"expected exactly one item, found {len(items)}",
        )
    return items[0].detached()


def parse_expr(src: str, *, file: str = "<memory>") -> S.Syntax:
    toks = tokenize(src, file=file)
    expr = _get_parser("Expr").parse(toks)
    if not isinstance(expr, S.Syntax):
        raise RuntimeError(f"parser returned unexpected value: {type(expr)!r}")
    return _absorb_eof_trivia(expr, toks[-1])


def parse_file(path: str | Path) -> S.SourceFile:
    p = Path(path).expanduser().resolve()
    src = p.read_text(encoding="utf-8")
    return parse_source(src, file=str(p))
