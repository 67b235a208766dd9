from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import ParseError
from .language import KEYWORDS, PUNCTUATION
from .spans import Position, Span
from .tokens import Token, TokenKind, Trivia


_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INT_RE = re.compile(r"[0-9]+")


@dataclass(slots=True)
class _Cursor:
    file: str
    src: str
    i: int = 0
    line: int = 1
    col: int = 1

    def eof(self) -> bool:
        return self.i >= len(self.src)

    def peek(self, n: int = 0) -> str:
        j = self.i + n
        if j >= len(self.src):
            return ""
        return self.src[j]

    def advance(self, n: int = 1) -> None:
        for _ in range(n):
            if self.eof():
                return
            ch = self.src[self.i]
            self.i += 1
            if ch == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1

    def pos(self) -> Position:
        return Position(offset=self.i, line=self.line, column=self.col)


def tokenize(src: str, *, file: str = "<memory>") -> list[Token]:
    """Split `src` into tokens carrying their surrounding trivia.

    A token's trailing trivia runs up to, but not including, the next newline;
    everything after that belongs to the leading trivia of the following token.
    Concatenating leading trivia, text and trailing trivia of all tokens
    (EOF included) reproduces `src` exactly.
    """
    cur = _Cursor(file=file, src=src)
    tokens: list[Token] = []

    def make_span(start: Position, end: Position) -> Span:
        return Span(file=file, start=start, end=end)

    def error_at(start: Position, msg: str, hint: str | None = None) -> ParseError:
        end = cur.pos()
        if end.offset < start.offset:
            end = start
        return ParseError(span=make_span(start, end), message=msg, hint=hint)

    def skip_trivia(*, stop_at_newline: bool) -> Trivia:
        start = cur.i
        while not cur.eof():
            ch = cur.peek()
            if ch == "\n" and stop_at_newline:
                break
            if ch in " \t\r\n":
                cur.advance()
                continue
            if ch == "/" and cur.peek(1) == "/":
                while not cur.eof() and cur.peek() != "\n":
                    cur.advance()
                continue
            if ch == "/" and cur.peek(1) == "*":
                comment_start = cur.pos()
                cur.advance(2)
                while not cur.eof():
                    if cur.peek() == "*" and cur.peek(1) == "/":
                        cur.advance(2)
                        break
                    cur.advance()
                else:
                    raise error_at(comment_start, "unterminated block comment", hint="add closing */")
                continue
            break
        return Trivia.parse(src[start : cur.i])

    def lex_one(start: Position) -> tuple[TokenKind, str]:
        ch = cur.peek()

        if ch == '"':
            cur.advance()
            while not cur.eof():
                c = cur.peek()
                if c == '"':
                    cur.advance()
                    return TokenKind.STRING, src[start.offset : cur.i]
                if c == "\n":
                    raise error_at(start, "unterminated string literal", hint="close the quote")
                if c == "\\":
                    cur.advance()
                    if cur.eof():
                        raise error_at(start, "unterminated string escape")
                cur.advance()
            raise error_at(start, "unterminated string literal", hint="close the quote")

        m = _INT_RE.match(src, cur.i)
        if m:
            cur.advance(len(m.group(0)))
            return TokenKind.INT, m.group(0)

        m = _IDENT_RE.match(src, cur.i)
        if m:
            lex = m.group(0)
            cur.advance(len(lex))
            return KEYWORDS.get(lex, TokenKind.IDENT), lex

        kind = PUNCTUATION.get(ch)
        if kind is not None:
            cur.advance()
            return kind, ch

        raise error_at(
            start,
            f"unexpected character {ch!r}",
            hint="remove the character or replace it with valid syntax",
        )

    leading = skip_trivia(stop_at_newline=False)
    while not cur.eof():
        start = cur.pos()
        kind, text = lex_one(start)
        end = cur.pos()
        # A paren glued to an identifier opens an argument list, any other one a tuple.
        if (
            kind is TokenKind.LPAREN
            and not leading.pieces
            and tokens
            and tokens[-1].kind is TokenKind.IDENT
            and not tokens[-1].trailing_trivia.pieces
        ):
            kind = TokenKind.CALL_LPAREN
        trailing = skip_trivia(stop_at_newline=True)
        tokens.append(Token(kind, text, make_span(start, end), leading, trailing))
        leading = skip_trivia(stop_at_newline=False)

    eof_pos = cur.pos()
    tokens.append(Token(TokenKind.EOF, "", Span(file=file, start=eof_pos, end=eof_pos), leading))
    return tokens
