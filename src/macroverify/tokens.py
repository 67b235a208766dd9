from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .spans import Span


class TokenKind(str, Enum):
    # Identifiers and literals
    IDENT = "IDENT"
    INT = "INT"
    STRING = "STRING"

    # Punctuation / operators
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    CALL_LPAREN = "call ("  # "(" written directly after an identifier
    RPAREN = ")"
    COMMA = ","
    SEMI = ";"
    COLON = ":"
    EQ = "="
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    POUND = "#"
    AT = "@"

    # Keywords
    LET = "let"
    VAR = "var"
    FUNC = "func"
    STRUCT = "struct"
    EXTENSION = "extension"
    RETURN = "return"
    TRUE = "true"
    FALSE = "false"

    EOF = "EOF"


class TriviaKind(str, Enum):
    SPACES = "spaces"
    TABS = "tabs"
    NEWLINES = "newlines"
    CARRIAGE_RETURNS = "carriage_returns"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"


@dataclass(frozen=True, slots=True)
class TriviaPiece:
    kind: TriviaKind
    text: str


@dataclass(frozen=True, slots=True)
class Trivia:
    """Whitespace and comments attached to one side of a token."""

    pieces: tuple[TriviaPiece, ...] = ()

    @classmethod
    def spaces(cls, count: int) -> Trivia:
        if count <= 0:
            return cls()
        return cls((TriviaPiece(TriviaKind.SPACES, " " * count),))

    @classmethod
    def newlines(cls, count: int = 1) -> Trivia:
        if count <= 0:
            return cls()
        return cls((TriviaPiece(TriviaKind.NEWLINES, "\n" * count),))

    @classmethod
    def parse(cls, text: str) -> Trivia:
        """Split raw whitespace/comment text into pieces."""
        pieces: list[TriviaPiece] = []
        i = 0
        while i < len(text):
            ch = text[i]
            if text.startswith("//", i):
                j = text.find("\n", i)
                j = len(text) if j < 0 else j
                pieces.append(TriviaPiece(TriviaKind.LINE_COMMENT, text[i:j]))
            elif text.startswith("/*", i):
                j = text.find("*/", i + 2)
                j = len(text) if j < 0 else j + 2
                pieces.append(TriviaPiece(TriviaKind.BLOCK_COMMENT, text[i:j]))
            else:
                kind = _WHITESPACE_KINDS.get(ch)
                if kind is None:
                    raise ValueError(f"not trivia: {ch!r} in {text!r}")
                j = i
                while j < len(text) and text[j] == ch:
                    j += 1
                pieces.append(TriviaPiece(kind, text[i:j]))
            i = j
        return cls(tuple(pieces))

    def __str__(self) -> str:
        return "".join(p.text for p in self.pieces)

    def __add__(self, other: Trivia) -> Trivia:
        return Trivia(self.pieces + other.pieces)

    def __len__(self) -> int:
        return sum(len(p.text) for p in self.pieces)

    @property
    def contains_newline(self) -> bool:
        return any(p.kind is TriviaKind.NEWLINES for p in self.pieces)

    @property
    def indentation(self) -> Trivia:
        """Whitespace following the last newline, i.e. the indentation of the token."""
        out: list[TriviaPiece] = []
        for p in self.pieces:
            if p.kind is TriviaKind.NEWLINES:
                out = []
            elif p.kind in (TriviaKind.SPACES, TriviaKind.TABS):
                out.append(p)
            else:
                out = []
        return Trivia(tuple(out))

    def indented(self, indentation: Trivia) -> Trivia:
        """Insert `indentation` after every newline."""
        if not indentation.pieces or not self.contains_newline:
            return self
        out: list[TriviaPiece] = []
        for p in self.pieces:
            out.append(p)
            if p.kind is TriviaKind.NEWLINES:
                out.extend(indentation.pieces)
        return Trivia(tuple(out))


_WHITESPACE_KINDS: dict[str, TriviaKind] = {
    " ": TriviaKind.SPACES,
    "\t": TriviaKind.TABS,
    "\n": TriviaKind.NEWLINES,
    "\r": TriviaKind.CARRIAGE_RETURNS,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A lexed token; `text` is the exact source text of the token itself."""

    kind: TokenKind
    text: str
    span: Span
    leading_trivia: Trivia = Trivia()
    trailing_trivia: Trivia = Trivia()

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.text!r}, {self.span.format()})"
