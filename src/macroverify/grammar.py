"""
Grammar model plus the small operator DSL used to write productions:

    Expr |= Expr & PLUS & Term @ act_infix
    Item |= Binding | Func | Struct @ act_passthrough
    SemiOpt |= eps() @ act_none

`@` binds tighter than `&`, which binds tighter than `|`, so the action always
attaches to the last symbol and is then carried to the whole alternative.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import cast

from .tokens import TokenKind


@dataclass(frozen=True, slots=True)
class Terminal:
    kind: TokenKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True, slots=True)
class NonTerminal:
    name: str

    def __str__(self) -> str:
        return self.name


Symbol = Terminal | NonTerminal

ActionFn = Callable[[list[object]], object]


@dataclass(frozen=True, slots=True)
class Production:
    head: NonTerminal
    body: tuple[Symbol, ...]
    action: ActionFn

    def __str__(self) -> str:
        rhs = " ".join(str(s) for s in self.body) if self.body else "ε"
        return f"{self.head} -> {rhs}"


@dataclass(frozen=True, slots=True)
class Grammar:
    start: NonTerminal
    productions: tuple[Production, ...]

    def with_start(self, name: str) -> Grammar:
        start = NonTerminal(name)
        if not any(p.head == start for p in self.productions):
            raise ValueError(f"no productions for start symbol {name!r}")
        return Grammar(start=start, productions=self.productions)

    def nonterminals(self) -> set[NonTerminal]:
        return {p.head for p in self.productions}

    def terminals(self) -> set[TokenKind]:
        return {s.kind for p in self.productions for s in p.body if isinstance(s, Terminal)}


# ---------------------------------------------------------------------------
# DSL
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Seq:
    """An unbound right-hand side (a sequence of symbols without an action)."""

    syms: tuple[Symbol, ...]

    def __and__(self, other: Seq | Bound) -> Seq | Bound:
        if isinstance(other, Bound):
            if len(other.alts) != 1:
                raise TypeError("cannot concatenate onto an alternation")
            return Bound((self.syms + other.alts[0],), other.action)
        if isinstance(other, Seq):
            return Seq(self.syms + other.syms)
        return NotImplemented

    def __or__(self, other: Seq | Bound) -> Alternatives | Bound:
        if isinstance(other, Bound):
            return Bound((self.syms, *other.alts), other.action)
        if isinstance(other, Seq):
            return Alternatives((self.syms, other.syms))
        return NotImplemented

    def __matmul__(self, action: ActionFn) -> Bound:
        return Bound((self.syms,), action)


@dataclass(frozen=True, slots=True)
class Alternatives:
    alts: tuple[tuple[Symbol, ...], ...]

    def __or__(self, other: Seq | Bound) -> Alternatives | Bound:
        if isinstance(other, Bound):
            return Bound(self.alts + other.alts, other.action)
        if isinstance(other, Seq):
            return Alternatives(self.alts + (other.syms,))
        return NotImplemented

    def __matmul__(self, action: ActionFn) -> Bound:
        return Bound(self.alts, action)


@dataclass(frozen=True, slots=True)
class Bound:
    """One or more alternatives sharing a semantic action."""

    alts: tuple[tuple[Symbol, ...], ...]
    action: ActionFn

    def __and__(self, other: object):
        raise TypeError("`@ action` must come last in a production")

    def __or__(self, other: object):
        raise TypeError("`@ action` must come last in an alternation")


class Rule(Seq):
    """A nonterminal usable both inside right-hand sides and as `Rule |= rhs @ act`."""

    __slots__ = ("_sink",)

    def __init__(self, name: str, sink: list[Production]) -> None:
        object.__setattr__(self, "syms", (NonTerminal(name),))
        object.__setattr__(self, "_sink", sink)

    @property
    def symbol(self) -> NonTerminal:
        return cast(NonTerminal, self.syms[0])

    def __ior__(self, rhs: Bound) -> Rule:
        if not isinstance(rhs, Bound):
            raise TypeError("production missing action: use `rhs @ action`")
        for body in rhs.alts:
            self._sink.append(Production(head=self.symbol, body=body, action=rhs.action))
        return self


def term(kind: TokenKind) -> Seq:
    return Seq((Terminal(kind),))


def eps() -> Seq:
    return Seq(())
