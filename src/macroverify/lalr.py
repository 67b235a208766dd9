from __future__ import annotations

import logging
from dataclasses import dataclass

from .grammar import Grammar, NonTerminal, Production, Symbol, Terminal
from .tokens import TokenKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LR1Item:
    prod: int
    dot: int
    lookahead: TokenKind


@dataclass(frozen=True, slots=True)
class ParseTable:
    """ACTION / GOTO tables for an LALR(1) parser.

    ACTION[state][terminal] = ("shift", next_state) | ("reduce", prod_index) | ("accept", 0)
    GOTO[state][nonterminal] = next_state

    `productions[0]` is the augmented start production; reduce indexes refer to
    this tuple.
    """

    action: dict[int, dict[TokenKind, tuple[str, int]]]
    goto: dict[int, dict[NonTerminal, int]]
    productions: tuple[Production, ...]

    def expected(self, state: int) -> set[TokenKind]:
        return set(self.action.get(state, {}))


class GrammarAnalysisError(Exception):
    pass


def _first_sets(
    productions: tuple[Production, ...],
) -> tuple[dict[NonTerminal, set[TokenKind]], set[NonTerminal]]:
    first: dict[NonTerminal, set[TokenKind]] = {p.head: set() for p in productions}
    nullable: set[NonTerminal] = set()
    changed = True
    while changed:
        changed = False
        for p in productions:
            acc = first[p.head]
            before = (len(acc), p.head in nullable)
            for sym in p.body:
                if isinstance(sym, Terminal):
                    acc.add(sym.kind)
                    break
                acc |= first[sym]
                if sym not in nullable:
                    break
            else:
                nullable.add(p.head)
            if (len(acc), p.head in nullable) != before:
                changed = True
    return first, nullable


def build_lalr_table(grammar: Grammar) -> ParseTable:
    """Canonical LR(1) collection merged by LR(0) core.

    Raises GrammarAnalysisError on any shift/reduce or reduce/reduce conflict;
    there is no precedence-based resolution.
    """
    accept = Production(
        head=NonTerminal(grammar.start.name + "'"),
        body=(grammar.start,),
        action=lambda xs: xs[0],
    )
    prods = (accept,) + grammar.productions
    by_head: dict[NonTerminal, list[int]] = {}
    for i, p in enumerate(prods):
        by_head.setdefault(p.head, []).append(i)

    first, nullable = _first_sets(prods)

    def first_of(seq: tuple[Symbol, ...], lookahead: TokenKind) -> set[TokenKind]:
        out: set[TokenKind] = set()
        for sym in seq:
            if isinstance(sym, Terminal):
                out.add(sym.kind)
                return out
            out |= first[sym]
            if sym not in nullable:
                return out
        out.add(lookahead)
        return out

    closures: dict[frozenset[LR1Item], frozenset[LR1Item]] = {}

    def closure(kernel: frozenset[LR1Item]) -> frozenset[LR1Item]:
        cached = closures.get(kernel)
        if cached is not None:
            return cached
        items = set(kernel)
        work = list(kernel)
        while work:
            it = work.pop()
            body = prods[it.prod].body
            if it.dot >= len(body):
                continue
            sym = body[it.dot]
            if not isinstance(sym, NonTerminal):
                continue
            if sym not in by_head:
                raise GrammarAnalysisError(f"no productions for {sym}")
            lookaheads = first_of(body[it.dot + 1 :], it.lookahead)
            for j in by_head[sym]:
                for la in lookaheads:
                    new = LR1Item(j, 0, la)
                    if new not in items:
                        items.add(new)
                        work.append(new)
        out = frozenset(items)
        closures[kernel] = out
        return out

    # Canonical LR(1) states
    states: list[frozenset[LR1Item]] = [closure(frozenset({LR1Item(0, 0, TokenKind.EOF)}))]
    index: dict[frozenset[LR1Item], int] = {states[0]: 0}
    transitions: dict[tuple[int, Symbol], int] = {}
    work = [0]
    while work:
        i = work.pop()
        moves: dict[Symbol, set[LR1Item]] = {}
        for it in states[i]:
            body = prods[it.prod].body
            if it.dot < len(body):
                moves.setdefault(body[it.dot], set()).add(LR1Item(it.prod, it.dot + 1, it.lookahead))
        for sym, kernel in moves.items():
            target = closure(frozenset(kernel))
            j = index.get(target)
            if j is None:
                j = len(states)
                index[target] = j
                states.append(target)
                work.append(j)
            transitions[(i, sym)] = j

    # Merge states sharing an LR(0) core
    cores: dict[frozenset[tuple[int, int]], int] = {}
    old_to_new: list[int] = []
    for st in states:
        core = frozenset((it.prod, it.dot) for it in st)
        old_to_new.append(cores.setdefault(core, len(cores)))
    merged: list[set[LR1Item]] = [set() for _ in cores]
    for i, st in enumerate(states):
        merged[old_to_new[i]] |= st

    action: dict[int, dict[TokenKind, tuple[str, int]]] = {}
    goto: dict[int, dict[NonTerminal, int]] = {}

    def describe(act: tuple[str, int]) -> str:
        kind, arg = act
        if kind == "reduce":
            return f"reduce {prods[arg]}"
        return f"{kind} {arg}"

    def add_action(state: int, la: TokenKind, act: tuple[str, int]) -> None:
        row = action.setdefault(state, {})
        prev = row.get(la)
        if prev is not None and prev != act:
            raise GrammarAnalysisError(
                f"conflict in state {state} on {la.value!r}: {describe(prev)} vs {describe(act)}"
            )
        row[la] = act

    for (i, sym), j in transitions.items():
        src, dst = old_to_new[i], old_to_new[j]
        if isinstance(sym, Terminal):
            add_action(src, sym.kind, ("shift", dst))
        else:
            goto.setdefault(src, {})[sym] = dst

    for state, items in enumerate(merged):
        for it in items:
            if it.dot < len(prods[it.prod].body):
                continue
            if it.prod == 0:
                add_action(state, TokenKind.EOF, ("accept", 0))
            else:
                add_action(state, it.lookahead, ("reduce", it.prod))

    logger.debug(
        "built LALR(1) table for %s: %d LR(1) states, %d merged",
        grammar.start,
        len(states),
        len(merged),
    )
    return ParseTable(action=action, goto=goto, productions=prods)
