from __future__ import annotations

from dataclasses import dataclass

from .errors import ParseError
from .grammar import Grammar
from .lalr import ParseTable, build_lalr_table
from .tokens import Token, TokenKind


def _token_display(kind: TokenKind) -> str:
    if kind is TokenKind.CALL_LPAREN:
        return "("
    if kind is TokenKind.EOF:
        return "end of file"
    return kind.value


def _describe(tok: Token) -> str:
    if tok.kind is TokenKind.EOF:
        return "end of file"
    return repr(tok.text)


@dataclass(slots=True)
class Parser:
    table: ParseTable

    @classmethod
    def for_grammar(cls, grammar: Grammar) -> Parser:
        return cls(table=build_lalr_table(grammar))

    def parse(self, tokens: list[Token]) -> object:
        """Run the LALR automaton over `tokens` (which must end with EOF)."""
        states: list[int] = [0]
        values: list[object] = []
        i = 0

        while True:
            state = states[-1]
            tok = tokens[i]
            act = self.table.action.get(state, {}).get(tok.kind)
            if act is None:
                expected = sorted({_token_display(k) for k in self.table.expected(state)})
                hint = f"expected one of: {', '.join(expected[:12])}" if expected else None
                raise ParseError(span=tok.span, message=f"unexpected {_describe(tok)}", hint=hint)

            kind, arg = act
            if kind == "shift":
                states.append(arg)
                values.append(tok)
                i += 1
                continue

            if kind == "reduce":
                prod = self.table.productions[arg]
                k = len(prod.body)
                if k > len(values):
                    raise RuntimeError(f"invalid reduce by '{prod}': stack underflow (state={state})")
                rhs_vals = values[-k:] if k else []
                if k:
                    del values[-k:]
                    del states[-k:]
                values.append(prod.action(rhs_vals))
                goto_state = self.table.goto.get(states[-1], {}).get(prod.head)
                if goto_state is None:
                    raise RuntimeError(f"no goto from state {states[-1]} on {prod.head}")
                states.append(goto_state)
                continue

            if kind == "accept":
                return values[-1]

            raise RuntimeError(f"unknown action: {act}")
