from __future__ import annotations

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from macroverify import parse_source
from macroverify.language import KEYWORDS
from macroverify.lexer import tokenize


def _ident() -> st.SearchStrategy[str]:
    # Keep it simple and avoid keywords for the generator.
    head = st.sampled_from(list("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_"))
    tail = st.text(alphabet=list("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_0123456789"), min_size=0, max_size=12)
    return st.builds(lambda h, t: h + t, head, tail).filter(lambda s: s not in KEYWORDS)


def _gap() -> st.SearchStrategy[str]:
    return st.sampled_from(["", " ", "  ", "\t", " /* c */ "])


def _line_end() -> st.SearchStrategy[str]:
    return st.sampled_from(["\n", "\n\n", " // note\n", "\r\n", ";\n"])


@st.composite
def expressions(draw, depth: int = 2) -> str:
    atoms = [
        st.integers(min_value=0, max_value=10**6).map(str),
        _ident(),
        st.sampled_from(["true", "false", '""', '"text"', '"esc \\" q"']),
    ]
    out = draw(st.one_of(*atoms))
    if depth > 0 and draw(st.booleans()):
        args = draw(st.lists(expressions(depth - 1), max_size=3))
        kind = draw(st.sampled_from(["call", "tuple", "macro"]))
        joined = ", ".join(args)
        if kind == "call":
            out = f"{draw(_ident())}({joined})"
        elif kind == "tuple":
            out = f"({joined})"
        else:
            out = f"#{draw(_ident())}({joined})"
    for _ in range(draw(st.integers(min_value=0, max_value=2))):
        op = draw(st.sampled_from(["+", "-", "*", "/"]))
        g = draw(st.sampled_from(["", " "]))
        out = f"{out}{g}{op}{g}{draw(expressions(0))}"
    return out


@st.composite
def sources(draw) -> str:
    # Always-valid programs mixing every item kind with varied trivia.
    lines: list[str] = []
    for _ in range(draw(st.integers(min_value=0, max_value=6))):
        kind = draw(st.sampled_from(["let", "expr", "func", "struct"]))
        g = draw(_gap())
        if kind == "let":
            kw = draw(st.sampled_from(["let", "var"]))
            lines.append(f"{kw} {draw(_ident())}{g}={g}{draw(expressions())}{draw(_line_end())}")
        elif kind == "expr":
            lines.append(f"{draw(expressions())}{draw(_line_end())}")
        elif kind == "func":
            params = ", ".join(draw(st.lists(_ident(), max_size=3)))
            body = f"    return {draw(expressions())}\n" if draw(st.booleans()) else ""
            lines.append(f"func {draw(_ident())}({params}){g}{{\n{body}}}\n")
        else:
            attrs = "".join(f"@{a}\n" for a in draw(st.lists(_ident(), max_size=2)))
            inherit = draw(st.lists(_ident(), max_size=2))
            clause = f": {', '.join(inherit)}" if inherit else ""
            lines.append(f"{attrs}struct {draw(_ident())}{clause} {{\n    let x = 1\n}}\n")
    return "".join(lines)


@given(sources())
@settings(
    max_examples=300,
    suppress_health_check=[HealthCheck.too_slow],
)
def test_fuzz_roundtrip_lossless(src: str) -> None:
    tree = parse_source(src, file="fuzz.mv")
    assert str(tree) == src
    assert sum(t.text_length for t in tree.tokens()) == len(src)


@given(sources())
@settings(max_examples=100)
def test_fuzz_tokens_concatenate_to_source(src: str) -> None:
    toks = tokenize(src, file="fuzz.mv")
    assert "".join(f"{t.leading_trivia}{t.text}{t.trailing_trivia}" for t in toks) == src
    assert toks[-1].text == ""
