from __future__ import annotations

import random
import string

from ..language import KEYWORDS


_OPERATORS = ["+", "-", "*", "/"]
_MACRO_NAMES = ["stringify", "addBlocker", "declare", "unique", "echo"]
_ATTRIBUTE_NAMES = ["AddCompletionHandler", "Equatable", "AddMembers", "Peer"]


def _ident(r: random.Random) -> str:
    head = r.choice(string.ascii_letters + "_")
    tail = "".join(r.choice(string.ascii_letters + string.digits + "_") for _ in range(r.randint(0, 10)))
    s = head + tail
    if s in KEYWORDS:
        return s + "_"
    return s


def generate_sources(*, seed: int, count: int) -> list[str]:
    """Deterministic list of syntactically valid sources."""
    r = random.Random(seed)
    return [_gen_one(r) for _ in range(count)]


def generate_corpus_files(*, seed: int, count: int) -> list[tuple[str, str]]:
    """Generate a deterministic corpus as a *file set*.

    Returns a list of (relative_path, source). File names are stable:
    `case_000000.mv`, ...
    """
    r = random.Random(seed)
    return [(f"case_{i:06d}.mv", _gen_one(r)) for i in range(count)]


def _gen_one(r: random.Random) -> str:
    parts: list[str] = []
    if r.random() < 0.3:
        parts.append(f"// {_ident(r)} {_ident(r)}")

    for _ in range(r.randint(1, 5)):
        k = r.random()
        if k < 0.3:
            parts.append(_gen_binding(r))
        elif k < 0.5:
            parts.append(_gen_func(r, 0))
        elif k < 0.7:
            parts.append(_gen_struct(r))
        elif k < 0.8:
            parts.append(_gen_extension(r))
        else:
            parts.append(_gen_expr(r, 2) + _semi(r))
    parts.append("")
    return "\n".join(parts)


def _semi(r: random.Random) -> str:
    return ";" if r.random() < 0.5 else ""


def _string_lit(r: random.Random) -> str:
    alphabet = string.ascii_letters + string.digits + " _-+"
    s = "".join(r.choice(alphabet) for _ in range(r.randint(0, 16)))
    if r.random() < 0.1:
        s += '\\"'
    return '"' + s + '"'


def _gen_primary(r: random.Random, depth: int) -> str:
    k = r.random()
    if depth <= 0 or k < 0.25:
        return str(r.randint(0, 10_000))
    if k < 0.35:
        return _string_lit(r)
    if k < 0.4:
        return r.choice(["true", "false"])
    if k < 0.6:
        return _ident(r)
    if k < 0.72:
        args = ", ".join(_gen_expr(r, depth - 1) for _ in range(r.randint(0, 3)))
        return f"{_ident(r)}({args})"
    if k < 0.82:
        args = ", ".join(_gen_expr(r, depth - 1) for _ in range(r.randint(0, 3)))
        return f"({args})"
    name = r.choice(_MACRO_NAMES)
    if r.random() < 0.3:
        return f"#{name}"
    args = ", ".join(_gen_expr(r, depth - 1) for _ in range(r.randint(0, 2)))
    return f"#{name}({args})"


def _gen_expr(r: random.Random, depth: int) -> str:
    out = _gen_primary(r, depth)
    for _ in range(r.randint(0, 2)):
        op = r.choice(_OPERATORS)
        space = " " if r.random() < 0.8 else ""
        out = f"{out}{space}{op}{space}{_gen_primary(r, depth - 1)}"
    return out


def _gen_binding(r: random.Random, indent: str = "") -> str:
    kw = r.choice(["let", "var"])
    comment = f" // {_ident(r)}" if r.random() < 0.1 else ""
    return f"{indent}{kw} {_ident(r)} = {_gen_expr(r, 2)}{_semi(r)}{comment}"


def _attributes(r: random.Random, indent: str) -> list[str]:
    return [f"{indent}@{r.choice(_ATTRIBUTE_NAMES)}" for _ in range(r.randint(0, 2))]


def _gen_func(r: random.Random, level: int) -> str:
    indent = "    " * level
    inner = "    " * (level + 1)
    params = ", ".join(_ident(r) for _ in range(r.randint(0, 3)))
    paren = "(" if r.random() < 0.9 else " ("
    lines = _attributes(r, indent)
    lines.append(f"{indent}func {_ident(r)}{paren}{params}) {{")
    for _ in range(r.randint(0, 3)):
        if r.random() < 0.5:
            lines.append(_gen_binding(r, inner))
        else:
            lines.append(f"{inner}{_gen_expr(r, 2)}{_semi(r)}")
    if r.random() < 0.6:
        lines.append(f"{inner}return {_gen_expr(r, 2)}{_semi(r)}")
    lines.append(f"{indent}}}")
    return "\n".join(lines)


def _inheritance(r: random.Random) -> str:
    if r.random() < 0.6:
        return ""
    return ": " + ", ".join(_ident(r) for _ in range(r.randint(1, 3)))


def _gen_body(r: random.Random) -> list[str]:
    lines: list[str] = []
    for _ in range(r.randint(0, 4)):
        if r.random() < 0.6:
            lines.append(_gen_binding(r, "    "))
        else:
            lines.append(_gen_func(r, 1))
    return lines


def _gen_struct(r: random.Random) -> str:
    lines = _attributes(r, "")
    lines.append(f"struct {_ident(r)}{_inheritance(r)} {{")
    lines.extend(_gen_body(r))
    lines.append("}")
    return "\n".join(lines)


def _gen_extension(r: random.Random) -> str:
    lines = [f"extension {_ident(r)}{_inheritance(r)} {{"]
    lines.extend(_gen_body(r))
    lines.append("}")
    return "\n".join(lines)
