"""
The macro-capable toy language in one place:

- **Token policy**: keyword and punctuation mapping used by the lexer
- **Grammar**: `build_grammar()` producing the LALR(1) grammar; semantic
  actions build lossless syntax nodes

This module is meant to be *human scannable*.
"""

from __future__ import annotations

from . import syntax as S
from .grammar import Grammar, Rule, eps, term
from .tokens import Token, TokenKind


# ---------------------------------------------------------------------------
# Tokens / keyword policy
# ---------------------------------------------------------------------------

KEYWORDS: dict[str, TokenKind] = {
    "let": TokenKind.LET,
    "var": TokenKind.VAR,
    "func": TokenKind.FUNC,
    "struct": TokenKind.STRUCT,
    "extension": TokenKind.EXTENSION,
    "return": TokenKind.RETURN,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
}

PUNCTUATION: dict[str, TokenKind] = {
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMI,
    ":": TokenKind.COLON,
    "=": TokenKind.EQ,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "#": TokenKind.POUND,
    "@": TokenKind.AT,
}


# ---------------------------------------------------------------------------
# Grammar (semantic, symbolic)
# ---------------------------------------------------------------------------


def _tok(v: object) -> S.TokenSyntax:
    if isinstance(v, S.TokenSyntax):
        return v
    if not isinstance(v, Token):
        raise TypeError(f"expected Token, got {type(v)!r}")
    return S.TokenSyntax.from_token(v)


def _as_list(v: object) -> list[S.Syntax]:
    if not isinstance(v, list):
        raise TypeError(f"expected list, got {type(v)!r}")
    return v


def build_grammar() -> Grammar:
    sink: list = []

    def NT(name: str) -> Rule:
        return Rule(name, sink)

    T = term

    # Terminals
    LBRACE = T(TokenKind.LBRACE)
    RBRACE = T(TokenKind.RBRACE)
    LPAREN = T(TokenKind.LPAREN)
    CALL_LPAREN = T(TokenKind.CALL_LPAREN)
    RPAREN = T(TokenKind.RPAREN)
    COMMA = T(TokenKind.COMMA)
    SEMI = T(TokenKind.SEMI)
    COLON = T(TokenKind.COLON)
    EQ = T(TokenKind.EQ)
    PLUS = T(TokenKind.PLUS)
    MINUS = T(TokenKind.MINUS)
    STAR = T(TokenKind.STAR)
    SLASH = T(TokenKind.SLASH)
    POUND = T(TokenKind.POUND)
    AT = T(TokenKind.AT)
    IDENT = T(TokenKind.IDENT)
    INT = T(TokenKind.INT)
    STRING = T(TokenKind.STRING)

    # Keywords
    LET = T(TokenKind.LET)
    VAR = T(TokenKind.VAR)
    FUNC = T(TokenKind.FUNC)
    STRUCT = T(TokenKind.STRUCT)
    EXTENSION = T(TokenKind.EXTENSION)
    RETURN = T(TokenKind.RETURN)
    TRUE = T(TokenKind.TRUE)
    FALSE = T(TokenKind.FALSE)

    # Nonterminals
    Items = NT("Items")
    Item = NT("Item")
    Binding = NT("Binding")
    BindKw = NT("BindKw")
    SemiOpt = NT("SemiOpt")
    Attrs = NT("Attrs")
    Attr = NT("Attr")
    Func = NT("Func")
    ParamOpen = NT("ParamOpen")
    Params = NT("Params")
    ParamList = NT("ParamList")
    Struct = NT("Struct")
    Extension = NT("Extension")
    InheritOpt = NT("InheritOpt")
    TypeList = NT("TypeList")
    Block = NT("Block")
    ExprStmt = NT("ExprStmt")
    ReturnStmt = NT("ReturnStmt")
    Expr = NT("Expr")
    Term = NT("Term")
    Primary = NT("Primary")
    MacroExpansion = NT("MacroExpansion")
    Args = NT("Args")
    ArgList = NT("ArgList")

    # -----------------------------------------------------------------------
    # Semantic actions
    # -----------------------------------------------------------------------

    def act_passthrough(xs: list[object]) -> object:
        return xs[0]

    def act_none(xs: list[object]) -> None:
        return None

    def act_empty_list(xs: list[object]) -> list[S.Syntax]:
        return []

    def act_token(xs: list[object]) -> S.TokenSyntax:
        return _tok(xs[0])

    def act_items(xs: list[object]) -> list[S.Syntax]:
        return [xs[0], *_as_list(xs[1])]  # type: ignore[list-item]

    def act_binding(xs: list[object]) -> S.BindingDecl:
        return S.BindingDecl(
            keyword=_tok(xs[0]), name=_tok(xs[1]), equal=_tok(xs[2]), value=xs[3], semicolon=xs[4]
        )

    def act_attr(xs: list[object]) -> S.Attribute:
        return S.Attribute(at=_tok(xs[0]), name=_tok(xs[1]))

    def act_func(xs: list[object]) -> S.FuncDecl:
        return S.FuncDecl(
            attributes=S.AttributeList(_as_list(xs[0])),
            keyword=_tok(xs[1]),
            name=_tok(xs[2]),
            lparen=_tok(xs[3]),
            params=S.ParameterList(_as_list(xs[4])),
            rparen=_tok(xs[5]),
            body=xs[6],
        )

    def act_param_last(xs: list[object]) -> list[S.Syntax]:
        return [S.Parameter(name=_tok(xs[0]))]

    def act_param_more(xs: list[object]) -> list[S.Syntax]:
        return [S.Parameter(name=_tok(xs[0]), comma=_tok(xs[1])), *_as_list(xs[2])]

    def act_struct(xs: list[object]) -> S.StructDecl:
        return S.StructDecl(
            attributes=S.AttributeList(_as_list(xs[0])),
            keyword=_tok(xs[1]),
            name=_tok(xs[2]),
            inheritance=xs[3],
            body=xs[4],
        )

    def act_extension(xs: list[object]) -> S.ExtensionDecl:
        return S.ExtensionDecl(keyword=_tok(xs[0]), name=_tok(xs[1]), inheritance=xs[2], body=xs[3])

    def act_inherit(xs: list[object]) -> S.InheritanceClause:
        return S.InheritanceClause(colon=_tok(xs[0]), types=S.InheritedTypeList(_as_list(xs[1])))

    def act_type_last(xs: list[object]) -> list[S.Syntax]:
        return [S.InheritedType(name=_tok(xs[0]))]

    def act_type_more(xs: list[object]) -> list[S.Syntax]:
        return [S.InheritedType(name=_tok(xs[0]), comma=_tok(xs[1])), *_as_list(xs[2])]

    def act_block(xs: list[object]) -> S.Block:
        return S.Block(lbrace=_tok(xs[0]), items=S.ItemList(_as_list(xs[1])), rbrace=_tok(xs[2]))

    def act_expr_stmt(xs: list[object]) -> S.ExprStmt:
        return S.ExprStmt(expression=xs[0], semicolon=xs[1])

    def act_return_stmt(xs: list[object]) -> S.ReturnStmt:
        return S.ReturnStmt(keyword=_tok(xs[0]), expression=xs[1], semicolon=xs[2])

    def act_infix(xs: list[object]) -> S.InfixExpr:
        return S.InfixExpr(left=xs[0], operator=_tok(xs[1]), right=xs[2])

    def act_int(xs: list[object]) -> S.IntegerLiteral:
        return S.IntegerLiteral(literal=_tok(xs[0]))

    def act_string(xs: list[object]) -> S.StringLiteral:
        return S.StringLiteral(literal=_tok(xs[0]))

    def act_bool(xs: list[object]) -> S.BooleanLiteral:
        return S.BooleanLiteral(literal=_tok(xs[0]))

    def act_ref(xs: list[object]) -> S.DeclReferenceExpr:
        return S.DeclReferenceExpr(name=_tok(xs[0]))

    def act_call(xs: list[object]) -> S.CallExpr:
        return S.CallExpr(
            callee=S.DeclReferenceExpr(name=_tok(xs[0])),
            lparen=_tok(xs[1]),
            arguments=S.ArgumentList(_as_list(xs[2])),
            rparen=_tok(xs[3]),
        )

    def act_tuple(xs: list[object]) -> S.TupleExpr:
        return S.TupleExpr(lparen=_tok(xs[0]), elements=S.ArgumentList(_as_list(xs[1])), rparen=_tok(xs[2]))

    def act_macro_call(xs: list[object]) -> S.MacroExpansion:
        return S.MacroExpansion(
            pound=_tok(xs[0]),
            name=_tok(xs[1]),
            lparen=_tok(xs[2]),
            arguments=S.ArgumentList(_as_list(xs[3])),
            rparen=_tok(xs[4]),
        )

    def act_macro_bare(xs: list[object]) -> S.MacroExpansion:
        return S.MacroExpansion(pound=_tok(xs[0]), name=_tok(xs[1]))

    def act_arg_last(xs: list[object]) -> list[S.Syntax]:
        return [S.Argument(expression=xs[0])]  # type: ignore[arg-type]

    def act_arg_more(xs: list[object]) -> list[S.Syntax]:
        return [S.Argument(expression=xs[0], comma=_tok(xs[1])), *_as_list(xs[2])]  # type: ignore[arg-type]

    # -----------------------------------------------------------------------
    # Productions
    # -----------------------------------------------------------------------

    # Top-level / blocks
    Items |= Item & Items @ act_items
    Items |= eps() @ act_empty_list
    Item |= Binding | Func | Struct | Extension | ExprStmt | ReturnStmt @ act_passthrough
    Block |= LBRACE & Items & RBRACE @ act_block

    SemiOpt |= SEMI @ act_token
    SemiOpt |= eps() @ act_none

    # Bindings
    BindKw |= LET | VAR @ act_token
    Binding |= BindKw & IDENT & EQ & Expr & SemiOpt @ act_binding

    # Attributes
    Attr |= AT & IDENT @ act_attr
    Attrs |= Attr & Attrs @ act_items
    Attrs |= eps() @ act_empty_list

    # Functions
    ParamOpen |= CALL_LPAREN | LPAREN @ act_token
    ParamList |= IDENT @ act_param_last
    ParamList |= IDENT & COMMA & ParamList @ act_param_more
    Params |= ParamList @ act_passthrough
    Params |= eps() @ act_empty_list
    Func |= (Attrs & FUNC & IDENT & ParamOpen & Params & RPAREN & Block) @ act_func

    # Types
    TypeList |= IDENT @ act_type_last
    TypeList |= IDENT & COMMA & TypeList @ act_type_more
    InheritOpt |= COLON & TypeList @ act_inherit
    InheritOpt |= eps() @ act_none
    Struct |= Attrs & STRUCT & IDENT & InheritOpt & Block @ act_struct
    Extension |= EXTENSION & IDENT & InheritOpt & Block @ act_extension

    # Statements
    ExprStmt |= Expr & SemiOpt @ act_expr_stmt
    ReturnStmt |= RETURN & Expr & SemiOpt @ act_return_stmt

    # Expressions
    Expr |= Expr & PLUS & Term @ act_infix
    Expr |= Expr & MINUS & Term @ act_infix
    Expr |= Term @ act_passthrough
    Term |= Term & STAR & Primary @ act_infix
    Term |= Term & SLASH & Primary @ act_infix
    Term |= Primary @ act_passthrough

    Primary |= INT @ act_int
    Primary |= STRING @ act_string
    Primary |= TRUE | FALSE @ act_bool
    Primary |= IDENT @ act_ref
    Primary |= IDENT & CALL_LPAREN & Args & RPAREN @ act_call
    Primary |= LPAREN & Args & RPAREN @ act_tuple
    Primary |= MacroExpansion @ act_passthrough

    MacroExpansion |= POUND & IDENT & CALL_LPAREN & Args & RPAREN @ act_macro_call
    MacroExpansion |= POUND & IDENT @ act_macro_bare

    Args |= ArgList @ act_passthrough
    Args |= eps() @ act_empty_list
    ArgList |= Expr @ act_arg_last
    ArgList |= Expr & COMMA & ArgList @ act_arg_more

    return Grammar(start=Items.symbol, productions=tuple(sink))

