from __future__ import annotations

from macroverify import (
    DeclarationMacro,
    Diagnostic,
    DiagnosticsError,
    ExpressionMacro,
    ExtensionMacro,
    FixIt,
    MacroExpansionError,
    MemberMacro,
    MessageID,
    PeerMacro,
    Severity,
    parse_item,
)
from macroverify import syntax as S
from macroverify.tokens import TokenKind, Trivia


class StringifyMacro(ExpressionMacro):
    """`#stringify(x)` -> `(x, "x")`"""

    @classmethod
    def expand_expression(cls, node, context):
        args = node.argument_expressions
        if len(args) != 1:
            raise MacroExpansionError("#stringify takes exactly one argument")
        arg = args[0]
        return S.TupleExpr(
            lparen=S.TokenSyntax.keyword(TokenKind.LPAREN),
            elements=S.ArgumentList(
                [
                    S.Argument(expression=arg, comma=S.TokenSyntax.keyword(TokenKind.COMMA, trailing=Trivia.spaces(1))),
                    S.Argument(expression=S.StringLiteral.from_value(arg.trimmed_description)),
                ]
            ),
            rparen=S.TokenSyntax.keyword(TokenKind.RPAREN),
        )


class NoSubtractionMacro(ExpressionMacro):
    """Turns every `-` into `+`, warning about each one."""

    @classmethod
    def expand_expression(cls, node, context):
        (arg,) = node.argument_expressions
        for tok in arg.tokens():
            if tok.kind is not TokenKind.MINUS:
                continue
            plus = S.TokenSyntax(TokenKind.PLUS, "+", tok.leading_trivia, tok.trailing_trivia)
            context.diagnose(
                Diagnostic(
                    node=tok,
                    message="subtraction is not allowed here",
                    severity=Severity.WARNING,
                    diagnostic_id=MessageID("sample", "no-subtraction"),
                    fix_its=[FixIt.replace("use '+' instead", tok, plus)],
                )
            )
        return arg.rewriting_tokens(
            lambda t: S.TokenSyntax(TokenKind.PLUS, "+", t.leading_trivia, t.trailing_trivia)
            if t.kind is TokenKind.MINUS
            else t
        )


class TwoFixItsMacro(ExpressionMacro):
    """Expands to its argument and offers two competing replacements for it."""

    @classmethod
    def expand_expression(cls, node, context):
        (arg,) = node.argument_expressions
        context.diagnose(
            Diagnostic(
                node=arg,
                message="pick a number",
                fix_its=[
                    FixIt.replace("use 1", arg, S.IntegerLiteral(literal=S.TokenSyntax(TokenKind.INT, "1"))),
                    FixIt.replace("use 2", arg, S.IntegerLiteral(literal=S.TokenSyntax(TokenKind.INT, "2"))),
                ],
            )
        )
        return arg


class FuncNameMacro(ExpressionMacro):
    @classmethod
    def expand_expression(cls, node, context):
        for decl in context.lexical_context:
            if isinstance(decl, S.FuncDecl):
                return S.StringLiteral.from_value(decl.name.text)
        raise MacroExpansionError("#funcName used outside of a function")


class ForeverMacro(ExpressionMacro):
    @classmethod
    def expand_expression(cls, node, context):
        return S.MacroExpansion(
            pound=S.TokenSyntax.keyword(TokenKind.POUND),
            name=S.TokenSyntax(TokenKind.IDENT, "forever"),
        )


class BrokenMacro(ExpressionMacro):
    """Produces an infix expression with no right operand."""

    @classmethod
    def expand_expression(cls, node, context):
        return S.InfixExpr(
            left=S.IntegerLiteral(literal=S.TokenSyntax(TokenKind.INT, "1")),
            operator=S.TokenSyntax.keyword(TokenKind.PLUS),
            right=None,
        )


class ConstantsMacro(DeclarationMacro):
    """`#constants(a, b)` -> `let a = 0` / `let b = 1`"""

    @classmethod
    def expand_declaration(cls, node, context):
        bad = [arg for arg in node.argument_expressions if not isinstance(arg, S.DeclReferenceExpr)]
        if bad:
            raise DiagnosticsError(
                [
                    Diagnostic(
                        node=arg,
                        message="expected an identifier",
                        diagnostic_id=MessageID("sample", "not-an-identifier"),
                    )
                    for arg in bad
                ]
            )
        return [parse_item(f"let {arg.name.text} = {i}") for i, arg in enumerate(node.argument_expressions)]


class HelperMacro(DeclarationMacro):
    @classmethod
    def expand_declaration(cls, node, context):
        return [parse_item("func helper() {\n    return 1\n}")]


class AddCountMacro(MemberMacro):
    @classmethod
    def expand_members(cls, node, declaration, context):
        return [parse_item("var count = 0")]


class ReferenceMacro(PeerMacro):
    @classmethod
    def expand_peers(cls, node, declaration, context):
        name = declaration.name.text
        return [parse_item(f"let {name}Ref = {name}")]


class ConformanceMacro(ExtensionMacro):
    @classmethod
    def expand_extensions(cls, node, declaration, type_name, conformances, context):
        if not conformances:
            return []
        return [parse_item(f"extension {type_name}: {', '.join(conformances)} {{}}")]


class LabelMacro(ExpressionMacro):
    """`#label` -> `(0, "a label built by the macro")`, offering to shorten the label it built."""

    @classmethod
    def expand_expression(cls, node, context):
        label = S.StringLiteral.from_value("a label built by the macro")
        context.diagnose(
            Diagnostic(
                node=label,
                message="label is long",
                severity=Severity.WARNING,
                fix_its=[FixIt.replace("shorten the label", label, S.StringLiteral.from_value("x"))],
            )
        )
        zero = S.IntegerLiteral(literal=S.TokenSyntax(TokenKind.INT, "0"))
        return S.TupleExpr(
            lparen=S.TokenSyntax.keyword(TokenKind.LPAREN),
            elements=S.ArgumentList(
                [
                    S.Argument(expression=zero, comma=S.TokenSyntax.keyword(TokenKind.COMMA, trailing=Trivia.spaces(1))),
                    S.Argument(expression=label),
                ]
            ),
            rparen=S.TokenSyntax.keyword(TokenKind.RPAREN),
        )


class TextMacro(ExpressionMacro):
    """Returns source text instead of a syntax node."""

    @classmethod
    def expand_expression(cls, node, context):
        return "1 + 2"


class NumberMacro(DeclarationMacro):
    """Returns a number instead of a list of declarations."""

    @classmethod
    def expand_declaration(cls, node, context):
        return 42
