from __future__ import annotations

import logging

from .api import parse_expr, parse_file, parse_item, parse_items, parse_source
from .config import VerifyOptions
from .context import MacroExpansionContext, lexical_context_of
from .diagnostics import (
    Diagnostic,
    FixIt,
    MessageID,
    Note,
    ReplaceLeadingTrivia,
    ReplaceNode,
    ReplaceTrailingTrivia,
    Severity,
    syntax_diagnostics,
)
from .edits import SourceEdit, apply_edits, edit_for_change
from .errors import DiagnosticsError, EditConflictError, MacroExpansionError, ParseError
from .expander import expand
from .format import annotated_source
from .macros import (
    DeclarationMacro,
    ExpressionMacro,
    ExtensionMacro,
    Macro,
    MacroSpec,
    MemberMacro,
    PeerMacro,
)
from .provenance import SourceFileInfo
from .spans import SourceLocation, SourceRange

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DeclarationMacro",
    "Diagnostic",
    "DiagnosticsError",
    "EditConflictError",
    "ExpressionMacro",
    "ExtensionMacro",
    "FixIt",
    "Macro",
    "MacroExpansionContext",
    "MacroExpansionError",
    "MacroSpec",
    "MemberMacro",
    "MessageID",
    "Note",
    "ParseError",
    "PeerMacro",
    "ReplaceLeadingTrivia",
    "ReplaceNode",
    "ReplaceTrailingTrivia",
    "Severity",
    "SourceEdit",
    "SourceFileInfo",
    "SourceLocation",
    "SourceRange",
    "VerifyOptions",
    "annotated_source",
    "apply_edits",
    "edit_for_change",
    "expand",
    "lexical_context_of",
    "parse_expr",
    "parse_file",
    "parse_item",
    "parse_items",
    "parse_source",
    "syntax_diagnostics",
]
