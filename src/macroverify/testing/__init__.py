from __future__ import annotations

from .assertions import assert_diagnostic, assert_macro_expansion, verify_macro_expansion
from .corpus import generate_corpus_files, generate_sources
from .specs import DiagnosticSpec, FixItSpec, NoteSpec, TestFailureLocation, TestFailureSpec
from .strdiff import assert_strings_equal_with_diff

__all__ = [
    "DiagnosticSpec",
    "FixItSpec",
    "NoteSpec",
    "TestFailureLocation",
    "TestFailureSpec",
    "assert_diagnostic",
    "assert_macro_expansion",
    "assert_strings_equal_with_diff",
    "generate_corpus_files",
    "generate_sources",
    "verify_macro_expansion",
]
