from __future__ import annotations

from dataclasses import dataclass

from .diagnostics import Severity
from .tokens import Trivia


@dataclass(frozen=True, slots=True)
class VerifyOptions:
    """Defaults for one `verify_macro_expansion` call."""

    module_name: str = "TestModule"
    file_name: str = "test.mv"
    indentation_width: Trivia = Trivia.spaces(4)
    # Used by DiagnosticSpec entries that leave `severity` unset.
    default_severity: Severity = Severity.ERROR
