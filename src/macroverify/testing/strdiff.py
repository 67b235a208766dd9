from __future__ import annotations

import difflib
from collections.abc import Callable

from .specs import TestFailureLocation, TestFailureSpec


def assert_strings_equal_with_diff(
    actual: str,
    expected: str,
    message: str = "",
    *,
    additional_info: str | None = None,
    location: TestFailureLocation,
    failure_handler: Callable[[TestFailureSpec], None],
) -> None:
    """Report a unified diff through `failure_handler` when the strings differ."""
    if actual == expected:
        return
    diff = "\n".join(
        difflib.unified_diff(
            expected.split("\n"),
            actual.split("\n"),
            fromfile="expected",
            tofile="actual",
            lineterm="",
        )
    )
    if not diff:
        diff = f"-{expected!r}\n+{actual!r}"
    parts = [message] if message else []
    parts.append("Actual output (+) differed from expected output (-):")
    parts.append(diff)
    if additional_info:
        parts.append(additional_info)
    failure_handler(TestFailureSpec(message="\n".join(parts), location=location))
