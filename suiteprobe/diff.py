"""Golden-file assertions compared byte for byte, reported as unified diffs."""

from __future__ import annotations

import difflib
import os
from collections.abc import Iterable

from suiteprobe.executor import (
    AssertionExecutor,
    AssertionResult,
    GoldenFileAssertion,
    Status,
)

# GNU diff's default palette: hd=1, ln=36, de=31, ad=32.
ANSI_RESET = "\033[0m"
ANSI_RED = "\033[31m"
ANSI_GREEN = "\033[32m"
ANSI_BOLD = "\033[1m"
ANSI_CYAN = "\033[36m"


def execute_diff_assertions(
    executor: AssertionExecutor, assertions: Iterable[GoldenFileAssertion]
) -> list[AssertionResult]:
    """Compare each assertion's actual output with its expected file."""
    results: list[AssertionResult] = []
    for assertion in assertions:
        resolved = executor.resolve_and_read_golden_file(assertion)
        if isinstance(resolved, AssertionResult):
            results.append(resolved)
            continue

        expected_path, actual_path, expected, actual = resolved
        if expected == actual:
            results.append(AssertionResult(assertion.name, Status.PASS, "files match"))
            continue

        message = format_unified_diff(
            expected_path, actual_path, expected, actual, executor.colorize
        )
        results.append(AssertionResult(assertion.name, Status.FAIL, message))
    return results


def _label(path: str, fallback: str) -> str:
    stripped = path.rstrip("/" + os.sep)
    if not stripped:
        return fallback if not path else os.sep
    return os.path.basename(stripped) or fallback


def _split_lines(text: str) -> list[str]:
    """Split keeping line endings, with a newline added to the final piece."""
    lines = text.split("\n")
    pieces = [line + "\n" for line in lines[:-1]]
    pieces.append(lines[-1] + "\n")
    return pieces


def format_unified_diff(
    expected_path: str,
    actual_path: str,
    expected: bytes,
    actual: bytes,
    colorize: bool,
) -> str:
    """Return a unified diff (three lines of context) of expected against actual."""
    diff = difflib.unified_diff(
        _split_lines(expected.decode("utf-8", errors="replace")),
        _split_lines(actual.decode("utf-8", errors="replace")),
        fromfile=_label(expected_path, "expected"),
        tofile=_label(actual_path, "actual"),
        n=3,
    )
    text = "".join(diff)
    return colorize_unified_diff(text) if colorize else text


def colorize_unified_diff(text: str) -> str:
    """Wrap the lines of a unified diff in ANSI colour codes."""

    def paint(line: str) -> str:
        if line.startswith(("--- ", "+++ ")):
            return ANSI_BOLD + line + ANSI_RESET
        if line.startswith("@@"):
            return ANSI_CYAN + line + ANSI_RESET
        if line.startswith("-"):
            return ANSI_RED + line + ANSI_RESET
        if line.startswith("+"):
            return ANSI_GREEN + line + ANSI_RESET
        return line

    return "\n".join(paint(line) for line in text.split("\n"))