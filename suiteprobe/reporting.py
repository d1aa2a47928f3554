"""Reporting of failures in the go-test style summary format."""

from __future__ import annotations

import sys


class ReportedError(Exception):
    """An error whose details have already been written to standard error."""


def report_error(target: str, failure_reason: str, err: object) -> ReportedError:
    """Write a failure for ``target`` to stderr and return the matching error."""
    message = f"{failure_reason} in {target}: {err}"
    print(f"# {target}\n{message}", file=sys.stderr)
    print(f"FAIL\t{target}\t[{failure_reason}]", file=sys.stderr)
    return ReportedError(message)


def report_test_suite_error(
    test_suite_file: str, err: object, failure_reason: str
) -> ReportedError:
    """Write a failure for a test suite file to stderr and return the matching error."""
    message = f"# {test_suite_file}\n{err}"
    print(message, file=sys.stderr)
    print(f"FAIL\t{test_suite_file}\t[{failure_reason}]", file=sys.stderr)
    return ReportedError(message)