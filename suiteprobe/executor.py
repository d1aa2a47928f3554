"""Shared state and golden-file handling for running assertions."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto

ExpandPath = Callable[[str, str], str]


class Status(Enum):
    """Outcome of a single assertion."""

    PASS = auto()
    FAIL = auto()
    ERROR = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class AssertionResult:
    """The outcome of one assertion together with its explanation."""

    name: str
    status: Status
    message: str


@dataclass
class Outputs:
    """Files produced by a render: the full output and one file per resource."""

    render: str = ""
    rendered: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GoldenFileAssertion:
    """Compare rendered output (whole, or one resource) with an expected file."""

    name: str
    expected: str
    resource: str = ""


def _expand_relative(base: str, path: str) -> str:
    """Resolve ``path`` against the directory holding ``base``."""
    if not path:
        return ""
    expanded = os.path.expanduser(path)
    if os.path.isabs(expanded):
        return expanded
    return os.path.join(os.path.dirname(base), expanded)


@dataclass
class AssertionExecutor:
    """Context shared by every kind of assertion run for one test case."""

    outputs: Outputs
    debug: bool = False
    test_suite_file: str = ""
    expand_path: ExpandPath = field(default=_expand_relative)
    colorize: bool = False

    def resolve_and_read_golden_file(
        self, assertion: GoldenFileAssertion
    ) -> tuple[str, str, bytes, bytes] | AssertionResult:
        """Locate and read the expected and actual files of a golden-file assertion.

        Returns ``(expected_path, actual_path, expected_bytes, actual_bytes)``,
        or an ERROR result when a path cannot be resolved or a file read.
        """

        def error(message: str) -> AssertionResult:
            return AssertionResult(assertion.name, Status.ERROR, message)

        try:
            expected_path = self.expand_path(self.test_suite_file, assertion.expected)
        except Exception as err:  # the expander may fail in any way
            return error(f"invalid expected path: {err}")

        if not assertion.resource:
            actual_path = self.outputs.render
        else:
            try:
                actual_path = self.outputs.rendered[assertion.resource]
            except KeyError:
                return error(f'resource "{assertion.resource}" not found in render output')

        try:
            with open(expected_path, "rb") as handle:
                expected_bytes = handle.read()
        except OSError as err:
            return error(f"read expected file: {err}")

        try:
            with open(actual_path, "rb") as handle:
                actual_bytes = handle.read()
        except OSError as err:
            return error(f"read actual file: {err}")

        return expected_path, actual_path, expected_bytes, actual_bytes