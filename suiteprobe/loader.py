"""Loading and validating test suite files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Any

import yaml

_TEMPLATE_VAR = re.compile(r"\{\{\s*(.*?)\s*\}\}", re.DOTALL)
_PLACEHOLDER = "__TEMPLATE_VAR__{}__"
_TEST_CASE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class TestSuiteLoadError(Exception):
    """Raised when a test suite file cannot be read, parsed or validated."""

    __test__ = False


class NoTestCasesError(TestSuiteLoadError):
    """Raised when a test suite file holds no test cases."""

    __test__ = False


@dataclass
class TestSuiteSpec:
    """The contents of a test suite file: shared settings and test cases."""

    __test__ = False

    common: dict[str, Any] = field(default_factory=dict)
    tests: list[dict[str, Any]] = field(default_factory=list)

    def validate(self) -> None:
        """Check test case names and IDs; raise TestSuiteLoadError on problems."""
        problems: list[str] = []
        seen_ids: set[str] = set()
        for index, case in enumerate(self.tests):
            name = case.get("name")
            if name is None or not str(name).strip():
                problems.append(f"test case at index {index} has an empty name")

            case_id = case.get("id")
            if case_id is None or str(case_id) == "":
                continue
            case_id = str(case_id)
            if not _TEST_CASE_ID.match(case_id):
                problems.append(
                    f"test case ID '{case_id}' contains invalid characters "
                    "(allowed: alphanumeric, underscore, hyphen)"
                )
            if case_id in seen_ids:
                problems.append(f"duplicate test case ID '{case_id}' found")
            seen_ids.add(case_id)

        if problems:
            raise TestSuiteLoadError("\n".join(problems))


def load(path: str | os.PathLike[str]) -> TestSuiteSpec:
    """Read a test suite file, keeping template expressions as placeholders."""
    path = os.fspath(path)
    try:
        with open(path, encoding="utf-8") as handle:
            content = handle.read()
    except (OSError, UnicodeDecodeError) as err:
        raise TestSuiteLoadError(f"failed to read testsuite file {path}: {err}") from err

    if "{{" in content:
        content = _TEMPLATE_VAR.sub(lambda m: _PLACEHOLDER.format(m.group(1)), content)

    try:
        spec = _spec_from_document(yaml.safe_load(content))
    except (yaml.YAMLError, ValueError) as err:
        raise TestSuiteLoadError(f"failed to parse testsuite file {path}: {err}") from err

    if not spec.tests:
        raise NoTestCasesError(f"no test cases found in testsuite file {path}")
    return spec


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{where} must be a mapping, got {type(value).__name__}")
    return value


def _spec_from_document(document: Any) -> TestSuiteSpec:
    top = _mapping(document, "testsuite")
    common = _mapping(top.get("common"), "common")
    for section in ("inputs", "patches", "hooks"):
        _mapping(common.get(section), f"common.{section}")

    raw_tests = top.get("tests")
    if raw_tests is None:
        raw_tests = []
    if not isinstance(raw_tests, list):
        raise ValueError(f"tests must be a list, got {type(raw_tests).__name__}")
    tests = [_mapping(case, f"tests[{index}]") for index, case in enumerate(raw_tests)]
    return TestSuiteSpec(common=common, tests=tests)