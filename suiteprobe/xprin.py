"""Structural assertions on rendered resources: counts, existence and fields."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import yaml

from suiteprobe.discovery import DiscoveryError
from suiteprobe.discovery import _compile as _compile_glob
from suiteprobe.executor import AssertionExecutor, AssertionResult, Status

Resource = dict[str, Any]


@dataclass(frozen=True)
class XprinAssertion:
    """One structural assertion as written in a test suite file."""

    name: str
    type: str
    resource: str = ""
    field: str = ""
    operator: str = ""
    value: Any = None


class AssertionSetupError(Exception):
    """Raised when an assertion cannot be evaluated at all."""


def execute_xprin_assertions(
    executor: AssertionExecutor, assertions: Iterable[XprinAssertion]
) -> list[AssertionResult]:
    """Run every assertion and return all their results in order."""
    results: list[AssertionResult] = []
    for assertion in assertions:
        results.extend(execute_xprin_assertion(executor, assertion))
    return results


def execute_xprin_assertion(
    executor: AssertionExecutor, assertion: XprinAssertion
) -> list[AssertionResult]:
    """Run one assertion; problems that stop it are reported as ERROR results."""
    handler = _HANDLERS.get(assertion.type)
    if handler is None:
        return [
            AssertionResult(
                assertion.name,
                Status.ERROR,
                f"unsupported assertion type: {assertion.type}",
            )
        ]
    try:
        results = handler(executor, assertion)
    except AssertionSetupError as err:
        return [AssertionResult(assertion.name, Status.ERROR, str(err))]
    if not results:
        return [
            AssertionResult(
                assertion.name, Status.ERROR, "Internal error: assertion produced no results"
            )
        ]
    return results


def _status(passed: bool) -> Status:
    return Status.PASS if passed else Status.FAIL


def execute_count_assertion(
    executor: AssertionExecutor, assertion: XprinAssertion
) -> list[AssertionResult]:
    """Check how many rendered resources there are, or how many match a pattern."""
    value = assertion.value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AssertionSetupError(
            f"count assertion value must be a number, got {type(value).__name__}"
        )
    if isinstance(value, float) and not math.isfinite(value):
        raise AssertionSetupError(f"count assertion value must be a number, got {value}")
    expected = int(value)
    if expected < 0:
        raise AssertionSetupError(
            f"count assertion value must be non-negative, got {expected}"
        )

    resources: list[Resource] = []
    if not assertion.resource:
        actual = len(executor.outputs.rendered)
    else:
        resources = find_resources(executor, assertion.resource)
        actual = len(resources)

    passed = actual == expected
    if passed:
        message = f"found {actual} resources (as expected)"
    else:
        message = f"expected {expected} resources, got {actual}"
    if resources:
        message = f"{message}: {_identifiers(resources)}"
    return [AssertionResult(assertion.name, _status(passed), message)]


def execute_exists_assertion(
    executor: AssertionExecutor, assertion: XprinAssertion
) -> list[AssertionResult]:
    """Pass when at least one rendered resource matches the pattern."""
    if not assertion.resource:
        raise AssertionSetupError("exists assertion requires resource field")
    resources = find_resources(executor, assertion.resource)
    if resources:
        message = f"resources found: {_identifiers(resources)}"
    else:
        message = f"resource {assertion.resource} not found"
    return [AssertionResult(assertion.name, _status(bool(resources)), message)]


def execute_not_exists_assertion(
    executor: AssertionExecutor, assertion: XprinAssertion
) -> list[AssertionResult]:
    """Pass when no rendered resource matches the pattern."""
    if not assertion.resource:
        raise AssertionSetupError("not exists assertion requires resource field")
    resources = find_resources(executor, assertion.resource)
    if not resources:
        message = f"resource {assertion.resource} not found (as expected)"
    else:
        message = f"resources found (should not exist): {_identifiers(resources)}"
    return [AssertionResult(assertion.name, _status(not resources), message)]


def _matched_resources(
    executor: AssertionExecutor, assertion: XprinAssertion
) -> list[Resource]:
    resources = find_resources(executor, assertion.resource)
    if not resources:
        raise AssertionSetupError(
            f"no rendered resource matched the given name {assertion.resource}"
        )
    return resources


def execute_field_type_assertion(
    executor: AssertionExecutor, assertion: XprinAssertion
) -> list[AssertionResult]:
    """Check the type of a field on every matching resource."""
    if not assertion.resource:
        raise AssertionSetupError("field type assertion requires resource field")
    if not assertion.field:
        raise AssertionSetupError("field type assertion requires field")
    if assertion.value is None:
        raise AssertionSetupError("field type assertion requires value field")
    expected_type = assertion.value
    if not isinstance(expected_type, str):
        raise AssertionSetupError(
            f"field type assertion value must be a string, got {type(expected_type).__name__}"
        )

    results: list[AssertionResult] = []
    for resource in _matched_resources(executor, assertion):
        rid = _resource_id(resource)
        try:
            field_value = get_field_value(resource, assertion.field)
        except ValueError as err:
            results.append(
                AssertionResult(
                    assertion.name,
                    Status.ERROR,
                    f"failed to get field {assertion.field}: {err} on resource {rid}",
                )
            )
            continue

        actual_type = value_type_name(field_value)
        passed = actual_type == expected_type
        if passed:
            message = (
                f"field {assertion.field} has expected type {expected_type} on resource {rid}"
            )
        else:
            message = (
                f"field {assertion.field} has type {actual_type}, "
                f"expected {expected_type} on resource {rid}"
            )
        results.append(AssertionResult(assertion.name, _status(passed), message))
    return results


def _field_presence(
    executor: AssertionExecutor,
    assertion: XprinAssertion,
    kind: str,
    want_present: bool,
) -> list[AssertionResult]:
    if not assertion.resource:
        raise AssertionSetupError(f"{kind} assertion requires resource field")
    if not assertion.field:
        raise AssertionSetupError(f"{kind} assertion requires field")

    results: list[AssertionResult] = []
    for resource in _matched_resources(executor, assertion):
        rid = _resource_id(resource)
        try:
            exists = check_field_exists(resource, assertion.field)
        except ValueError as err:
            results.append(
                AssertionResult(
                    assertion.name,
                    Status.ERROR,
                    f"failed to check field {assertion.field}: {err} on resource {rid}",
                )
            )
            continue

        if want_present:
            passed = exists
            state = "exists" if exists else "does not exist"
            message = f"field {assertion.field} {state} on resource {rid}"
        else:
            passed = not exists
            if passed:
                message = (
                    f"field {assertion.field} does not exist (as expected) on resource {rid}"
                )
            else:
                message = (
                    f"field {assertion.field} exists (should not exist) on resource {rid}"
                )
        results.append(AssertionResult(assertion.name, _status(passed), message))
    return results


def execute_field_exists_assertion(
    executor: AssertionExecutor, assertion: XprinAssertion
) -> list[AssertionResult]:
    """Pass for each matching resource on which the field exists."""
    return _field_presence(executor, assertion, "field exists", want_present=True)


def execute_field_not_exists_assertion(
    executor: AssertionExecutor, assertion: XprinAssertion
) -> list[AssertionResult]:
    """Pass for each matching resource on which the field is absent."""
    return _field_presence(executor, assertion, "field not exists", want_present=False)


def execute_field_value_assertion(
    executor: AssertionExecutor, assertion: XprinAssertion
) -> list[AssertionResult]:
    """Compare a field's value with the expected one on every matching resource."""
    if not assertion.resource:
        raise AssertionSetupError("field value assertion requires resource field")
    if not assertion.field:
        raise AssertionSetupError("field value assertion requires field")
    if not assertion.operator:
        raise AssertionSetupError("field value assertion requires operator field")
    if assertion.value is None:
        raise AssertionSetupError("field value assertion requires value field")

    expected_text = _format_value(assertion.value)
    results: list[AssertionResult] = []
    for resource in _matched_resources(executor, assertion):
        rid = _resource_id(resource)
        try:
            field_value = get_field_value(resource, assertion.field)
        except ValueError as err:
            results.append(
                AssertionResult(
                    assertion.name,
                    Status.ERROR,
                    f"failed to get field {assertion.field}: {err} on resource {rid}",
                )
            )
            continue

        try:
            passed = compare_field_value(field_value, assertion.operator, assertion.value)
        except ValueError as err:
            results.append(
                AssertionResult(
                    assertion.name,
                    Status.ERROR,
                    f"failed to compare field value: {err} on resource {rid}",
                )
            )
            continue

        if passed:
            message = (
                f"field {assertion.field} {assertion.operator} {expected_text} "
                f"on resource {rid}"
            )
        else:
            message = (
                f"field {assertion.field} is {_format_value(field_value)}, expected "
                f"{assertion.operator} {expected_text} on resource {rid}"
            )
        results.append(AssertionResult(assertion.name, _status(passed), message))
    return results


def find_resources(executor: AssertionExecutor, pattern: str) -> list[Resource]:
    """Load the rendered resources whose ``Kind/Name`` identifier matches a glob."""
    pattern = pattern.strip()
    if not pattern:
        raise AssertionSetupError("resource pattern cannot be empty")
    slashes = pattern.count("/")
    if slashes > 1:
        raise AssertionSetupError("the name pattern must be in format 'Kind' or 'Kind/Name'")
    if slashes == 0:
        pattern += "/*"

    try:
        matcher = _compile_glob(pattern)
    except DiscoveryError as err:
        raise AssertionSetupError(f'invalid resource pattern "{pattern}": {err}') from err

    matched: list[Resource] = []
    for identifier, path in sorted(executor.outputs.rendered.items()):
        if not matcher.fullmatch(identifier):
            continue
        try:
            with open(path, encoding="utf-8") as handle:
                data = handle.read()
        except (OSError, UnicodeDecodeError) as err:
            raise AssertionSetupError(
                f"could not read rendered data for {identifier} resource from file {path}"
            ) from err
        try:
            resource = yaml.safe_load(data)
        except yaml.YAMLError as err:
            raise AssertionSetupError(f"invalid YAML for resource {identifier}") from err
        if not isinstance(resource, dict) or not resource.get("kind"):
            raise AssertionSetupError(f"invalid YAML for resource {identifier}")
        matched.append(resource)
    return matched


def _walk_to_parent(obj: dict[str, Any], parts: list[str]) -> dict[str, Any]:
    current = obj
    for depth, part in enumerate(parts[:-1]):
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            raise ValueError(f"field {'.'.join(parts[: depth + 1])} is not an object")
        current = nxt
    return current


def get_field_value(obj: dict[str, Any], field_path: str) -> Any:
    """Return the value at a dotted path such as ``metadata.name``."""
    parts = field_path.split(".")
    parent = _walk_to_parent(obj, parts)
    if parts[-1] not in parent:
        raise ValueError(f"field {field_path} not found")
    return parent[parts[-1]]


def check_field_exists(obj: dict[str, Any], field_path: str) -> bool:
    """Tell whether a dotted path exists; intermediate parts must be objects."""
    parts = field_path.split(".")
    return parts[-1] in _walk_to_parent(obj, parts)


def value_type_name(value: Any) -> str:
    """Name the kind of a decoded value: null, string, number, boolean, array or object."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def compare_field_value(field_value: Any, operator: str, expected_value: Any) -> bool:
    """Compare a field value with an expected one; ``==`` and ``is`` mean equality."""
    if operator in ("==", "is"):
        if field_value is None and expected_value is None:
            return True
        if field_value is None or expected_value is None:
            return False
        return _format_value(field_value) == _format_value(expected_value)
    raise ValueError(f"unsupported operator: {operator}")


def _format_value(value: Any) -> str:
    """Render a value as text so that equal numbers of any type read the same."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, list):
        return "[" + " ".join(_format_value(item) for item in value) + "]"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "map[" + " ".join(f"{k}:{_format_value(v)}" for k, v in items) + "]"
    return str(value)


def _resource_id(resource: Resource) -> str:
    metadata = resource.get("metadata")
    name = metadata.get("name", "") if isinstance(metadata, dict) else ""
    return f"{resource.get('kind', '')}/{name or ''}"


def _identifiers(resources: list[Resource]) -> str:
    return ", ".join(_resource_id(resource) for resource in resources)


_Handler = Callable[[AssertionExecutor, XprinAssertion], list[AssertionResult]]

_HANDLERS: dict[str, _Handler] = {
    "Count": execute_count_assertion,
    "Exists": execute_exists_assertion,
    "NotExists": execute_not_exists_assertion,
    "FieldType": execute_field_type_assertion,
    "FieldExists": execute_field_exists_assertion,
    "FieldNotExists": execute_field_not_exists_assertion,
    "FieldValue": execute_field_value_assertion,
}