"""Finding test suite files and directories on disk."""

from __future__ import annotations

import os
import re
import stat

SUITE_FILE_NAME = "xprin.yaml"
SUITE_FILE_SUFFIX = "_xprin.yaml"

_META_CHARS = frozenset("*?[\\")


class DiscoveryError(Exception):
    """Raised when test suite files cannot be searched for."""


class NoTestSuiteFilesError(DiscoveryError):
    """Raised when a search completes but finds no test suite files."""


def recursive_dirs(root: str | os.PathLike[str]) -> list[str]:
    """Return ``root`` and every directory beneath it, depth first in lexical order."""
    root = os.fspath(root)
    try:
        info = os.lstat(root)
    except OSError as err:
        raise DiscoveryError(str(err)) from err

    if not stat.S_ISDIR(info.st_mode):
        return []

    def _fail(err: OSError) -> None:
        raise DiscoveryError(str(err)) from err

    dirs = []
    for current, subdirs, _files in os.walk(root, onerror=_fail):
        subdirs.sort()
        dirs.append(current)
    return dirs


def find_test_suite_files(pattern: str | os.PathLike[str]) -> list[str]:
    """Return the test suite files matched by a glob pattern.

    Matched files are kept when their names are valid suite file names; matched
    directories contribute the valid suite files they directly contain.
    """
    pattern = os.fspath(pattern)
    try:
        matches = _glob(pattern)
    except DiscoveryError as err:
        raise DiscoveryError(f"failed to match pattern {pattern}: {err}") from err

    files: list[str] = []
    for match in matches:
        try:
            info = os.stat(match)
        except OSError as err:
            raise DiscoveryError(f"failed to stat file {match}: {err}") from err

        if not stat.S_ISDIR(info.st_mode):
            if is_valid_test_suite_file_name(match):
                files.append(match)
            continue

        try:
            yaml_files = _glob(os.path.join(match, "*.yaml"))
        except DiscoveryError as err:
            raise DiscoveryError(
                f"failed to match pattern in directory {match}: {err}"
            ) from err
        files.extend(name for name in yaml_files if is_valid_test_suite_file_name(name))

    if not files:
        raise NoTestSuiteFilesError(f"no test files found matching pattern {pattern}")
    return files


def is_valid_test_suite_file_name(filename: str | os.PathLike[str]) -> bool:
    """Tell whether a path names a test suite file.

    Valid names are exactly ``xprin.yaml``, or end in ``_xprin.yaml`` with at
    least one character before the underscore.
    """
    base = os.path.basename(os.fspath(filename).rstrip("/" + os.sep))
    return base == SUITE_FILE_NAME or (
        base.endswith(SUITE_FILE_SUFFIX) and len(base) > len(SUITE_FILE_SUFFIX)
    )


def _has_meta(path: str) -> bool:
    return any(char in _META_CHARS for char in path)


def _class_char(pattern: str, index: int) -> tuple[str, int]:
    if index >= len(pattern) or pattern[index] in "-]":
        raise DiscoveryError("syntax error in pattern")
    if pattern[index] == "\\":
        index += 1
        if index >= len(pattern):
            raise DiscoveryError("syntax error in pattern")
    return pattern[index], index + 1


def _compile(pattern: str) -> re.Pattern[str]:
    """Translate a shell glob (``*``, ``?``, ``[...]``, ``\\``) into a regex."""
    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "*":
            parts.append("[^/]*")
            index += 1
        elif char == "?":
            parts.append("[^/]")
            index += 1
        elif char == "\\":
            index += 1
            if index >= length:
                raise DiscoveryError("syntax error in pattern")
            parts.append(re.escape(pattern[index]))
            index += 1
        elif char == "[":
            index += 1
            negated = index < length and pattern[index] == "^"
            if negated:
                index += 1
            ranges: list[str] = []
            while True:
                if index >= length:
                    raise DiscoveryError("syntax error in pattern")
                if pattern[index] == "]" and ranges:
                    index += 1
                    break
                low, index = _class_char(pattern, index)
                high = low
                if index < length and pattern[index] == "-":
                    high, index = _class_char(pattern, index + 1)
                    if high < low:
                        raise DiscoveryError("syntax error in pattern")
                if low == high:
                    ranges.append(re.escape(low))
                else:
                    ranges.append(f"{re.escape(low)}-{re.escape(high)}")
            parts.append("[" + ("^" if negated else "") + "".join(ranges) + "]")
        else:
            parts.append(re.escape(char))
            index += 1
    return re.compile("".join(parts), re.DOTALL)


def _glob(pattern: str) -> list[str]:
    _compile(pattern)
    if not _has_meta(pattern):
        return [pattern] if os.path.exists(pattern) else []

    directory, name_pattern = os.path.split(pattern)
    directory = directory or "."
    if not _has_meta(directory):
        return _glob_in(directory, name_pattern)

    matches: list[str] = []
    for parent in _glob(directory):
        matches.extend(_glob_in(parent, name_pattern))
    return matches


def _glob_in(directory: str, name_pattern: str) -> list[str]:
    regex = _compile(name_pattern)
    if not os.path.isdir(directory):
        return []
    try:
        names = sorted(os.listdir(directory))
    except OSError:
        return []
    return [
        name if directory == "." else os.path.join(directory, name)
        for name in names
        if regex.fullmatch(name)
    ]