"""Walking test targets and running the test suites they contain."""

from __future__ import annotations

import os
import stat
import sys
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

from suiteprobe.discovery import (
    DiscoveryError,
    NoTestSuiteFilesError,
    find_test_suite_files,
    is_valid_test_suite_file_name,
    recursive_dirs,
)
from suiteprobe.loader import NoTestCasesError, TestSuiteLoadError, TestSuiteSpec, load
from suiteprobe.reporting import ReportedError, report_error, report_test_suite_error

RECURSIVE_SUFFIX = "..."


@dataclass
class Options:
    """Settings that shape how targets are processed."""

    debug: bool = False
    quiet: bool = False


class ProcessingError(Exception):
    """Raised when processing targets, directories or suite files fails."""


class Runner(Protocol):
    def run_tests(self) -> None: ...


RunnerFactory = Callable[[Options, str, TestSuiteSpec], Runner]

_FAILURES = (ProcessingError, ReportedError)


def _debug(message: str) -> None:
    print(message, file=sys.stderr)


def process_targets(
    targets: Iterable[str | os.PathLike[str]],
    options: Options,
    runner_factory: RunnerFactory,
) -> None:
    """Run every test suite found under the targets.

    A target ending in ``...`` is searched recursively. Missing targets are
    skipped. Raises ProcessingError after all targets if any of them failed.
    """
    has_errors = False

    for target in targets:
        path = os.fspath(target)

        if path.endswith(RECURSIVE_SUFFIX):
            root = path[: -len(RECURSIVE_SUFFIX)]
            if root.endswith(os.sep):
                root = root[: -len(os.sep)]
            try:
                dirs = recursive_dirs(root)
            except DiscoveryError as err:
                report_error(root, "failed to find testsuite files", err)
                has_errors = True
                continue
            for directory in dirs:
                if not os.path.isdir(directory):
                    continue
                try:
                    process_directory(directory, options, runner_factory)
                except _FAILURES:
                    has_errors = True
            continue

        try:
            info = os.stat(path)
        except FileNotFoundError:
            if options.debug:
                _debug(f"Skipping test path {path} because it does not exist")
            continue
        except OSError as err:
            report_error(path, "failed to access test path", err)
            has_errors = True
            continue

        if stat.S_ISDIR(info.st_mode):
            try:
                process_directory(path, options, runner_factory)
            except _FAILURES:
                has_errors = True
            continue

        if not is_valid_test_suite_file_name(path):
            if options.debug:
                _debug(
                    f"Skipping file {path} because it is not a valid test file. "
                    "It should be named 'xprin.yaml' or end with '_xprin.yaml' "
                    "with at least one character before the underscore"
                )
            continue

        try:
            process_test_suite_file(path, options, runner_factory)
        except _FAILURES:
            has_errors = True

    if has_errors:
        print("FAIL")
        raise ProcessingError("processing completed with errors")


def process_directory(
    directory: str | os.PathLike[str],
    options: Options,
    runner_factory: RunnerFactory,
) -> None:
    """Run every test suite file directly inside a directory."""
    directory = os.fspath(directory)
    if options.debug:
        _debug(f"Processing directory {directory}")

    try:
        files = find_test_suite_files(directory)
    except NoTestSuiteFilesError:
        if not options.quiet:
            print(f"?   \t{directory}\t[no testsuite files]", file=sys.stderr)
        return
    except DiscoveryError as err:
        raise report_error(directory, "failed to find testsuite files", err) from err

    if options.debug:
        noun = "testsuite file" if len(files) == 1 else "testsuite files"
        _debug(f"Found {len(files)} {noun} in directory {directory}")

    has_errors = False
    for test_suite_file in files:
        try:
            process_test_suite_file(test_suite_file, options, runner_factory)
        except _FAILURES:
            has_errors = True

    if has_errors:
        raise ProcessingError(f"errors occurred processing files in directory {directory}")


def process_test_suite_file(
    test_suite_file: str | os.PathLike[str],
    options: Options,
    runner_factory: RunnerFactory,
) -> None:
    """Load, validate and run a single test suite file."""
    test_suite_file = os.fspath(test_suite_file)
    if options.debug:
        _debug(f"Processing testsuite file {test_suite_file}")

    try:
        spec = load(test_suite_file)
    except NoTestCasesError:
        if not options.quiet:
            print(f"?   \t{test_suite_file}\t[no test cases found]", file=sys.stderr)
        return
    except TestSuiteLoadError as err:
        raise report_test_suite_error(test_suite_file, err, "invalid testsuite file") from err

    try:
        spec.validate()
    except TestSuiteLoadError as err:
        raise report_test_suite_error(test_suite_file, err, "invalid testsuite file") from err

    runner = runner_factory(options, test_suite_file, spec)
    try:
        runner.run_tests()
    except Exception as err:  # the runner may fail in any way; all are reported
        if "tests failed in testsuite" not in str(err):
            raise report_test_suite_error(
                test_suite_file, err, "testsuite file execution error"
            ) from err
        raise ProcessingError(f"test execution failed for {test_suite_file}: {err}") from err