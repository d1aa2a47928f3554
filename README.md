# suiteprobe

`suiteprobe` finds YAML test suite files, loads and validates them, hands each
suite to a runner you supply, and checks rendered resources with a small set of
assertions. Progress and failures are reported in a compact, `go test`-like
style on standard error.

## Test suite files

A file counts as a test suite when its name is exactly `xprin.yaml`, or when it
ends in `_xprin.yaml` and has at least one character before the underscore:

| File name            | Test suite? |
|----------------------|-------------|
| `xprin.yaml`         | yes         |
| `aws_xprin.yaml`     | yes         |
| `_xprin.yaml`        | no          |
| `xprin.yml`          | no          |
| `test_xprin.yaml1`   | no          |

```python
from suiteprobe.discovery import is_valid_test_suite_file_name

is_valid_test_suite_file_name("/path/to/network_xprin.yaml")  # True
is_valid_test_suite_file_name("_xprin.yaml")                  # False
```

The functions in `suiteprobe.discovery`:

* `find_test_suite_files(pattern)` expands a glob pattern (`*`, `?`, `[...]`,
  `\`). Matched files are kept if their names are valid; for each matched
  directory, the valid suite files among its `*.yaml` files are added. It
  raises `NoTestSuiteFilesError` when nothing is found and `DiscoveryError`
  for a malformed pattern or a path that cannot be examined.
* `recursive_dirs(root)` returns `root` and every directory beneath it, depth
  first in name order, and raises `DiscoveryError` if `root` cannot be read.

## Loading a suite

```python
from suiteprobe.loader import load, NoTestCasesError, TestSuiteLoadError

try:
    spec = load("tests/network_xprin.yaml")
    spec.validate()
except NoTestCasesError:
    ...  # the file parses but has no test cases
except TestSuiteLoadError as exc:
    print(exc)  # unreadable file, invalid YAML, or invalid test cases
```

`load` returns a `TestSuiteSpec` with a `common` mapping and a `tests` list.
Template expressions such as `{{ .Repositories.myrepo }}` are replaced with
placeholders (`__TEMPLATE_VAR__.Repositories.myrepo__`) before the YAML is
parsed, so they survive loading. `TestSuiteSpec.validate()` rejects test cases
with empty names, IDs containing anything other than letters, digits,
underscores and hyphens, and duplicate IDs.

## Processing targets

```python
from suiteprobe.processor import Options, ProcessingError, process_targets

class Runner:
    def __init__(self, options, suite_file, spec):
        self.suite_file, self.spec = suite_file, spec

    def run_tests(self):
        ...  # run the suite's tests; raise on failure

try:
    process_targets(["tests/..."], Options(quiet=False), Runner)
except ProcessingError:
    ...
```

`process_targets(targets, options, runner_factory)` accepts files, directories
and recursive targets written with a trailing `...` (for example `tests/...`).

* Missing paths, and files whose names are not valid suite names, are skipped.
* A directory without suites prints `?   	<dir>	[no testsuite files]`; a suite
  without test cases prints `?   	<file>	[no test cases found]`. Both lines
  are suppressed with `Options(quiet=True)`.
* An invalid suite, or a runner that raises, prints the error and a line
  `FAIL	<file>	[<reason>]`.
* `Options(debug=True)` prints extra progress messages to standard error.
* When anything failed, `FAIL` is printed on standard output and
  `ProcessingError` is raised after all targets have been handled.

`runner_factory` is called with the options, the suite file path and the loaded
`TestSuiteSpec`, and must return an object with a `run_tests()` method.
`process_directory` and `process_test_suite_file` handle a single directory or
file the same way. The helpers `report_error` and `report_test_suite_error` in
`suiteprobe.reporting` write those failure lines and return a `ReportedError`.

## Assertions

Assertions produce `AssertionResult(name, status, message)` values whose
`Status` is `PASS`, `FAIL` or `ERROR`; an error means the assertion could not be
evaluated at all, which is kept apart from a failed check.

They run against an `AssertionExecutor` (in `suiteprobe.executor`), which holds
the render `Outputs`: the path of the full render output and a mapping from
`Kind/Name` identifiers to the file of each rendered resource. Relative
expected-file paths are resolved against the directory of the executor's
`test_suite_file` unless another `expand_path` function is given.

* **xprin assertions** (`suiteprobe.xprin`): `execute_xprin_assertions` runs
  `XprinAssertion` values of type `Count`, `Exists`, `NotExists`, `FieldType`,
  `FieldExists`, `FieldNotExists` and `FieldValue`. Resources are selected with
  `Kind` or `Kind/Name` patterns that may use shell wildcards, such as `Pod/*`,
  and fields with dot paths such as `spec.replicas`. Field types are named
  `null`, `string`, `number`, `boolean`, `array` or `object`; `FieldValue`
  supports the operators `==` and `is`, which compare values by their text.
* **diff assertions** (`suiteprobe.diff`): `execute_diff_assertions` compares
  the full render, or one rendered resource, byte for byte with a golden file
  described by a `GoldenFileAssertion`. On a mismatch the message is a unified
  diff with three lines of context, coloured with the GNU diff palette when the
  executor's `colorize` is set.

```python
from suiteprobe.diff import format_unified_diff

print(format_unified_diff("golden.yaml", "render.yaml", b"a\n", b"b\n", False))
```

## What this package does not do

`suiteprobe` does not render resources and does not run test cases itself:
producing the render outputs, running hooks and deciding which assertions
belong to a test case are left to the runner you pass to `process_targets`.
It has no command-line program, and golden files are compared only byte for
byte, not by YAML structure.

## Development

The tests use pytest; the `test` extra lists what they need.