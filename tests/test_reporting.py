import pytest

from suiteprobe.reporting import ReportedError, report_error, report_test_suite_error

GENERAL = "general error for testing"


@pytest.mark.parametrize(
    ("target", "reason", "err", "expected_message", "expected_stderr"),
    [
        (
            "test-target",
            "test failure",
            ValueError(GENERAL),
            f"test failure in test-target: {GENERAL}",
            ["# test-target", f"test failure in test-target: {GENERAL}", "FAIL\ttest-target\t[test failure]"],
        ),
        (
            "path/with/slashes",
            "parsing failed",
            ValueError(GENERAL),
            f"parsing failed in path/with/slashes: {GENERAL}",
            ["# path/with/slashes", "FAIL\tpath/with/slashes\t[parsing failed]"],
        ),
        (
            "",
            "",
            ValueError(GENERAL),
            f" in : {GENERAL}",
            ["# ", f" in : {GENERAL}", "FAIL\t\t[]"],
        ),
        (
            "very-long-target-name-that-might-cause-formatting-issues",
            "complex failure with multiple reasons",
            ValueError(GENERAL),
            "complex failure with multiple reasons in "
            f"very-long-target-name-that-might-cause-formatting-issues: {GENERAL}",
            [
                "# very-long-target-name-that-might-cause-formatting-issues",
                "FAIL\tvery-long-target-name-that-might-cause-formatting-issues"
                "\t[complex failure with multiple reasons]",
            ],
        ),
        (
            "test-target",
            "nil error test",
            None,
            "nil error test in test-target: None",
            ["# test-target", "nil error test in test-target: None", "FAIL\ttest-target\t[nil error test]"],
        ),
    ],
)
def test_report_error(capsys, target, reason, err, expected_message, expected_stderr):
    result = report_error(target, reason, err)
    stderr = capsys.readouterr().err

    assert isinstance(result, ReportedError)
    assert str(result) == expected_message
    for fragment in expected_stderr:
        assert fragment in stderr


@pytest.mark.parametrize(
    ("suite_file", "err", "reason", "expected_message", "expected_stderr"),
    [
        (
            "suite.yaml",
            ValueError(GENERAL),
            "invalid testsuite file",
            f"# suite.yaml\n{GENERAL}",
            ["# suite.yaml", GENERAL, "FAIL\tsuite.yaml\t[invalid testsuite file]"],
        ),
        (
            "tests/aws/complex_xprin.yaml",
            ValueError(GENERAL),
            "invalid testsuite file",
            f"# tests/aws/complex_xprin.yaml\n{GENERAL}",
            ["# tests/aws/complex_xprin.yaml", "FAIL\ttests/aws/complex_xprin.yaml\t[invalid testsuite file]"],
        ),
        (
            "execution_test.yaml",
            ValueError(GENERAL),
            "testsuite file execution error",
            f"# execution_test.yaml\n{GENERAL}",
            ["# execution_test.yaml", "FAIL\texecution_test.yaml\t[testsuite file execution error]"],
        ),
        (
            "",
            ValueError(GENERAL),
            "",
            f"# \n{GENERAL}",
            ["# ", GENERAL, "FAIL\t\t[]"],
        ),
        (
            "test.yaml",
            None,
            "nil error test",
            "# test.yaml\nNone",
            ["# test.yaml", "None", "FAIL\ttest.yaml\t[nil error test]"],
        ),
    ],
)
def test_report_test_suite_error(capsys, suite_file, err, reason, expected_message, expected_stderr):
    result = report_test_suite_error(suite_file, err, reason)
    stderr = capsys.readouterr().err

    assert str(result) == expected_message
    for fragment in expected_stderr:
        assert fragment in stderr


def test_both_reporters_share_stderr_layout(capsys):
    report_error("test-file.yaml", "test failure", ValueError(GENERAL))
    first = capsys.readouterr().err
    report_test_suite_error("test-file.yaml", ValueError(GENERAL), "test failure")
    second = capsys.readouterr().err

    for stderr in (first, second):
        assert "# test-file.yaml" in stderr
        assert "FAIL\ttest-file.yaml\t[test failure]" in stderr
        assert GENERAL in stderr


def test_reporters_return_different_messages(capsys):
    first = report_error("example.yaml", "failure type", ValueError(GENERAL))
    second = report_test_suite_error("example.yaml", ValueError(GENERAL), "failure type")
    capsys.readouterr()

    assert str(first) == f"failure type in example.yaml: {GENERAL}"
    assert str(second) == f"# example.yaml\n{GENERAL}"