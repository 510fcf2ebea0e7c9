"""Tests for the check / compile / run goals with a mock go client."""

from __future__ import annotations

import os

import pytest
from pydantic import ValidationError

from terratest_runner.errors import ExecutionError, GoRuntimeNotFound, GoTestFailure
from terratest_runner.models.commands import TimeoutSpec, TimeUnit
from terratest_runner.services.go_runner import GoRunner, RunnerOptions
from terratest_runner.services.log_files import STDERR_LOG, STDOUT_LOG
from terratest_runner.services.report import REPORT_FILE
from tests.mock_go import GO_TEST_JSON_FAIL, GO_VERSION, ok


@pytest.fixture
def options(tmp_path):
    return RunnerOptions(tests_path=str(tmp_path))


def test_relative_tests_path_rejected():
    with pytest.raises(ValidationError):
        RunnerOptions(tests_path="test/terratest")


def test_html_report_forces_json_output(tmp_path):
    opts = RunnerOptions(tests_path=str(tmp_path), generate_html_report=True)
    assert opts.use_json_output is True


# ── check ─────────────────────────────────────────────────────────────────


def test_check_go_presence_returns_version(options, mock_go):
    assert GoRunner(options, client=mock_go).check_go_presence() == GO_VERSION


def test_check_go_presence_raises_when_go_missing(options, mock_go):
    mock_go.version_response = None
    with pytest.raises(GoRuntimeNotFound):
        GoRunner(options, client=mock_go).check_go_presence()


def test_check_go_presence_non_zero_exit_gives_empty_version(options, mock_go):
    mock_go.version_response = ok(exit_code=2)
    assert GoRunner(options, client=mock_go).check_go_presence() == ""


# ── compile ───────────────────────────────────────────────────────────────


def test_compile_passes_arguments_and_timeout(tmp_path, mock_go):
    spec = TimeoutSpec(value=30, unit=TimeUnit.MINUTES)
    opts = RunnerOptions(tests_path=str(tmp_path), arguments=["-tags=aws"], timeout=spec)
    GoRunner(opts, client=mock_go).compile_go_tests()
    assert mock_go.calls == [("compile", {"arguments": ["-tags=aws"], "timeout": spec})]


def test_compile_absent_response_is_execution_error(options, mock_go):
    mock_go.compile_response = None
    with pytest.raises(ExecutionError, match="Couldn't compile"):
        GoRunner(options, client=mock_go).compile_go_tests()


def test_compile_failure(options, mock_go):
    mock_go.compile_response = ok(stderr="undefined: terraform", exit_code=1)
    with pytest.raises(GoTestFailure, match="Failed to compile"):
        GoRunner(options, client=mock_go).compile_go_tests()


# ── run ───────────────────────────────────────────────────────────────────


def test_run_success_without_artefacts(options, mock_go, tmp_path):
    outcome = GoRunner(options, client=mock_go).run_go_test()
    assert outcome.response.exit_code == 0
    assert outcome.report_path is None
    assert outcome.log_files == []
    assert list(tmp_path.iterdir()) == []
    _, kwargs = mock_go.calls[0]
    assert kwargs["json_output"] is False
    assert kwargs["disable_caching"] is False


def test_run_forwards_flags(tmp_path, mock_go):
    opts = RunnerOptions(
        tests_path=str(tmp_path),
        use_json_output=True,
        disable_test_caching=True,
        arguments=["-timeout=45m"],
    )
    GoRunner(opts, client=mock_go).run_go_test()
    _, kwargs = mock_go.calls[0]
    assert kwargs["json_output"] is True
    assert kwargs["disable_caching"] is True
    assert kwargs["arguments"] == ["-timeout=45m"]


def test_run_writes_log_files(tmp_path, mock_go):
    mock_go.test_response = ok(stdout="PASS", stderr="warning: cache")
    opts = RunnerOptions(tests_path=str(tmp_path), create_log_file=True)
    outcome = GoRunner(opts, client=mock_go).run_go_test()
    assert outcome.log_files == [str(tmp_path / STDOUT_LOG), str(tmp_path / STDERR_LOG)]
    assert (tmp_path / STDOUT_LOG).read_bytes().decode() == "PASS" + os.linesep
    assert (tmp_path / STDERR_LOG).read_bytes().decode() == "warning: cache" + os.linesep


def test_failing_tests_raise_but_leave_report(tmp_path, mock_go):
    mock_go.test_response = ok(stdout=GO_TEST_JSON_FAIL, exit_code=1)
    opts = RunnerOptions(tests_path=str(tmp_path), generate_html_report=True)
    with pytest.raises(GoTestFailure, match="There are failing terratests") as exc_info:
        GoRunner(opts, client=mock_go).run_go_test()
    outcome = exc_info.value.outcome
    assert outcome.response.exit_code == 1
    assert outcome.report_path == str(tmp_path / REPORT_FILE)
    assert (tmp_path / REPORT_FILE).exists()


def test_absent_response_is_failure_without_artefacts(tmp_path, mock_go):
    mock_go.test_response = None
    opts = RunnerOptions(
        tests_path=str(tmp_path), generate_html_report=True, create_log_file=True,
    )
    with pytest.raises(GoTestFailure, match="Can't run go test") as exc_info:
        GoRunner(opts, client=mock_go).run_go_test()
    assert exc_info.value.outcome.response is None
    assert list(tmp_path.iterdir()) == []


def test_unwritable_report_keeps_verdict(tmp_path, mock_go):
    mock_go.test_response = ok(stdout=GO_TEST_JSON_FAIL, exit_code=1)
    missing = tmp_path / "removed"
    opts = RunnerOptions(tests_path=str(missing), generate_html_report=True)
    with pytest.raises(GoTestFailure, match="There are failing terratests") as exc_info:
        GoRunner(opts, client=mock_go).run_go_test()
    assert exc_info.value.outcome.report_path is None
    assert not missing.exists()
