"""The runner goals: check the toolchain, compile the tests, run the tests.

A present :class:`CommandResponse` with exit code 0 is success. Any other
exit code is a :class:`GoTestFailure`. No response at all means the toolchain
could not be run, which is an :class:`ExecutionError` for the check and
compile goals.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from terratest_runner.errors import ExecutionError, GoRuntimeNotFound, GoTestFailure
from terratest_runner.models.commands import CommandResponse, TimeoutSpec
from terratest_runner.services.go_client import GoClient
from terratest_runner.services.log_files import write_log_files
from terratest_runner.services.report import generate_report
from terratest_runner.utils.logging import get_logger

log = get_logger(__name__)


class RunnerOptions(BaseModel):
    """How a suite is compiled and run."""

    tests_path: str
    go_binary: str = "go"
    use_json_output: bool = False
    generate_html_report: bool = False
    disable_test_caching: bool = False
    create_log_file: bool = False
    arguments: list[str] = []
    timeout: Optional[TimeoutSpec] = None

    @field_validator("tests_path")
    @classmethod
    def _must_be_absolute(cls, v: str) -> str:
        if not Path(v).is_absolute():
            raise ValueError("tests_path must be absolute")
        return v

    @model_validator(mode="after")
    def _report_needs_json(self) -> "RunnerOptions":
        # The HTML report is built from test2json events.
        if self.generate_html_report:
            self.use_json_output = True
        return self


class RunOutcome(BaseModel):
    """What a test run produced besides its pass/fail verdict."""

    response: Optional[CommandResponse] = None
    report_path: Optional[str] = None
    log_files: list[str] = []


class GoRunner:
    def __init__(
        self,
        options: RunnerOptions,
        *,
        client: Optional[GoClient] = None,
        logger=None,
    ) -> None:
        self.options = options
        self._log = logger or log
        self._client = client or GoClient(
            options.go_binary, options.tests_path, logger=self._log,
        )

    def check_go_presence(self) -> str:
        """Return the ``go version`` line, or raise if go cannot be run."""
        response = self._client.version()
        if response is None:
            raise GoRuntimeNotFound()
        version = ""
        if response.succeeded and response.stdout:
            version = response.stdout[0].strip()
            self._log.info("go.version", version=version)
        return version

    def compile_go_tests(self) -> None:
        response = self._client.compile(
            self.options.arguments, timeout=self.options.timeout,
        )
        if response is None:
            raise ExecutionError("Couldn't compile go test(s)")
        if not response.succeeded:
            raise GoTestFailure("Failed to compile go test(s)")
        self._log.info("go.compiled", tests_path=self.options.tests_path)

    def run_go_test(self) -> RunOutcome:
        """Run the suite, write the requested artefacts, raise on failure.

        The artefacts are written before the verdict so a failing run still
        leaves its logs and report behind. The :class:`GoTestFailure` carries
        the :class:`RunOutcome` as ``outcome``.
        """
        opts = self.options
        if opts.use_json_output:
            self._log.info("go.test.json_output")
        if opts.disable_test_caching:
            self._log.info("go.test.caching_disabled")

        response = self._client.test(
            verbose=True,
            json_output=opts.use_json_output,
            disable_caching=opts.disable_test_caching,
            arguments=opts.arguments,
            timeout=opts.timeout,
        )

        outcome = RunOutcome(response=response)
        if response is not None:
            if opts.create_log_file:
                outcome.log_files = [str(p) for p in write_log_files(response, opts.tests_path)]
            if opts.generate_html_report:
                outcome.report_path = self._write_report(response)

        if response is None:
            raise GoTestFailure("Can't run go test", outcome)
        if not response.succeeded:
            raise GoTestFailure("There are failing terratests", outcome)
        self._log.info("go.test.ok", tests_path=opts.tests_path)
        return outcome

    def _write_report(self, response: CommandResponse) -> Optional[str]:
        try:
            return str(generate_report(response.stdout, self.options.tests_path))
        except OSError as exc:
            self._log.error(
                "report.write_failed", tests_path=self.options.tests_path, error=str(exc),
            )
            return None
