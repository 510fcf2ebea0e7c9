"""Thin wrapper over the ``go`` command line."""

from __future__ import annotations

from typing import Optional, Sequence

from terratest_runner.models.commands import CommandResponse, TimeoutSpec
from terratest_runner.services.process_runner import ProcessRunner
from terratest_runner.utils.logging import get_logger

log = get_logger(__name__)

ALL_PACKAGES = "./..."
# Matches no test name, so `go test` builds every test binary and runs nothing.
COMPILE_ONLY_PATTERN = "^$"


def _names_package(arguments: Sequence[str]) -> bool:
    return any(arg.startswith(".") or arg.startswith("/") for arg in arguments)


class GoClient:
    """Builds ``go`` invocations and runs them through a :class:`ProcessRunner`."""

    def __init__(
        self,
        go_binary: str = "go",
        tests_path: Optional[str] = None,
        *,
        runner: Optional[ProcessRunner] = None,
        logger=None,
    ) -> None:
        self._go = go_binary
        self._tests_path = tests_path
        self._log = logger or log
        self._runner = runner or ProcessRunner(logger=self._log)

    # ── command lines ─────────────────────────────────────────────────

    def command_for_version(self) -> list[str]:
        return [self._go, "version"]

    def command_for_test(
        self,
        *,
        verbose: bool = True,
        json_output: bool = False,
        disable_caching: bool = False,
        arguments: Sequence[str] = (),
    ) -> list[str]:
        cmd = [self._go, "test"]
        if verbose:
            cmd.append("-v")
        if json_output:
            cmd.append("-json")
        if disable_caching:
            cmd.append("-count=1")
        cmd.extend(arguments)
        if not _names_package(arguments):
            cmd.append(ALL_PACKAGES)
        return cmd

    def command_for_compile(self, arguments: Sequence[str] = ()) -> list[str]:
        cmd = [self._go, "test", "-run", COMPILE_ONLY_PATTERN, *arguments]
        if not _names_package(arguments):
            cmd.append(ALL_PACKAGES)
        return cmd

    # ── execution ─────────────────────────────────────────────────────

    def version(self) -> Optional[CommandResponse]:
        return self._runner.run(self.command_for_version())

    def test(
        self,
        *,
        verbose: bool = True,
        json_output: bool = False,
        disable_caching: bool = False,
        arguments: Sequence[str] = (),
        timeout: Optional[TimeoutSpec] = None,
    ) -> Optional[CommandResponse]:
        cmd = self.command_for_test(
            verbose=verbose,
            json_output=json_output,
            disable_caching=disable_caching,
            arguments=arguments,
        )
        return self._run_in_tests_path(cmd, timeout)

    def compile(
        self,
        arguments: Sequence[str] = (),
        timeout: Optional[TimeoutSpec] = None,
    ) -> Optional[CommandResponse]:
        return self._run_in_tests_path(self.command_for_compile(arguments), timeout)

    def _run_in_tests_path(
        self,
        cmd: list[str],
        timeout: Optional[TimeoutSpec],
    ) -> Optional[CommandResponse]:
        return self._runner.run(
            cmd,
            self._tests_path,
            timeout=timeout,
            on_stdout=lambda text: self._log.info("go.stdout", output=text),
            on_stderr=lambda text: self._log.error("go.stderr", output=text),
        )


# Swapped out by tests; routers build their clients through it.
client_factory = GoClient
