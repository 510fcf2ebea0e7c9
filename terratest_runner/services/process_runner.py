"""Subprocess execution with concurrent stream draining and a deadline.

stdout and stderr are drained on their own worker threads so a child that
fills one pipe buffer can never block on the other. The calling thread
waits twice, once for both drains and once for process exit, each bounded
by the resolved timeout.

Every failure after the timeout has been resolved (spawn errors, stream read
errors, deadline overruns) is logged and reported as ``None``. Only
configuration errors propagate, and they are raised before anything is
spawned.
"""

from __future__ import annotations

import os
import subprocess
import threading
from concurrent import futures
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import IO, Callable, Optional, Sequence, Union

from terratest_runner.errors import ProcessTimeout, StreamReadError
from terratest_runner.models.commands import CommandResponse, TimeoutSpec
from terratest_runner.services.timeout import resolve_timeout
from terratest_runner.utils.logging import get_logger

log = get_logger(__name__)

OutputConsumer = Callable[[str], None]


class RunState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


def drain_stream(stream: IO[str]) -> str:
    """Read *stream* to EOF and join its lines with the platform separator."""
    try:
        with stream:
            return os.linesep.join(line.rstrip("\r\n") for line in stream)
    except (OSError, ValueError) as exc:
        raise StreamReadError(f"problem reading process output: {exc}") from exc


class ProcessRunner:
    """Runs a command to completion and captures its output.

    Args:
        logger: structlog-style logger; defaults to this module's logger.
        kill_grace_seconds: how long a terminated child gets before SIGKILL.
    """

    def __init__(self, logger=None, *, kill_grace_seconds: float = 5.0) -> None:
        self._log = logger or log
        self._kill_grace = kill_grace_seconds

    # ── public ────────────────────────────────────────────────────────

    def run(
        self,
        command: Sequence[str],
        working_directory: Optional[Union[str, Path]] = None,
        *,
        timeout: Optional[Union[TimeoutSpec, float]] = None,
        on_stdout: Optional[OutputConsumer] = None,
        on_stderr: Optional[OutputConsumer] = None,
    ) -> Optional[CommandResponse]:
        """Run *command* and return its :class:`CommandResponse`, or ``None``.

        *timeout* is either a :class:`TimeoutSpec` or a number of seconds.
        When omitted it is resolved from the command's own arguments.
        """
        cmd = list(command)
        if not cmd:
            raise ValueError("command must not be empty")

        deadline = self._deadline(cmd, timeout)
        cwd = str(working_directory) if working_directory is not None else None
        emit_out = on_stdout or self._log_stdout
        emit_err = on_stderr or self._log_stderr

        self._log.info("process.start", command=cmd, cwd=cwd, timeout_s=deadline)
        state = RunState.NOT_STARTED
        proc: Optional[subprocess.Popen] = None
        pool: Optional[ThreadPoolExecutor] = None
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
            state = RunState.RUNNING
            pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="drain")
            stdout_future = pool.submit(drain_stream, proc.stdout)
            stderr_future = pool.submit(drain_stream, proc.stderr)

            stdout, stderr = self._collect(
                stdout_future, stderr_future, deadline, emit_out, emit_err,
            )

            try:
                exit_code = proc.wait(timeout=deadline)
            except subprocess.TimeoutExpired as exc:
                raise ProcessTimeout(
                    f"process did not exit within {deadline:g}s",
                ) from exc

            state = RunState.COMPLETED
            response = CommandResponse(stdout=stdout, stderr=stderr, exit_code=exit_code)
            self._log.info("process.completed", command=cmd, exit_code=exit_code)
            return response

        except ProcessTimeout as exc:
            state = RunState.TIMED_OUT
            self._log.error("process.timeout", command=cmd, error=str(exc))
            return None
        except OSError as exc:
            state = RunState.FAILED
            self._log.error("process.spawn_failed", command=cmd, cwd=cwd, error=str(exc))
            return None
        except Exception as exc:
            state = RunState.FAILED
            self._log.exception("process.failed", command=cmd, error=str(exc))
            return None
        finally:
            if proc is not None and state is not RunState.COMPLETED:
                self._terminate(proc)
            if pool is not None:
                pool.shutdown(wait=state is RunState.COMPLETED, cancel_futures=True)
            self._log.debug("process.state", command=cmd, state=state.value)

    # ── helpers ───────────────────────────────────────────────────────

    def _deadline(
        self,
        cmd: list[str],
        timeout: Optional[Union[TimeoutSpec, float]],
    ) -> float:
        if timeout is None or isinstance(timeout, TimeoutSpec):
            seconds = resolve_timeout(cmd, override=timeout, logger=self._log).seconds
        elif timeout <= 0:
            raise ValueError("timeout must be greater than zero")
        else:
            seconds = float(timeout)
        # typed specs skip the parser, so they can still exceed the wait limit
        return min(seconds, threading.TIMEOUT_MAX)

    def _collect(
        self,
        stdout_future: futures.Future,
        stderr_future: futures.Future,
        deadline: float,
        emit_out: OutputConsumer,
        emit_err: OutputConsumer,
    ) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """Join both drains, feed the consumers and accumulate the payloads."""
        _, pending = futures.wait((stdout_future, stderr_future), timeout=deadline)
        if pending:
            raise ProcessTimeout(f"output not drained within {deadline:g}s")

        out_text = stdout_future.result()
        err_text = stderr_future.result()
        stdout: list[str] = []
        stderr: list[str] = []
        if err_text:
            emit_err(err_text)
            stderr.append(err_text)
        if out_text:
            emit_out(out_text)
            stdout.append(out_text)
        return tuple(stdout), tuple(stderr)

    def _terminate(self, proc: subprocess.Popen) -> None:
        if proc.poll() is not None:
            return
        self._log.warning("process.terminate", pid=proc.pid)
        proc.terminate()
        try:
            proc.wait(timeout=self._kill_grace)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()

    def _log_stdout(self, text: str) -> None:
        self._log.info("process.stdout", output=text)

    def _log_stderr(self, text: str) -> None:
        self._log.warning("process.stderr", output=text)
