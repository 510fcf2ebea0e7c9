"""Exception hierarchy for the runner."""

from __future__ import annotations


class TerratestError(Exception):
    """Base class for every error raised by the runner."""


class ConfigurationError(TerratestError, ValueError):
    """Invalid run configuration; raised before any process is spawned."""


class UnsupportedTimeoutUnit(ConfigurationError):
    def __init__(self, unit: str):
        super().__init__(f"Unsupported timeout unit: {unit}")
        self.unit = unit


class InvalidTimeoutValue(ConfigurationError):
    def __init__(self, value: str, reason: str = "not a positive integer"):
        super().__init__(f"Invalid timeout value {value!r}: {reason}")
        self.value = value


class ExecutionError(TerratestError):
    """A goal could not run the go toolchain at all."""


class GoRuntimeNotFound(ExecutionError):
    def __init__(self, message: str = "Can't find go runtime"):
        super().__init__(message)


class GoTestFailure(TerratestError):
    """The go toolchain ran but reported failure."""

    def __init__(self, message: str, outcome=None):
        super().__init__(message)
        self.outcome = outcome


class ProcessTimeout(TerratestError):
    """Stream draining or process exit overran the deadline."""


class StreamReadError(TerratestError):
    """Reading a child process stream failed."""
