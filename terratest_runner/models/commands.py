"""Command-related data structures."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class TimeUnit(str, Enum):
    MINUTES = "m"
    HOURS = "h"

    @property
    def seconds(self) -> int:
        return 60 if self is TimeUnit.MINUTES else 3600


class TimeoutSpec(BaseModel):
    """Duration bound applied to stream draining and process exit."""

    model_config = {"frozen": True}

    value: int = Field(gt=0)
    unit: TimeUnit = TimeUnit.MINUTES

    @property
    def seconds(self) -> float:
        return float(self.value * self.unit.seconds)

    def __str__(self) -> str:
        return f"{self.value}{self.unit.value}"


DEFAULT_TIMEOUT = TimeoutSpec(value=10, unit=TimeUnit.MINUTES)


class CommandResponse(BaseModel):
    """Captured output and exit code of a finished process.

    Each stream tuple holds at most one entry: every line the stream produced,
    joined with the platform line separator.
    """

    model_config = {"frozen": True}

    stdout: tuple[str, ...] = ()
    stderr: tuple[str, ...] = ()
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
