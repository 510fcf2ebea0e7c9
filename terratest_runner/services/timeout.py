"""Timeout resolution for go toolchain runs.

A run's deadline comes from, in order of precedence:

1. a typed :class:`TimeoutSpec` supplied by the caller,
2. the first argument containing ``timeout`` (e.g. ``-timeout=30m``),
3. the default of 10 minutes.

Only the ``<integer><unit>`` grammar with ``m`` (minutes) or ``h`` (hours)
is accepted. Anything else is a :class:`ConfigurationError`, raised before
a process is ever spawned.
"""

from __future__ import annotations

import threading
from typing import Optional, Sequence

from terratest_runner.errors import InvalidTimeoutValue, UnsupportedTimeoutUnit
from terratest_runner.models.commands import DEFAULT_TIMEOUT, TimeoutSpec, TimeUnit
from terratest_runner.utils.logging import get_logger

log = get_logger(__name__)

TIMEOUT_MARKER = "timeout"

_UNITS: dict[str, TimeUnit] = {unit.value: unit for unit in TimeUnit}


def parse_timeout(text: str) -> TimeoutSpec:
    """Parse a bare ``<N><unit>`` value such as ``30m`` or ``2h``."""
    text = text.strip()
    if not text:
        raise InvalidTimeoutValue(text, "empty")

    magnitude, unit_char = text[:-1], text[-1]
    unit = _UNITS.get(unit_char)
    if unit is None:
        raise UnsupportedTimeoutUnit(unit_char)

    if not (magnitude.isascii() and magnitude.isdigit()):
        raise InvalidTimeoutValue(text)
    value = int(magnitude)
    if value <= 0:
        raise InvalidTimeoutValue(text, "must be greater than zero")
    if value * unit.seconds > threading.TIMEOUT_MAX:
        raise InvalidTimeoutValue(text, "longer than the platform can wait")
    return TimeoutSpec(value=value, unit=unit)


def find_timeout_argument(arguments: Sequence[str]) -> Optional[str]:
    """Return the first argument mentioning ``timeout``, if any."""
    for arg in arguments:
        if TIMEOUT_MARKER in arg:
            return arg
    return None


def resolve_timeout(
    arguments: Sequence[str],
    *,
    override: Optional[TimeoutSpec] = None,
    logger=None,
) -> TimeoutSpec:
    """Work out the timeout for a run of *arguments*."""
    _log = logger or log

    if override is not None:
        _log.info("timeout.override", timeout=str(override), source="config")
        return override

    token = find_timeout_argument(arguments)
    if token is None:
        _log.info("timeout.default", timeout=str(DEFAULT_TIMEOUT))
        return DEFAULT_TIMEOUT

    _, sep, value = token.partition("=")
    if not sep:
        raise InvalidTimeoutValue(token, "expected timeout=<N><unit>")

    spec = parse_timeout(value)
    _log.info(
        "timeout.override",
        timeout=str(spec),
        source="arguments",
        unit=spec.unit.name.lower(),
    )
    return spec
