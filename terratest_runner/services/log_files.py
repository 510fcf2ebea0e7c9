"""Write captured go test output to log files next to the tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence, Union

from terratest_runner.models.commands import CommandResponse
from terratest_runner.utils.logging import get_logger

log = get_logger(__name__)

STDOUT_LOG = "terratest-output.log"
STDERR_LOG = "terratest-error-output.log"


def write_lines(content: Sequence[str], path: Path) -> bool:
    """Write each entry followed by the platform separator. Returns success."""
    try:
        # newline="" keeps os.linesep from being translated twice on Windows
        with path.open("w", encoding="utf-8", newline="") as fh:
            for entry in content:
                fh.write(entry + os.linesep)
    except OSError as exc:
        log.error("logfile.write_failed", path=str(path), error=str(exc))
        return False
    return True


def write_log_files(
    response: CommandResponse,
    directory: Union[str, Path],
) -> tuple[Path, Path]:
    """Save stdout and stderr of *response* into *directory*."""
    folder = Path(directory)
    out_path = folder / STDOUT_LOG
    err_path = folder / STDERR_LOG
    log.info("logfile.generate", directory=str(folder))
    write_lines(response.stdout, out_path)
    write_lines(response.stderr, err_path)
    return out_path, err_path
