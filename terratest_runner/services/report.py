"""HTML report rendering from ``go test -json`` output."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Union

from jinja2 import Environment, PackageLoader, select_autoescape
from pydantic import ValidationError

from terratest_runner.models.report import (
    PackageResult,
    ReportSummary,
    CaseResult,
    GoTestEvent,
)
from terratest_runner.utils.logging import get_logger

log = get_logger(__name__)

REPORT_FILE = "terratest-report.html"
FINAL_ACTIONS = {"pass", "fail", "skip"}

_env = Environment(
    loader=PackageLoader("terratest_runner", "templates"),
    autoescape=select_autoescape(["html", "j2"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def parse_test_events(chunks: Iterable[str]) -> list[GoTestEvent]:
    """Parse JSON events out of captured stdout.

    *chunks* may hold several lines each; lines that are not test2json
    events (build output, panics before the JSON stream starts) are skipped.
    """
    events: list[GoTestEvent] = []
    for chunk in chunks:
        for line in chunk.splitlines():
            line = line.strip()
            if not line.startswith("{"):
                continue
            try:
                events.append(GoTestEvent.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError):
                log.debug("report.skip_line", line=line[:200])
    return events


def build_summary(events: Iterable[GoTestEvent]) -> ReportSummary:
    packages: dict[str, PackageResult] = {}
    tests: dict[tuple[str, str], CaseResult] = {}

    for ev in events:
        pkg = packages.get(ev.package)
        if pkg is None:
            pkg = packages[ev.package] = PackageResult(name=ev.package)

        if ev.test is None:
            if ev.action in FINAL_ACTIONS:
                pkg.status = ev.action
                pkg.elapsed = ev.elapsed or 0.0
            continue

        key = (ev.package, ev.test)
        case = tests.get(key)
        if case is None:
            case = tests[key] = CaseResult(package=ev.package, name=ev.test)
            pkg.tests.append(case)

        if ev.action == "output" and ev.output:
            case.output += ev.output
        elif ev.action in FINAL_ACTIONS:
            case.status = ev.action
            case.elapsed = ev.elapsed or 0.0

    return ReportSummary(packages=list(packages.values()))


def render_report(summary: ReportSummary) -> str:
    template = _env.get_template("report.html.j2")
    return template.render(
        summary=summary,
        generated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )


def generate_report(stdout: Iterable[str], directory: Union[str, Path]) -> Path:
    """Render the report for *stdout* into *directory* and return its path."""
    summary = build_summary(parse_test_events(stdout))
    path = Path(directory) / REPORT_FILE
    path.write_text(render_report(summary), encoding="utf-8")
    log.info(
        "report.generated",
        path=str(path),
        total=summary.total,
        passed=summary.passed,
        failed=summary.failed,
        skipped=summary.skipped,
    )
    return path
