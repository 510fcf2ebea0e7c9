"""Data parsed from ``go test -json`` output for the HTML report."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GoTestEvent(BaseModel):
    """One line of ``go test -json`` (see ``go doc test2json``)."""

    model_config = ConfigDict(populate_by_name=True)

    time: Optional[datetime] = Field(default=None, alias="Time")
    action: str = Field(alias="Action")
    package: str = Field(default="", alias="Package")
    test: Optional[str] = Field(default=None, alias="Test")
    elapsed: Optional[float] = Field(default=None, alias="Elapsed")
    output: Optional[str] = Field(default=None, alias="Output")


class CaseResult(BaseModel):
    package: str
    name: str
    status: str = "unknown"  # pass / fail / skip / unknown
    elapsed: float = 0.0
    output: str = ""


class PackageResult(BaseModel):
    name: str
    status: str = "unknown"
    elapsed: float = 0.0
    tests: list[CaseResult] = []

    @property
    def passed(self) -> int:
        return sum(1 for t in self.tests if t.status == "pass")

    @property
    def failed(self) -> int:
        return sum(1 for t in self.tests if t.status == "fail")

    @property
    def skipped(self) -> int:
        return sum(1 for t in self.tests if t.status == "skip")


class ReportSummary(BaseModel):
    packages: list[PackageResult] = []

    @property
    def total(self) -> int:
        return sum(len(p.tests) for p in self.packages)

    @property
    def passed(self) -> int:
        return sum(p.passed for p in self.packages)

    @property
    def failed(self) -> int:
        return sum(p.failed for p in self.packages)

    @property
    def skipped(self) -> int:
        return sum(p.skipped for p in self.packages)
