"""API request and response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str


class GoHealthResponse(BaseModel):
    available: bool
    version: Optional[str] = None
    error: Optional[str] = None


class TerratestRequest(BaseModel):
    """Options for a compile or test run; unset fields fall back to settings."""

    tests_path: Optional[str] = None
    use_json_output: Optional[bool] = None
    generate_html_report: Optional[bool] = None
    disable_test_caching: Optional[bool] = None
    create_log_file: Optional[bool] = None
    arguments: Optional[list[str]] = None
    timeout: Optional[str] = None  # "<N>m" or "<N>h"


class CompileResponse(BaseModel):
    success: bool
    error: Optional[str] = None


class TerratestRunResponse(BaseModel):
    success: bool
    exit_code: Optional[int] = None
    stdout: tuple[str, ...] = ()
    stderr: tuple[str, ...] = ()
    report_path: Optional[str] = None
    log_files: list[str] = []
    error: Optional[str] = None
