"""Health-check endpoints."""

from __future__ import annotations

import os

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from terratest_runner import __version__
from terratest_runner.auth import require_api_key
from terratest_runner.config import settings
from terratest_runner.errors import GoRuntimeNotFound
from terratest_runner.models.responses import GoHealthResponse, HealthResponse
from terratest_runner.services import go_client
from terratest_runner.services.go_runner import GoRunner, RunnerOptions

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def service_health() -> HealthResponse:
    """Basic liveness probe (no auth required)."""
    return HealthResponse(status="ok", version=__version__)


@router.get(
    "/go/health",
    response_model=GoHealthResponse,
    dependencies=[Depends(require_api_key)],
)
async def go_health() -> GoHealthResponse:
    """Check that the go toolchain can be executed."""
    # `go version` ignores the tests path; any absolute directory will do
    tests_path = settings.terratest_tests_path
    if not os.path.isabs(tests_path):
        tests_path = os.getcwd()
    options = RunnerOptions(tests_path=tests_path, go_binary=settings.terratest_go_binary)
    runner = GoRunner(
        options,
        client=go_client.client_factory(options.go_binary, options.tests_path),
    )
    try:
        version = await run_in_threadpool(runner.check_go_presence)
    except GoRuntimeNotFound as exc:
        return GoHealthResponse(available=False, error=str(exc))
    if not version:
        return GoHealthResponse(available=False, error="go version reported no version")
    return GoHealthResponse(available=True, version=version)
