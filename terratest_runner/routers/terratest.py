"""Compile and run endpoints for a terratest suite."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from terratest_runner.auth import require_api_key
from terratest_runner.config import Settings, settings
from terratest_runner.errors import ConfigurationError, ExecutionError, GoTestFailure
from terratest_runner.models.responses import (
    CompileResponse,
    TerratestRequest,
    TerratestRunResponse,
)
from terratest_runner.services import go_client
from terratest_runner.services.go_runner import GoRunner, RunnerOptions, RunOutcome
from terratest_runner.services.timeout import parse_timeout
from terratest_runner.utils.logging import get_logger

log = get_logger(__name__)

router = APIRouter(
    prefix="/terratest",
    tags=["terratest"],
    dependencies=[Depends(require_api_key)],
)


def _pick(value, default):
    return default if value is None else value


def build_options(req: TerratestRequest, cfg: Settings | None = None) -> RunnerOptions:
    """Merge request fields over the configured defaults."""
    _cfg = cfg or settings
    tests_path = _pick(req.tests_path, _cfg.terratest_tests_path)
    if not tests_path:
        raise ConfigurationError("tests_path is required")

    timeout_text = _pick(req.timeout, _cfg.terratest_timeout)
    return RunnerOptions(
        tests_path=tests_path,
        go_binary=_cfg.terratest_go_binary,
        use_json_output=_pick(req.use_json_output, _cfg.terratest_use_json_output),
        generate_html_report=_pick(
            req.generate_html_report, _cfg.terratest_generate_html_report,
        ),
        disable_test_caching=_pick(
            req.disable_test_caching, _cfg.terratest_disable_test_caching,
        ),
        create_log_file=_pick(req.create_log_file, _cfg.terratest_create_log_file),
        arguments=_pick(req.arguments, _cfg.terratest_arguments),
        timeout=parse_timeout(timeout_text) if timeout_text else None,
    )


def _build_runner(req: TerratestRequest) -> GoRunner:
    try:
        options = build_options(req)
    except (ConfigurationError, ValidationError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    client = go_client.client_factory(options.go_binary, options.tests_path)
    return GoRunner(options, client=client)


def _run_response(outcome: RunOutcome | None, error: str | None = None) -> TerratestRunResponse:
    resp = outcome.response if outcome is not None else None
    return TerratestRunResponse(
        success=error is None,
        exit_code=resp.exit_code if resp is not None else None,
        stdout=resp.stdout if resp is not None else (),
        stderr=resp.stderr if resp is not None else (),
        report_path=outcome.report_path if outcome is not None else None,
        log_files=outcome.log_files if outcome is not None else [],
        error=error,
    )


@router.post("/compile", response_model=CompileResponse)
async def compile_tests(req: TerratestRequest) -> CompileResponse:
    """Build every test binary without running any test."""
    runner = _build_runner(req)
    try:
        await run_in_threadpool(runner.compile_go_tests)
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except (ExecutionError, GoTestFailure) as exc:
        log.warning("terratest.compile_failed", error=str(exc))
        return CompileResponse(success=False, error=str(exc))
    return CompileResponse(success=True)


@router.post("/run", response_model=TerratestRunResponse)
async def run_tests(req: TerratestRequest) -> TerratestRunResponse:
    """Run the suite; failing tests are reported, not raised."""
    runner = _build_runner(req)
    try:
        outcome = await run_in_threadpool(runner.run_go_test)
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except GoTestFailure as exc:
        log.warning("terratest.run_failed", error=str(exc))
        return _run_response(exc.outcome, error=str(exc))
    return _run_response(outcome)
