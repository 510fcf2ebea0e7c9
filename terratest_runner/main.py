"""FastAPI application entry-point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from terratest_runner import __version__
from terratest_runner.routers import health, terratest
from terratest_runner.utils.logging import get_logger, setup_logging

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    setup_logging()
    log.info("service.started", version=__version__)
    yield


app = FastAPI(
    title="Terratest Runner",
    description="Runs go test suites for Terratest and collects their output",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(terratest.router)
