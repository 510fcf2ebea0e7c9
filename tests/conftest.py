"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Force settings to use test-safe defaults before any import
os.environ.setdefault("TERRATEST_API_KEY", "")
os.environ.setdefault("TERRATEST_TESTS_PATH", "")
os.environ.setdefault("TERRATEST_TIMEOUT", "")

import pytest
from httpx import ASGITransport, AsyncClient
from structlog.testing import CapturingLogger

from tests.mock_go import MockGoClient


@pytest.fixture
def mock_go():
    """Provide a fresh MockGoClient."""
    return MockGoClient()


@pytest.fixture
def capturing_logger():
    """A logger that records every call instead of emitting it."""
    return CapturingLogger()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def client(mock_go, monkeypatch):
    """Async test client with the mock go client injected."""
    import terratest_runner.services.go_client as go_mod

    def factory(go_binary="go", tests_path=None):
        mock_go.go_binary = go_binary
        mock_go.tests_path = tests_path
        return mock_go

    monkeypatch.setattr(go_mod, "client_factory", factory)

    from terratest_runner.main import app as fastapi_app

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
