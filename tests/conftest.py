"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - relay_config: Default relay configuration
    - upstream: Scripted inference server (mutable per test)
    - relay_app: FastAPI app wired to the scripted upstream
    - async_client: HTTPX client for API testing
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from jetson_relay.api.app import create_app
from jetson_relay.relay.config import RelayConfig
from tests.fakes import ScriptedUpstream, ndjson


@pytest.fixture
def relay_config() -> RelayConfig:
    """Return the default relay configuration."""
    return RelayConfig()


@pytest.fixture
def upstream() -> ScriptedUpstream:
    """Scripted upstream replying with "He" then "llo".

    Tests may change ``chunks``, ``status_code`` or ``error`` before
    sending a request.
    """
    return ScriptedUpstream(ndjson("He", "llo"))


@pytest.fixture
def relay_app(relay_config: RelayConfig, upstream: ScriptedUpstream) -> FastAPI:
    """Create the application with its upstream served by ``upstream``."""
    return create_app(relay_config, upstream_transport=upstream.transport)


@pytest.fixture
async def async_client(relay_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=relay_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
