"""Shared fixtures for the TripBrief test suite.

Environment variables MUST be set before any app imports because
app.config.Settings() evaluates at import time.
"""
import os

# Set env vars before any app module is imported
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")
os.environ.pop("REDIS_URL", None)

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from app.rate_limiter import RateLimiter, RatePolicy, build_policies
from app.window_store import InMemoryWindowStore


@pytest.fixture
def store():
    return InMemoryWindowStore()


@pytest.fixture
def minute_policy():
    return RatePolicy(name="minute", window_seconds=60, max_requests=3, key_suffix=":minute")


@pytest.fixture
def hour_policy():
    return RatePolicy(name="hour", window_seconds=3600, max_requests=10, key_suffix=":hour")


@pytest.fixture
def limiter(store, minute_policy, hour_policy):
    return RateLimiter(store, [minute_policy, hour_policy])


@pytest.fixture
def mock_llm_client():
    """Patch the LLM provider, the only external dependency of the API.

    Everything else (routing, identity resolution, rate limiting, parsing)
    is real. Yields the mock dict so tests can assert what was sent.
    """
    mocks = {
        "init_client": MagicMock(),
        "close_client": AsyncMock(),
        "create_message": AsyncMock(return_value='{"destination": "Lisbon"}'),
    }
    with patch.multiple("app.llm_client", **mocks):
        yield mocks


@pytest_asyncio.fixture
async def api_limiter():
    """Limiter installed on app.state with the production policy set (3/min, 30/h)."""
    return RateLimiter(InMemoryWindowStore(), build_policies(3, 30))


@pytest_asyncio.fixture
async def client(api_limiter, mock_llm_client):
    """httpx.AsyncClient using ASGITransport, bypassing lifespan.

    The lifespan builds the store from settings and starts the sweeper;
    tests install a fresh in-memory limiter on app.state instead.
    """
    import httpx
    from main import app

    app.state.rate_limiter = api_limiter
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    del app.state.rate_limiter
