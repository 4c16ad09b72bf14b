"""Pytest configuration and fixtures for storefront access tests.

Provides stores, a scripted identity provider, mocked upstream HTTP, and an
ASGI client for the BFF routes.
"""

from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from storefront.config import settings
from storefront.main import app
from storefront.onboarding.pending import PendingSetupStore
from storefront.onboarding.session import Session, SessionError
from storefront.storage import MemoryStore
from storefront.upstream import get_upstream_client

UPSTREAM_BASE_URL = "http://api.test"


# ── Stores ───────────────────────────────────────────────────────

@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def pending_store(memory_store: MemoryStore) -> PendingSetupStore:
    return PendingSetupStore(memory_store)


# ── Identity provider doubles ────────────────────────────────────

class ScriptedSessionProvider:
    """Identity provider that returns (or raises) whatever the test scripted."""

    def __init__(
        self,
        session: Session | None = None,
        session_error: str | None = None,
        fragment_session: Session | None = None,
        fragment_error: str | None = None,
    ):
        self.session = session
        self.session_error = session_error
        self.fragment_session = fragment_session
        self.fragment_error = fragment_error
        self.exchanged: list[str] = []
        self.signed_out = False

    async def get_session(self) -> Session | None:
        if self.session_error:
            raise SessionError(self.session_error)
        return self.session

    async def exchange_hash_fragment(self, fragment: str) -> Session | None:
        self.exchanged.append(fragment)
        if self.fragment_error:
            raise SessionError(self.fragment_error)
        return self.fragment_session

    async def sign_out(self) -> None:
        self.signed_out = True


class RecordingHistory:
    def __init__(self):
        self.replaced: list[str] = []

    def replace_url(self, url: str) -> None:
        self.replaced.append(url)


@pytest.fixture
def sessions():
    """Factory for ScriptedSessionProvider."""
    return ScriptedSessionProvider


@pytest.fixture
def history() -> RecordingHistory:
    return RecordingHistory()


# ── Upstream HTTP ────────────────────────────────────────────────

class UpstreamRecorder:
    """Collects requests seen by a MockTransport handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def mock_http_client(
    handler: Callable[[httpx.Request], httpx.Response],
    base_url: str = UPSTREAM_BASE_URL,
) -> tuple[httpx.AsyncClient, UpstreamRecorder]:
    recorder = UpstreamRecorder(handler)
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder), base_url=base_url)
    return client, recorder


@pytest.fixture
def mock_http():
    """Factory: `http, recorder = mock_http(handler)`."""
    return mock_http_client


# ── BFF client ───────────────────────────────────────────────────

@pytest.fixture
def upstream_settings(monkeypatch):
    monkeypatch.setattr(settings, "api_base_url", UPSTREAM_BASE_URL)
    monkeypatch.setattr(settings, "super_admin_bootstrap_secret", "")
    return settings


@pytest_asyncio.fixture
async def api_client() -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def override_upstream(handler: Callable[[httpx.Request], httpx.Response]) -> UpstreamRecorder:
    """Route the BFF's upstream calls to `handler`."""
    recorder = UpstreamRecorder(handler)

    async def _client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            yield client

    app.dependency_overrides[get_upstream_client] = _client
    return recorder


@pytest.fixture
def upstream(api_client):
    """Factory: `recorder = upstream(handler)` reroutes BFF upstream calls."""
    return override_upstream


# ── Redis ────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def redis_client():
    """Real Redis client; the test is skipped when no server is reachable."""
    import redis.asyncio as redis

    client = redis.from_url(settings.redis_url, decode_responses=True)
    try:
        await client.ping()
    except redis.RedisError:
        await client.aclose()
        pytest.skip("Redis not available")

    yield client

    async for key in client.scan_iter(match="test-storefront:*"):
        await client.delete(key)
    await client.aclose()
