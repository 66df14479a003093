"""
Shared pytest fixtures.

Provider endpoints are faked with httpx.MockTransport, so no test touches the
network. API tests route the app's outbound client through the same fake by
overriding the ``get_http_client`` dependency.
"""

import pytest
import pytest_asyncio
from fakes import FakeProvider
from httpx import ASGITransport, AsyncClient

from minerva.http_client import get_http_client
from minerva.main import app
from minerva.providers import ChatMessage
from minerva.schemas.connection import ConnectionConfig


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def v1_config() -> ConnectionConfig:
    return ConnectionConfig(provider="v1", url="http://llm.test/v1/", apiKey="sk-test", modelId="gpt-test")


@pytest.fixture
def gemini_config() -> ConnectionConfig:
    return ConnectionConfig(provider="gemini", apiKey="g-key")


@pytest.fixture
def conversation() -> list[ChatMessage]:
    return [
        ChatMessage(role="user", content="Hi there"),
        ChatMessage(role="assistant", content="Hello! How can I help?"),
        ChatMessage(role="user", content="Tell me a story."),
    ]


# ── HTTP test client ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client(provider: FakeProvider) -> AsyncClient:
    async def override_get_http_client():
        async with provider.client() as outbound:
            yield outbound

    app.dependency_overrides[get_http_client] = override_get_http_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.pop(get_http_client, None)
