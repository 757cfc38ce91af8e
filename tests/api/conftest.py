"""Shared fixtures for Peniel API tests.

The app is driven in-process through ``httpx.ASGITransport``. Gemini is
replaced by an ``httpx.MockTransport`` so no test leaves the process.
"""

from __future__ import annotations

import httpx
import pytest

from peniel.api.app import create_app
from peniel.config import GenAIConfig, PenielConfig
from peniel.core.sessions import SessionRegistry
from peniel.core.store import AppStore
from peniel.genai import TextGenerator
from tests.conftest import fixed_clock

GEMINI_KEY_ENV = "PENIEL_API_TEST_KEY"


def _gemini_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200, json={"candidates": [{"content": {"parts": [{"text": "Texto gerado."}]}}]}
    )


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry(lambda: AppStore.seeded(clock=fixed_clock()))


@pytest.fixture
def generator(monkeypatch) -> TextGenerator:
    monkeypatch.setenv(GEMINI_KEY_ENV, "k")
    client = httpx.AsyncClient(transport=httpx.MockTransport(_gemini_handler))
    return TextGenerator(GenAIConfig(api_key_env=GEMINI_KEY_ENV), http_client=client)


@pytest.fixture
def app(registry, generator):
    return create_app(PenielConfig(), registry=registry, generator=generator)


@pytest.fixture
async def client(app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c


async def open_session(client: httpx.AsyncClient, email: str | None = None) -> dict[str, str]:
    """Create a session (optionally logged in) and return its headers."""
    resp = await client.post("/api/sessions")
    headers = {"X-Session-Id": resp.json()["data"]["session_id"]}
    if email is not None:
        login = await client.post("/api/auth/login", json={"email": email}, headers=headers)
        assert login.status_code == 200
    return headers
