"""Tests for Gemini text generation and its fallbacks."""

from __future__ import annotations

import json
import logging

import httpx
import pytest
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from peniel.config import GenAIConfig
from peniel.genai import (
    EMPTY_DESCRIPTION,
    FAILED_DESCRIPTION,
    MISSING_KEY_BIRTHDAY,
    MISSING_KEY_DESCRIPTION,
    SPAN_NAME,
    TextGenerator,
    extract_text,
)

pytestmark = pytest.mark.unit

KEY_ENV = "PENIEL_TEST_GEMINI_KEY"


def _reset_otel_global_state():
    """Fully reset the OpenTelemetry global tracer provider state."""
    trace._TRACER_PROVIDER_SET_ONCE = trace.Once()
    trace._TRACER_PROVIDER = None


@pytest.fixture
def otel_exporter():
    """In-memory TracerProvider for the test, torn down afterwards."""
    _reset_otel_global_state()
    exporter = InMemorySpanExporter()
    provider = TracerProvider(resource=Resource.create({"service.name": "peniel-test"}))
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    yield exporter
    provider.shutdown()
    _reset_otel_global_state()


@pytest.fixture
def config(monkeypatch) -> GenAIConfig:
    monkeypatch.setenv(KEY_ENV, "test-key")
    return GenAIConfig(api_key_env=KEY_ENV, base_url="https://gemini.test/v1beta")


def _candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def _generator(config: GenAIConfig, handler) -> TextGenerator:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TextGenerator(config, http_client=client)


# ---------------------------------------------------------------------------
# Request shape and success
# ---------------------------------------------------------------------------


class TestSuccess:
    async def test_event_description_request(self, config):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_candidate("Venha adorar conosco! 🙌"))

        generator = _generator(config, handler)
        text = await generator.generate_event_description("Culto de Jovens", "Jovens")

        assert text == "Venha adorar conosco! 🙌"
        (request,) = seen
        assert request.method == "POST"
        assert request.url.path == "/v1beta/models/gemini-3-flash-preview:generateContent"
        assert request.url.params["key"] == "test-key"
        prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
        assert 'Título do Evento: "Culto de Jovens"' in prompt
        assert 'Setor/Ministério: "Jovens"' in prompt

    async def test_birthday_prompt_names_the_user(self, config):
        prompts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            prompts.append(json.loads(request.content)["contents"][0]["parts"][0]["text"])
            return httpx.Response(200, json=_candidate("Feliz aniversário, Ana!"))

        text = await _generator(config, handler).generate_birthday_message("Ana Silva")

        assert text == "Feliz aniversário, Ana!"
        assert "Ana Silva" in prompts[0]
        assert "Máximo 1 frase" in prompts[0]

    def test_extract_text_joins_parts(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
        assert extract_text(payload) == "ab"


# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------


def _never_called(request: httpx.Request) -> httpx.Response:
    raise AssertionError("no request expected")


class TestFallbacks:
    async def test_missing_key(self, monkeypatch):
        monkeypatch.delenv(KEY_ENV, raising=False)
        generator = _generator(GenAIConfig(api_key_env=KEY_ENV), _never_called)

        assert await generator.generate_event_description("X", "Y") == MISSING_KEY_DESCRIPTION
        assert await generator.generate_birthday_message("Ana") == MISSING_KEY_BIRTHDAY

    async def test_http_error(self, config, caplog):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": {"message": "backend exploded"}})

        generator = _generator(config, handler)
        with caplog.at_level(logging.WARNING, logger="peniel.genai"):
            assert await generator.generate_event_description("X", "Y") == FAILED_DESCRIPTION
            assert (
                await generator.generate_birthday_message("Ana")
                == "Parabéns Ana! Deus te abençoe."
            )
        assert "backend exploded" in caplog.text

    async def test_transport_error(self, config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        generator = _generator(config, handler)
        assert await generator.generate_event_description("X", "Y") == FAILED_DESCRIPTION

    async def test_non_json_body(self, config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        generator = _generator(config, handler)
        assert await generator.generate_birthday_message("Ana") == "Parabéns Ana! Deus te abençoe."

    async def test_empty_candidates(self, config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"candidates": []})

        generator = _generator(config, handler)
        assert await generator.generate_event_description("X", "Y") == EMPTY_DESCRIPTION
        assert await generator.generate_birthday_message("Ana") == "Parabéns Ana!"


# ---------------------------------------------------------------------------
# Tracing and lifecycle
# ---------------------------------------------------------------------------


class TestTracing:
    async def test_span_records_model_and_outcome(self, config, otel_exporter):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_candidate("ok"))

        await _generator(config, handler).generate_event_description("X", "Y")

        (span,) = otel_exporter.get_finished_spans()
        assert span.name == SPAN_NAME
        assert span.attributes["genai.model"] == "gemini-3-flash-preview"
        assert span.attributes["genai.purpose"] == "event_description"
        assert span.attributes["genai.outcome"] == "ok"

    async def test_span_marks_error(self, config, otel_exporter):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        await _generator(config, handler).generate_birthday_message("Ana")

        (span,) = otel_exporter.get_finished_spans()
        assert span.attributes["genai.outcome"] == "error"
        assert any(event.name == "exception" for event in span.events)


class TestLifecycle:
    async def test_shutdown_leaves_shared_client_open(self, config):
        client = httpx.AsyncClient(transport=httpx.MockTransport(_never_called))
        generator = TextGenerator(config, http_client=client)
        await generator.shutdown()
        assert not client.is_closed
        await client.aclose()

    async def test_shutdown_closes_owned_client(self, config):
        generator = TextGenerator(config)
        await generator.shutdown()
        assert generator._http_client.is_closed
