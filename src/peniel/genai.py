"""Gemini text generation for event descriptions and birthday greetings.

Talks to the ``generateContent`` REST endpoint over httpx. Generation is a
nice-to-have: every public method returns text and never raises. A missing
API key, a transport or HTTP failure, and an empty candidate list each map
to a fixed Portuguese fallback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from opentelemetry import trace

from peniel.config import GenAIConfig

logger = logging.getLogger(__name__)

SPAN_NAME = "peniel.genai.generate"

MISSING_KEY_DESCRIPTION = (
    "Erro: Chave de API não configurada. Por favor, adicione sua chave Gemini."
)
FAILED_DESCRIPTION = "Erro ao contatar a IA. Tente novamente mais tarde."
EMPTY_DESCRIPTION = "Não foi possível gerar a descrição."

MISSING_KEY_BIRTHDAY = "Parabéns! Deus te abençoe."


class GenAIRequestError(Exception):
    """The provider answered with an error status or an unusable payload."""

    def __init__(self, *, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"Gemini request failed ({status_code}): {message}")


@dataclass(frozen=True)
class _Fallbacks:
    missing_key: str
    failed: str
    empty: str


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def event_description_prompt(title: str, sector_name: str) -> str:
    return (
        "Você é um assistente criativo de liderança de igreja.\n"
        "Crie uma descrição atraente, curta e inspiradora para um evento da igreja.\n"
        "\n"
        f'Título do Evento: "{title}"\n'
        f'Setor/Ministério: "{sector_name}"\n'
        "\n"
        "A descrição deve ter no máximo 3 frases e incluir um emoji relevante."
    )


def birthday_message_prompt(name: str) -> str:
    return (
        "Escreva uma mensagem curta de aniversário cristã e encorajadora para "
        f"{name}. Máximo 1 frase."
    )


def extract_text(payload: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate; ``""`` when absent."""
    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0]
    if not isinstance(first, dict):
        return ""
    content = first.get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    return "".join(texts).strip()


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class TextGenerator:
    """Generates short Portuguese texts with Gemini.

    Parameters
    ----------
    config:
        Model, endpoint, timeout and the name of the API-key variable.
    http_client:
        Optional shared client. When omitted the generator owns one and
        closes it in :meth:`shutdown`.
    """

    def __init__(
        self,
        config: GenAIConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or GenAIConfig()
        self._owns_http_client = http_client is None
        self._http_client = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(timeout=httpx.Timeout(self._config.timeout_s, connect=10.0))
        )

    @property
    def model(self) -> str:
        return self._config.model

    async def shutdown(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def generate_event_description(self, title: str, sector_name: str) -> str:
        return await self._generate(
            event_description_prompt(title, sector_name),
            purpose="event_description",
            fallbacks=_Fallbacks(
                missing_key=MISSING_KEY_DESCRIPTION,
                failed=FAILED_DESCRIPTION,
                empty=EMPTY_DESCRIPTION,
            ),
        )

    async def generate_birthday_message(self, name: str) -> str:
        return await self._generate(
            birthday_message_prompt(name),
            purpose="birthday_message",
            fallbacks=_Fallbacks(
                missing_key=MISSING_KEY_BIRTHDAY,
                failed=f"Parabéns {name}! Deus te abençoe.",
                empty=f"Parabéns {name}!",
            ),
        )

    async def _generate(self, prompt: str, *, purpose: str, fallbacks: _Fallbacks) -> str:
        tracer = trace.get_tracer("peniel")
        with tracer.start_as_current_span(SPAN_NAME) as span:
            span.set_attribute("genai.model", self._config.model)
            span.set_attribute("genai.purpose", purpose)

            api_key = self._config.api_key()
            if api_key is None:
                logger.warning(
                    "Gemini API key not found in $%s; returning fallback text",
                    self._config.api_key_env,
                )
                span.set_attribute("genai.outcome", "missing_key")
                return fallbacks.missing_key

            try:
                text = await self._request(prompt, api_key)
            except (httpx.HTTPError, GenAIRequestError) as exc:
                logger.warning("Gemini %s generation failed: %s", purpose, exc)
                span.set_attribute("genai.outcome", "error")
                span.record_exception(exc)
                return fallbacks.failed

            if not text:
                logger.warning("Gemini returned no text for %s", purpose)
                span.set_attribute("genai.outcome", "empty")
                return fallbacks.empty

            span.set_attribute("genai.outcome", "ok")
            return text

    async def _request(self, prompt: str, api_key: str) -> str:
        url = f"{self._config.base_url}/models/{self._config.model}:generateContent"
        response = await self._http_client.post(
            url,
            params={"key": api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
            headers={"Accept": "application/json"},
        )

        if response.status_code < 200 or response.status_code >= 300:
            raise GenAIRequestError(
                status_code=response.status_code,
                message=_safe_error_message(response),
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise GenAIRequestError(
                status_code=response.status_code,
                message="Invalid JSON payload from Gemini",
            ) from exc

        if not isinstance(payload, dict):
            raise GenAIRequestError(
                status_code=response.status_code,
                message="Gemini payload must be a JSON object",
            )
        return extract_text(payload)


def _safe_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return response.reason_phrase or "unknown error"
