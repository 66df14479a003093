import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing
from typing import Any

import httpx

from minerva.config import settings
from minerva.providers.base import ChatMessage, ProviderAdapter
from minerva.providers.cancellation import abortable, raise_if_aborted
from minerva.providers.errors import (
    AbortError,
    ProviderConfigError,
    ProviderHTTPError,
    response_error_message,
)
from minerva.providers.sse import aiter_sse_json
from minerva.schemas.connection import ConnectionConfig
from minerva.schemas.provider import ConfigField, GenerationParameter, HealthCheckResult

logger = logging.getLogger(__name__)

# Every content filter is disabled; moderation is left to the application.
SAFETY_SETTINGS: tuple[dict[str, str], ...] = tuple(
    {"category": category, "threshold": "BLOCK_NONE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_CIVIC_INTEGRITY",
    )
)

HEALTH_CHECK_PROMPT = 'This is a test prompt. Only respond with "Hello."'


def _candidate_parts(event: Any) -> list[dict[str, Any]]:
    candidates = event.get("candidates") if isinstance(event, dict) else None
    first = candidates[0] if isinstance(candidates, list) and candidates else None
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    return [part for part in parts if isinstance(part, dict)] if isinstance(parts, list) else []


def _part_text(part: dict[str, Any]) -> str:
    text = part.get("text")
    return text if isinstance(text, str) else ""


def _first_part_text(event: dict[str, Any]) -> str | None:
    parts = _candidate_parts(event)
    return _part_text(parts[0]) if parts else None


class GeminiAdapter(ProviderAdapter):
    """Adapter for the Google Gemini REST API (fixed model, API key in the query string)."""

    provider_id = "gemini"
    label = "Gemini"
    # The URL is fixed, so only the key is configurable.
    config_schema = (ConfigField(name="apiKey", label="API Key", type="password", required=True),)
    generation_schema = (
        GenerationParameter(
            name="temperature", label="Temperature", type="range", options={"min": 0, "max": 2, "step": 0.1, "default": 0.9}
        ),
        GenerationParameter(name="topP", label="Top P", type="range", options={"min": 0, "max": 1, "step": 0.05, "default": 1}),
        GenerationParameter(name="topK", label="Top K", type="number", options={"min": 1, "step": 1, "default": 1}),
        GenerationParameter(
            name="maxOutputTokens", label="Max Output Tokens", type="number", options={"min": 1, "step": 1, "default": 65536}
        ),
    )

    @classmethod
    def validate_config(cls, config: ConnectionConfig) -> None:
        if not config.api_key:
            raise ProviderConfigError(f"{cls.label} connection requires an API key.")

    @property
    def model_id(self) -> str:
        return settings.gemini_model_id

    def _url(self, method: str) -> str:
        return f"{settings.gemini_api_base.rstrip('/')}/models/{self.model_id}:{method}"

    def prepare_messages(self, messages: Sequence[ChatMessage]) -> list[dict[str, Any]]:
        """Render the conversation as Gemini ``contents``.

        Gemini names the assistant ``model``, requires the first turn to come
        from ``user`` and rejects two consecutive turns with the same role.
        Empty messages are dropped, leading model turns are skipped and
        same-role runs are merged with a blank line between them.
        """
        contents: list[dict[str, Any]] = []
        last_role: str | None = None
        for msg in messages:
            if not msg.content:
                continue

            role = "model" if msg.role == "assistant" else "user"

            if not contents and role == "model":
                continue

            if role == last_role:
                contents[-1]["parts"][0]["text"] += f"\n\n{msg.content}"
            else:
                contents.append({"role": role, "parts": [{"text": msg.content}]})
                last_role = role
        return contents

    def build_payload(
        self,
        messages: Sequence[ChatMessage],
        system_instruction: str | None,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"contents": self.prepare_messages(messages)}
        if system_instruction:
            body["system_instruction"] = {"parts": [{"text": system_instruction}]}
        if params:
            body["generationConfig"] = dict(params)
        body["safetySettings"] = [dict(s) for s in SAFETY_SETTINGS]
        return body

    async def prompt(
        self,
        messages: Sequence[ChatMessage],
        *,
        system_instruction: str | None = None,
        signal: asyncio.Event | None = None,
        stream: bool = True,
        **params: Any,
    ) -> AsyncIterator[str]:
        raise_if_aborted(signal)
        body = self.build_payload(messages, system_instruction, params)
        generation_config = body.get("generationConfig", {})
        logger.info(
            "[%s] Sending prompt - Messages: %d, SysInstruction: %d chars, Model: %s, Temp: %s, MaxTokens: %s",
            self.label,
            len(body["contents"]),
            len(system_instruction or ""),
            self.model_id,
            generation_config.get("temperature"),
            generation_config.get("maxOutputTokens"),
        )

        if stream:
            url, query = self._url("streamGenerateContent"), {"key": self.config.api_key, "alt": "sse"}
        else:
            url, query = self._url("generateContent"), {"key": self.config.api_key}

        async with self.http_client(settings.request_timeout) as client:
            request = client.build_request("POST", url, params=query, json=body)
            try:
                response = await abortable(client.send(request, stream=True), signal)
            except httpx.HTTPError as exc:
                logger.error("[%s] Request failed: %s", self.label, exc)
                raise ProviderHTTPError.from_transport(self.label, exc) from exc

            try:
                logger.debug("[%s] Response status: %d", self.label, response.status_code)
                await self.raise_for_status(response, signal)

                if not stream:
                    await abortable(response.aread(), signal)
                    try:
                        data = response.json()
                    except ValueError as exc:
                        raise ProviderHTTPError(self.label, f"Malformed response body: {exc}", response.status_code) from exc
                    yield "".join(_part_text(part) for part in _candidate_parts(data))
                    return

                token_count = 0
                async with aclosing(aiter_sse_json(response, self.label, signal)) as events:
                    async for event in events:
                        token = _first_part_text(event)
                        if token:
                            token_count += 1
                            yield token
                logger.info("[%s] Stream complete - Tokens: %d", self.label, token_count)
            except AbortError:
                logger.info("[%s] Prompt aborted by caller", self.label)
                raise
            except ProviderHTTPError as exc:
                logger.error("[%s] API Error: %s", self.label, exc.message)
                raise
            except httpx.HTTPError as exc:
                logger.error("[%s] Stream failed: %s", self.label, exc)
                raise ProviderHTTPError.from_transport(self.label, exc) from exc
            finally:
                await response.aclose()

    async def health_check(self) -> HealthCheckResult:
        try:
            async with self.http_client(settings.health_check_timeout) as client:
                response = await client.post(
                    self._url("generateContent"),
                    params={"key": self.config.api_key},
                    json={"contents": [{"role": "user", "parts": [{"text": HEALTH_CHECK_PROMPT}]}]},
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return HealthCheckResult(ok=False, message=f"Connection failed: {str(exc) or type(exc).__name__}")

        if not response.is_success:
            message = response_error_message(response, f"HTTP {response.status_code}")
            return HealthCheckResult(ok=False, message=f"Connection failed: {message}")
        return HealthCheckResult(ok=True, message=f"Successfully connected to {self.label} API.")

    async def list_models(self) -> list[dict[str, Any]]:
        return [{"id": self.model_id}]
