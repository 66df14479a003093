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


def _stop_sequences(stop: Any) -> list[str]:
    """Stop sequences arrive from forms as a comma-separated string."""
    if isinstance(stop, str):
        return [s.strip() for s in stop.split(",") if s.strip()]
    if stop:
        return [str(s) for s in stop]
    return []


def _first_choice(body: Any) -> dict[str, Any]:
    choices = body.get("choices") if isinstance(body, dict) else None
    first = choices[0] if isinstance(choices, list) and choices else None
    return first if isinstance(first, dict) else {}


def _delta_content(event: dict[str, Any]) -> str | None:
    delta = _first_choice(event).get("delta")
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) else None


def _message_content(body: Any) -> str:
    message = _first_choice(body).get("message")
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""


class OpenAIV1Adapter(ProviderAdapter):
    """Adapter for OpenAI-compatible APIs (``/v1/chat/completions``).

    Works with OpenAI, local inference servers (Ollama, LM Studio,
    llama-server) and proxies that follow the OpenAI format.
    """

    provider_id = "v1"
    label = "OpenAI v1"
    config_schema = (
        ConfigField(name="url", label="Base URL", type="text", required=True, placeholder="http://localhost:11434/v1"),
        ConfigField(name="apiKey", label="API Key", type="password", placeholder="Optional for local servers"),
        ConfigField(name="modelId", label="Model ID", type="text", required=True, placeholder="gpt-4o, llama3.2, etc."),
    )
    generation_schema = (
        GenerationParameter(
            name="temperature", label="Temperature", type="range", options={"min": 0, "max": 2, "step": 0.1, "default": 0.7}
        ),
        GenerationParameter(name="top_p", label="Top P", type="range", options={"min": 0, "max": 1, "step": 0.05, "default": 1}),
        GenerationParameter(name="max_tokens", label="Max Tokens", type="number", options={"min": 1, "step": 1, "default": 4096}),
        GenerationParameter(
            name="frequency_penalty",
            label="Frequency Penalty",
            type="range",
            options={"min": -2, "max": 2, "step": 0.1, "default": 0},
        ),
        GenerationParameter(
            name="presence_penalty",
            label="Presence Penalty",
            type="range",
            options={"min": -2, "max": 2, "step": 0.1, "default": 0},
        ),
        GenerationParameter(
            name="stop",
            label="Stop Sequences",
            type="text",
            options={"placeholder": "Comma-separated, e.g.: Human:,Assistant:"},
        ),
    )

    @classmethod
    def validate_config(cls, config: ConnectionConfig) -> None:
        if not config.url:
            raise ProviderConfigError(f"{cls.label} connection requires a base URL.")
        if not config.url.startswith(("http://", "https://")):
            raise ProviderConfigError(f"{cls.label} base URL must start with http:// or https://, got {config.url!r}.")
        try:
            host = httpx.URL(config.url).host
        except httpx.InvalidURL as exc:
            raise ProviderConfigError(f"{cls.label} base URL is invalid: {exc}") from exc
        if not host:
            raise ProviderConfigError(f"{cls.label} base URL has no host, got {config.url!r}.")
        if not config.model_id:
            raise ProviderConfigError(f"{cls.label} connection requires a model ID.")
        # Sent in the Authorization header, which only carries ASCII.
        if not config.api_key.isascii():
            raise ProviderConfigError(f"{cls.label} API key contains non-ASCII characters; check for pasted quotes or spaces.")

    @property
    def base_url(self) -> str:
        return self.config.url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def prepare_messages(self, messages: Sequence[ChatMessage]) -> list[dict[str, Any]]:
        # The API accepts any role order, so only empty turns are dropped.
        return [{"role": m.role, "content": m.content} for m in messages if m.content]

    def build_payload(
        self,
        messages: Sequence[ChatMessage],
        system_instruction: str | None,
        stream: bool,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        api_messages: list[dict[str, Any]] = []
        if system_instruction:
            api_messages.append({"role": "system", "content": system_instruction})
        api_messages.extend(self.prepare_messages(messages))

        params = dict(params)
        stop = _stop_sequences(params.pop("stop", None))
        payload = {"model": self.config.model_id, **params, "messages": api_messages, "stream": stream}
        if stop:
            payload["stop"] = stop
        return payload

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
        payload = self.build_payload(messages, system_instruction, stream, params)
        logger.info(
            "[%s] Sending prompt - Messages: %d, SysInstruction: %d chars, Model: %s, Temp: %s, MaxTokens: %s",
            self.label,
            len(payload["messages"]),
            len(system_instruction or ""),
            self.config.model_id,
            payload.get("temperature"),
            payload.get("max_tokens"),
        )

        async with self.http_client(settings.request_timeout) as client:
            request = client.build_request(
                "POST", f"{self.base_url}/chat/completions", headers=self._headers(), json=payload
            )
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
                        body = response.json()
                    except ValueError as exc:
                        raise ProviderHTTPError(self.label, f"Malformed response body: {exc}", response.status_code) from exc
                    yield _message_content(body)
                    return

                token_count = 0
                async with aclosing(aiter_sse_json(response, self.label, signal)) as events:
                    async for event in events:
                        token = _delta_content(event)
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
                # /models is the cheapest check; not every server exposes it.
                models = await client.get(f"{self.base_url}/models", headers=self._headers())
                if models.is_success:
                    data = models.json()
                    count = len(data.get("data") or []) if isinstance(data, dict) else 0
                    return HealthCheckResult(
                        ok=True,
                        message=f"Connected successfully. {count} model(s) available.",
                        data=data,
                    )

                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._headers(),
                    json={
                        "model": self.config.model_id,
                        "messages": [{"role": "user", "content": "Hi"}],
                        "max_tokens": 1,
                    },
                )
                if not response.is_success:
                    message = response_error_message(response, f"HTTP {response.status_code}")
                    return HealthCheckResult(ok=False, message=f"Connection failed: {message}")
                return HealthCheckResult(ok=True, message=f"Successfully connected to {self.label} API.")
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            return HealthCheckResult(ok=False, message=f"Connection failed: {str(exc) or type(exc).__name__}")

    async def list_models(self) -> list[dict[str, Any]]:
        try:
            async with self.http_client(settings.health_check_timeout) as client:
                response = await client.get(f"{self.base_url}/models", headers=self._headers())
                if not response.is_success:
                    logger.warning("[%s] Failed to fetch models: %d", self.label, response.status_code)
                    return []
                data = response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.error("[%s] Error fetching models: %s", self.label, exc)
            return []
        # OpenAI format: {"data": [{"id": "model-id", ...}]}
        return list(data.get("data") or []) if isinstance(data, dict) else []
