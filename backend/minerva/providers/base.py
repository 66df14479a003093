import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx

from minerva.providers.cancellation import abortable
from minerva.providers.errors import provider_status_error
from minerva.schemas.connection import ConnectionConfig
from minerva.schemas.provider import ConfigField, GenerationParameter, HealthCheckResult


@dataclass
class ChatMessage:
    role: str  # "user" | "assistant" | "system"
    content: str


class ProviderAdapter(ABC):
    """Common interface for all LLM provider adapters.

    An adapter wraps one immutable ``ConnectionConfig`` and holds no other
    state, so concurrent ``prompt()`` calls on one instance are safe.

    An ``httpx.AsyncClient`` may be injected; the adapter never closes a client
    it did not create. Without one, each call opens and closes its own.
    """

    provider_id: ClassVar[str]
    label: ClassVar[str]
    config_schema: ClassVar[tuple[ConfigField, ...]] = ()
    generation_schema: ClassVar[tuple[GenerationParameter, ...]] = ()

    def __init__(self, config: ConnectionConfig, *, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client
        self.validate_config(config)

    @classmethod
    def get_adapter_schema(cls) -> list[ConfigField]:
        """Fields a connection form must offer for this provider."""
        return list(cls.config_schema)

    @classmethod
    def get_generation_parameters_schema(cls) -> list[GenerationParameter]:
        """Generation parameters this provider understands."""
        return list(cls.generation_schema)

    @classmethod
    def validate_config(cls, config: ConnectionConfig) -> None:
        """Raise ``ProviderConfigError`` if *config* cannot be used."""

    @asynccontextmanager
    async def http_client(self, timeout: float) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=timeout) as client:
            yield client

    async def raise_for_status(self, response: httpx.Response, signal: asyncio.Event | None) -> None:
        """Raise ``ProviderHTTPError`` if *response* is not a success.

        Reading the error body is raced against *signal* like any other read.
        """
        if response.is_success:
            return
        await abortable(response.aread(), signal)
        raise provider_status_error(response, self.label)

    @abstractmethod
    def prompt(
        self,
        messages: Sequence[ChatMessage],
        *,
        system_instruction: str | None = None,
        signal: asyncio.Event | None = None,
        stream: bool = True,
        **params: Any,
    ) -> AsyncIterator[str]:
        """Yield response text fragments in the order the provider emits them.

        Remaining keyword arguments are generation parameters passed through to
        the request body. With ``stream=False`` exactly one fragment is yielded.

        Raises ``ProviderHTTPError`` on a failed request and ``AbortError`` when
        *signal* is set before or during the call.
        """
        ...  # pragma: no cover

    @abstractmethod
    async def health_check(self) -> HealthCheckResult:
        """Validate URL and credentials. Failures are reported, never raised."""
        ...  # pragma: no cover

    @abstractmethod
    async def list_models(self) -> list[dict[str, Any]]:
        ...  # pragma: no cover

    @abstractmethod
    def prepare_messages(self, messages: Sequence[ChatMessage]) -> list[dict[str, Any]]:
        """Convert the conversation into the provider's native message list."""
        ...  # pragma: no cover
