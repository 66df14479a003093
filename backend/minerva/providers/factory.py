import httpx

from minerva.providers.base import ProviderAdapter
from minerva.providers.errors import ProviderConfigError
from minerva.providers.gemini import GeminiAdapter
from minerva.providers.openai import OpenAIV1Adapter
from minerva.schemas.connection import ConnectionConfig
from minerva.schemas.provider import ConfigField, GenerationParameter

# Provider identifier (ConnectionConfig.provider) → adapter class
PROVIDERS: dict[str, type[ProviderAdapter]] = {
    OpenAIV1Adapter.provider_id: OpenAIV1Adapter,
    GeminiAdapter.provider_id: GeminiAdapter,
}


def get_adapter(config: ConnectionConfig, client: httpx.AsyncClient | None = None) -> ProviderAdapter:
    """Instantiate the adapter registered for ``config.provider``.

    Raises ProviderConfigError for an unknown provider or unusable settings.
    """
    adapter_cls = PROVIDERS.get(config.provider)
    if adapter_cls is None:
        raise ProviderConfigError(f"Unsupported provider type: {config.provider!r}")
    return adapter_cls(config, client=client)


def provider_schemas() -> dict[str, list[ConfigField]]:
    return {provider_id: cls.get_adapter_schema() for provider_id, cls in PROVIDERS.items()}


def generation_schemas() -> dict[str, list[GenerationParameter]]:
    return {provider_id: cls.get_generation_parameters_schema() for provider_id, cls in PROVIDERS.items()}
