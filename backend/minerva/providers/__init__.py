from minerva.providers.base import ChatMessage, ProviderAdapter
from minerva.providers.errors import AbortError, ProviderConfigError, ProviderError, ProviderHTTPError
from minerva.providers.factory import PROVIDERS, generation_schemas, get_adapter, provider_schemas

__all__ = [
    "AbortError",
    "ChatMessage",
    "PROVIDERS",
    "ProviderAdapter",
    "ProviderConfigError",
    "ProviderError",
    "ProviderHTTPError",
    "generation_schemas",
    "get_adapter",
    "provider_schemas",
]
