"""Error kinds raised by provider adapters.

Callers distinguish three outcomes of ``prompt()``:

* ``AbortError`` — the caller's cancellation signal fired ("stopped by user").
* ``ProviderHTTPError`` — the provider answered with a non-success status or
  could not be reached.
* ``ProviderConfigError`` — the connection settings are unusable; raised
  before any network call.
"""

import httpx


class ProviderError(Exception):
    """Base class for every adapter failure."""


class ProviderConfigError(ProviderError, ValueError):
    pass


class AbortError(ProviderError):
    def __init__(self, message: str = "Request aborted by the caller.") -> None:
        super().__init__(message)


class ProviderHTTPError(ProviderError):
    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{provider} API Error: {message}")
        self.provider = provider
        self.message = message
        self.status_code = status_code

    @classmethod
    def from_transport(cls, provider: str, exc: httpx.HTTPError) -> "ProviderHTTPError":
        return cls(provider, str(exc) or type(exc).__name__)


def error_message_from_body(body: object, fallback: str) -> str:
    """Pick the most human-readable message out of a provider error body.

    Both OpenAI-compatible servers and Gemini report ``{"error": {"message": ...}}``;
    some local servers use a bare ``{"error": "..."}`` or ``{"message": "..."}``.
    """
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    return fallback


def response_error_message(response: httpx.Response, fallback: str) -> str:
    """Best human-readable error for an already-read *response*."""
    try:
        body = response.json()
    except ValueError:
        body = None
    return error_message_from_body(body, fallback)


def provider_status_error(response: httpx.Response, provider: str) -> ProviderHTTPError:
    """Build the error for a non-success *response* whose body has been read."""
    message = response_error_message(response, response.reason_phrase or f"HTTP {response.status_code}")
    return ProviderHTTPError(provider, message, response.status_code)
