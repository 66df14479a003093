from collections.abc import AsyncIterator

import httpx

from minerva.config import settings


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """FastAPI dependency: one outbound HTTP client per request or websocket."""
    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        yield client
