"""Connection test endpoint.

POST /api/v1/connection-configs/test — run the provider health check for an
unsaved connection config. Failures are reported in the body, not as errors.
"""

import httpx
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from minerva.http_client import get_http_client
from minerva.providers import ProviderConfigError, get_adapter
from minerva.schemas.connection import ConnectionConfig
from minerva.schemas.provider import HealthCheckResult

router = APIRouter(prefix="/connection-configs", tags=["connection-configs"])


@router.post("/test", response_model=HealthCheckResult)
async def test_connection(
    config: ConnectionConfig,
    client: httpx.AsyncClient = Depends(get_http_client),
) -> HealthCheckResult | JSONResponse:
    try:
        adapter = get_adapter(config, client)
    except ProviderConfigError as exc:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"ok": False, "message": str(exc)})
    return await adapter.health_check()
