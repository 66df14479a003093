"""Provider discovery API.

GET  /api/v1/providers/schemas             — connection form fields per provider
GET  /api/v1/providers/generation-schemas  — generation parameters per provider
POST /api/v1/providers/models              — models offered by a connection
"""

from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from minerva.http_client import get_http_client
from minerva.providers import ProviderConfigError, generation_schemas, get_adapter, provider_schemas
from minerva.schemas.connection import ConnectionConfig
from minerva.schemas.provider import ConfigField, GenerationParameter

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("/schemas", response_model=dict[str, list[ConfigField]])
async def get_provider_schemas() -> dict[str, list[ConfigField]]:
    return provider_schemas()


@router.get("/generation-schemas", response_model=dict[str, list[GenerationParameter]])
async def get_generation_schemas() -> dict[str, list[GenerationParameter]]:
    return generation_schemas()


@router.post("/models")
async def list_models(
    config: ConnectionConfig,
    client: httpx.AsyncClient = Depends(get_http_client),
) -> list[dict[str, Any]]:
    try:
        adapter = get_adapter(config, client)
    except ProviderConfigError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return await adapter.list_models()
