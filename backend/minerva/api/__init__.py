from fastapi import APIRouter

from minerva.api.completions import router as completions_router
from minerva.api.connections import router as connections_router
from minerva.api.providers import router as providers_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(providers_router)
api_router.include_router(connections_router)
api_router.include_router(completions_router)
