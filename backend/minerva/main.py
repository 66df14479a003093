import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from minerva.api import api_router
from minerva.api.chat_ws import router as chat_ws_router
from minerva.config import settings

# ── Logging setup ────────────────────────────────────────────────────────────

logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
logging.root.setLevel(settings.log_level.upper())
# Quiet down noisy third-party loggers
for _name in ("httpcore", "httpx"):
    logging.getLogger(_name).setLevel(logging.WARNING)

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
app.include_router(chat_ws_router)  # WebSocket: /ws/chat


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
