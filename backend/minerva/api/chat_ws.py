"""WebSocket endpoint for streaming chat generations.

Endpoint: /ws/chat

Protocol (JSON over WebSocket):

Client → Server:
    {"type": "prompt", "connection": {...}, "messages": [...],
     "system_instruction": "...", "parameters": {...}}
    {"type": "stop"}

Server → Client:
    {"type": "chunk",   "content": "<text fragment>"}
    {"type": "done"}
    {"type": "stopped"}                      — generation cancelled by the client
    {"type": "error",   "detail": "<error message>"}

Only one generation runs per connection. Disconnecting aborts it.
"""

import asyncio
import json
import logging
from contextlib import aclosing

import httpx
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from minerva.api.completions import generation_params
from minerva.http_client import get_http_client
from minerva.providers import (
    AbortError,
    ChatMessage,
    ProviderAdapter,
    ProviderConfigError,
    ProviderError,
    ProviderHTTPError,
    get_adapter,
)
from minerva.schemas.chat import PromptFrame

logger = logging.getLogger(__name__)

router = APIRouter()


def error_text(label: str, exc: Exception) -> str:
    """Markdown shown in the chat transcript in place of a reply."""
    message = exc.message if isinstance(exc, ProviderHTTPError) else str(exc)
    return f"**Error interacting with {label}:**\n*{message}*"


class _ChatSession:
    def __init__(self, websocket: WebSocket, client: httpx.AsyncClient) -> None:
        self._websocket = websocket
        self._client = client
        self._task: asyncio.Task | None = None
        self._signal: asyncio.Event | None = None

    async def send(self, data: dict) -> None:
        await self._websocket.send_text(json.dumps(data))

    async def handle(self, raw: str) -> None:
        try:
            payload = json.loads(raw)
            frame_type = payload.get("type")
        except (json.JSONDecodeError, AttributeError):
            await self.send({"type": "error", "detail": 'Invalid payload — expected {"type": "prompt" | "stop", ...}'})
            return

        if frame_type == "stop":
            if self._signal is not None:
                self._signal.set()
            return

        if frame_type != "prompt":
            await self.send({"type": "error", "detail": f"Unknown frame type: {frame_type!r}"})
            return

        if self._task is not None and not self._task.done():
            await self.send({"type": "error", "detail": "A generation is already in progress."})
            return

        try:
            frame = PromptFrame.model_validate(payload)
            adapter = get_adapter(frame.connection, self._client)
        except ValidationError as exc:
            await self.send({"type": "error", "detail": f"Invalid prompt frame: {exc.error_count()} error(s)"})
            return
        except ProviderConfigError as exc:
            await self.send({"type": "error", "detail": str(exc)})
            return

        self._signal = asyncio.Event()
        self._task = asyncio.create_task(self._generate(adapter, frame, self._signal))

    async def _generate(self, adapter: ProviderAdapter, frame: PromptFrame, signal: asyncio.Event) -> None:
        messages = [ChatMessage(role=m.role, content=m.content) for m in frame.messages]
        tokens = adapter.prompt(
            messages,
            system_instruction=frame.system_instruction,
            signal=signal,
            **generation_params(frame.parameters),
        )
        try:
            async with aclosing(tokens):
                async for token in tokens:
                    await self.send({"type": "chunk", "content": token})
        except AbortError:
            logger.info("Generation with %s stopped by user", adapter.label)
            await self.send({"type": "stopped"})
            return
        except ProviderError as exc:
            await self.send({"type": "error", "detail": error_text(adapter.label, exc)})
            return
        except Exception as exc:
            logger.exception("Unexpected failure while generating with %s", adapter.label)
            await self.send({"type": "error", "detail": error_text(adapter.label, exc)})
            return
        await self.send({"type": "done"})

    async def close(self) -> None:
        if self._signal is not None:
            self._signal.set()
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)


@router.websocket("/ws/chat")
async def websocket_chat(
    websocket: WebSocket,
    client: httpx.AsyncClient = Depends(get_http_client),
) -> None:
    await websocket.accept()
    session = _ChatSession(websocket, client)
    try:
        while True:
            await session.handle(await websocket.receive_text())
    except WebSocketDisconnect:
        pass
    finally:
        await session.close()
