"""Incremental decoding of ``text/event-stream`` response bodies.

Providers are free to split one SSE line across several network reads, so the
decoder keeps the trailing partial line buffered until its newline arrives.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

import httpx

from minerva.providers.cancellation import abortable

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class SSELineDecoder:
    """Turns arbitrarily split text chunks into complete lines."""

    def __init__(self) -> None:
        self._buffer = ""
        self._closed = False

    def feed(self, text: str) -> list[str]:
        if self._closed:
            raise RuntimeError("decoder already closed")
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        return [line.rstrip("\r") for line in lines]

    def close(self) -> list[str]:
        """Return the unterminated final line, if any, and stop accepting input."""
        self._closed = True
        rest, self._buffer = self._buffer.rstrip("\r"), ""
        return [rest] if rest else []


def data_payload(line: str) -> str | None:
    """Return the payload of a ``data: `` line, or None for any other line."""
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX) :]


async def _next_chunk(chunks: AsyncIterator[str]) -> str | None:
    try:
        return await anext(chunks)
    except StopAsyncIteration:
        return None


async def aiter_sse_lines(response: httpx.Response, signal: asyncio.Event | None = None) -> AsyncIterator[str]:
    """Yield complete lines from a streaming response body.

    Each read is raced against *signal*; see ``abortable``.
    """
    decoder = SSELineDecoder()
    chunks = response.aiter_text()
    while (text := await abortable(_next_chunk(chunks), signal)) is not None:
        for line in decoder.feed(text):
            yield line
    for line in decoder.close():
        yield line


async def aiter_sse_json(
    response: httpx.Response,
    provider: str,
    signal: asyncio.Event | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """Yield the decoded JSON object of every ``data: `` line.

    Stops at the ``[DONE]`` sentinel. Lines whose payload is not valid JSON
    are logged and skipped; the stream carries on.
    """
    async with aclosing(aiter_sse_lines(response, signal)) as lines:
        async for line in lines:
            payload = data_payload(line)
            if payload is None:
                continue
            if payload == DONE_SENTINEL:
                logger.debug("[%s] Received [DONE] signal", provider)
                return
            try:
                event = json.loads(payload)
            except json.JSONDecodeError as exc:
                logger.warning("[%s] Error parsing SSE chunk: %s %r", provider, exc, line)
                continue
            if isinstance(event, dict):
                yield event
