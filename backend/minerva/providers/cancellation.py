"""Cooperative cancellation for in-flight provider calls.

The caller owns an ``asyncio.Event`` and passes it as ``signal``. Setting the
event aborts whatever the adapter is currently awaiting (response headers or
the next body chunk) and surfaces as ``AbortError``.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from minerva.providers.errors import AbortError

T = TypeVar("T")


def raise_if_aborted(signal: asyncio.Event | None) -> None:
    if signal is not None and signal.is_set():
        raise AbortError()


async def abortable(awaitable: Awaitable[T], signal: asyncio.Event | None) -> T:
    """Await *awaitable* unless *signal* fires first.

    When the signal wins, the pending work is cancelled and awaited so nothing
    is left running, then ``AbortError`` is raised.
    """
    if signal is None:
        return await awaitable

    work = asyncio.ensure_future(awaitable)
    aborted = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({work, aborted}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        aborted.cancel()
        raise

    if work in done:
        aborted.cancel()
        return work.result()

    work.cancel()
    await asyncio.gather(work, return_exceptions=True)
    raise AbortError()
