"""eventlog.local.delivery

Per-channel, single-flight dispatch of network sends.

Sends for one channel run strictly one after another on one worker task, in
submission order, so the server never sees one client's submissions
reordered or overlapping. A failed send does not hold up the next one and is
not retried; it comes back to the submitter as a failed `DeliveryResult`.
Nothing here times out or cancels: a scheduled send always fires and settles
(the HTTP client's own timeout applies).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from eventlog.core.exceptions import DeliveryError
from eventlog.core.serial import SerialQueue
from eventlog.core.types import Channel, DeliveryResult

Send = Callable[[], Awaitable[dict[str, Any]]]


class DeliveryQueue:
    def __init__(self, channel: Channel) -> None:
        self.channel = channel
        self._queue: SerialQueue[DeliveryResult] = SerialQueue(name=f"delivery:{channel}")

    def _job(self, send: Send) -> Callable[[], Awaitable[DeliveryResult]]:
        async def _run() -> DeliveryResult:
            try:
                body = await send()
            except DeliveryError as e:
                return DeliveryResult(channel=self.channel, ok=False, status=e.status, error=str(e))
            except httpx.HTTPError as e:
                return DeliveryResult(channel=self.channel, ok=False, error=f"{type(e).__name__}: {e}")
            return DeliveryResult(channel=self.channel, ok=True, body=body)

        return _run

    def submit(self, send: Send) -> asyncio.Future[DeliveryResult]:
        """Schedule ``send`` after everything already queued on this channel."""

        return self._queue.submit(self._job(send))

    async def send(self, send: Send) -> DeliveryResult:
        """Schedule ``send`` and wait for its result."""

        return await self._queue.run(self._job(send))

    async def drain(self) -> None:
        """Wait for every send scheduled so far to settle."""

        await self._queue.join()

    async def aclose(self) -> None:
        await self._queue.aclose()
