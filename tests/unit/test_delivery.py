from __future__ import annotations

import asyncio

import httpx
import pytest

from eventlog.core.exceptions import DeliveryError
from eventlog.core.types import Channel
from eventlog.local.delivery import DeliveryQueue


@pytest.mark.anyio
async def test_sends_are_serial_and_ordered() -> None:
    queue = DeliveryQueue(Channel.INSTANT)
    active = 0
    peak = 0
    started: list[int] = []

    def make(i: int):
        async def send() -> dict:
            nonlocal active, peak
            started.append(i)
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.02 if i == 0 else 0)
            active -= 1
            return {"i": i}

        return send

    futures = [queue.submit(make(i)) for i in range(4)]
    results = await asyncio.gather(*futures)

    assert started == [0, 1, 2, 3]
    assert peak == 1
    assert [r.body for r in results] == [{"i": i} for i in range(4)]
    assert all(r.ok and r.channel is Channel.INSTANT for r in results)
    await queue.aclose()


@pytest.mark.anyio
async def test_failed_send_does_not_block_the_next_and_is_not_retried() -> None:
    queue = DeliveryQueue(Channel.INSTANT)
    calls: list[str] = []

    async def down() -> dict:
        calls.append("down")
        raise httpx.ConnectError("connection refused")

    async def rejected() -> dict:
        calls.append("rejected")
        raise DeliveryError("unexpected_status:400", status=400)

    async def up() -> dict:
        calls.append("up")
        return {"ok": True}

    first = queue.submit(down)
    second = queue.submit(rejected)
    third = queue.submit(up)
    await queue.drain()

    assert calls == ["down", "rejected", "up"]
    assert not first.result().ok
    assert "ConnectError" in first.result().error
    assert second.result().status == 400
    assert third.result().ok
    await queue.aclose()
