from __future__ import annotations

import asyncio

import pytest

from eventlog.core.serial import SerialQueue


@pytest.mark.anyio
async def test_jobs_run_one_at_a_time_in_submission_order() -> None:
    queue: SerialQueue[int] = SerialQueue(name="t")
    active = 0
    peak = 0
    order: list[int] = []

    def make(i: int, delay: float):
        async def job() -> int:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(delay)
            order.append(i)
            active -= 1
            return i

        return job

    futures = [queue.submit(make(i, 0.01 * (3 - i))) for i in range(3)]
    results = await asyncio.gather(*futures)

    assert results == [0, 1, 2]
    assert order == [0, 1, 2]
    assert peak == 1
    await queue.aclose()


@pytest.mark.anyio
async def test_failing_job_fails_only_its_submitter() -> None:
    queue: SerialQueue[str] = SerialQueue(name="t")

    async def boom() -> str:
        raise OSError("disk gone")

    async def fine() -> str:
        return "ok"

    with pytest.raises(OSError):
        await queue.run(boom)
    assert await queue.run(fine) == "ok"
    await queue.aclose()


@pytest.mark.anyio
async def test_join_waits_for_pending_jobs() -> None:
    queue: SerialQueue[None] = SerialQueue(name="t")
    done: list[int] = []

    async def job() -> None:
        await asyncio.sleep(0.01)
        done.append(1)

    queue.submit(job)
    queue.submit(job)
    await queue.join()

    assert done == [1, 1]
    await queue.aclose()
