"""eventlog.core.serial

One worker task per resource, owning a FIFO of pending jobs.

Job N+1 starts only after job N settled (success or failure). A failing job
fails its own submitter and nothing else. Jobs are never cancelled once
submitted: a submitter that stops waiting does not stop the job.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

T = TypeVar("T")

Job = Callable[[], Awaitable[T]]


class SerialQueue(Generic[T]):
    def __init__(self, name: str) -> None:
        self.name = name
        self._queue: asyncio.Queue[tuple[Job[T], asyncio.Future[T]]] | None = None
        self._worker: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def _ensure_worker(self) -> asyncio.Queue[tuple[Job[T], asyncio.Future[T]]]:
        loop = asyncio.get_running_loop()
        if self._queue is None or self._worker is None or self._worker.done() or self._loop is not loop:
            self._loop = loop
            self._queue = asyncio.Queue()
            self._worker = loop.create_task(self._run(self._queue), name=f"serial:{self.name}")
        return self._queue

    def submit(self, job: Job[T]) -> asyncio.Future[T]:
        """Enqueue ``job`` and return a future for its outcome."""

        queue = self._ensure_worker()
        assert self._loop is not None
        fut: asyncio.Future[T] = self._loop.create_future()
        queue.put_nowait((job, fut))
        return fut

    async def run(self, job: Job[T]) -> T:
        """Enqueue ``job`` and wait for it. Cancelling the caller leaves the job queued."""

        return await asyncio.shield(self.submit(job))

    async def join(self) -> None:
        """Wait until every job submitted so far has settled."""

        if self._queue is not None and self._loop is asyncio.get_running_loop():
            await self._queue.join()

    async def aclose(self) -> None:
        await self.join()
        worker, self._worker = self._worker, None
        self._queue = None
        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass

    async def _run(self, queue: asyncio.Queue[tuple[Job[T], asyncio.Future[T]]]) -> None:
        while True:
            job, fut = await queue.get()
            try:
                result: Any = await job()
            except Exception as e:
                if not fut.done():
                    fut.set_exception(e)
            else:
                if not fut.done():
                    fut.set_result(result)
            finally:
                queue.task_done()
