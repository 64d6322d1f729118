"""eventlog.local.recorder

The client's recording session: the one place that decides what to do
about storage and delivery failures.

    record  -> allocate seq -> journal (durable) -> instant send (queued)
    close   -> drain instant sends -> flush batch -> read back -> reconcile
    clear   -> wipe journal, counter and cursor -> remote wipe

Failures are logged and otherwise ignored: the journal is the durable copy,
and anything the instant channel missed travels again in the next batch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx
from pydantic import JsonValue, TypeAdapter

from eventlog.core.client import EventApiClient
from eventlog.core.config import ClientConfig
from eventlog.core.exceptions import DeliveryError
from eventlog.core.models import LocalJournalEntry
from eventlog.core.time import iso_z, utc_now
from eventlog.core.types import BatchFlushResult, Channel, DeliveryResult, ServerSnapshot, StorageResult
from eventlog.local.cursor import BatchCursor
from eventlog.local.delivery import DeliveryQueue
from eventlog.local.journal import LocalEventJournal
from eventlog.local.sequence import SequenceAllocator
from eventlog.local.storage import KeyValueStore
from eventlog.reconcile import Align, ReconciliationView

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_EVENTS = 5000

_EXTRA = TypeAdapter(dict[str, JsonValue] | None)


@dataclass(frozen=True, slots=True)
class RecordedEvent:
    entry: LocalJournalEntry
    stored: StorageResult
    delivery: asyncio.Future[DeliveryResult]


class EventRecorder:
    def __init__(
        self,
        client: EventApiClient,
        store: KeyValueStore,
        *,
        max_batch_events: int = DEFAULT_MAX_BATCH_EVENTS,
    ) -> None:
        self.client = client
        self.journal = LocalEventJournal(store)
        self.sequence = SequenceAllocator(store)
        self.cursor = BatchCursor(store)
        self.instant_queue = DeliveryQueue(Channel.INSTANT)
        self.batch_queue = DeliveryQueue(Channel.BATCH)
        self.max_batch_events = max_batch_events

    @classmethod
    def open(
        cls,
        config: ClientConfig,
        *,
        state_dir: Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_batch_events: int = DEFAULT_MAX_BATCH_EVENTS,
    ) -> EventRecorder:
        recorder = cls(
            EventApiClient(config, transport=transport),
            KeyValueStore(state_dir or config.state_dir),
            max_batch_events=max_batch_events,
        )
        recorder.load()
        return recorder

    async def __aenter__(self) -> EventRecorder:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    def load(self) -> None:
        self.journal.load()
        self.sequence.load(self.journal)
        self.cursor.load()

    def record(
        self,
        message: str,
        event_type: str | None = None,
        extra: dict[str, Any] | None = None,
        *,
        at: datetime | None = None,
    ) -> RecordedEvent | None:
        """Journal one event and queue its instant send. Must run inside an event loop.

        Returns None (and records nothing) for an empty message. An ``extra``
        that is not JSON raises pydantic's ValidationError before a seq is
        allocated, leaving the session untouched.
        """

        if not message:
            return None
        extra = _EXTRA.validate_python(extra or None)
        entry = LocalJournalEntry(
            seq=self.sequence.next(),
            event_type=event_type or None,
            message=message,
            local_time=iso_z(at or utc_now()),
            extra=extra or None,
        )
        stored = self.journal.append(entry)
        if not stored.ok:
            logger.warning("journal_append_failed", extra={"seq": entry.seq, "error": stored.error})

        payload = entry.instant_payload()
        delivery = self.instant_queue.submit(lambda: self.client.post_instant(payload))
        delivery.add_done_callback(self._log_instant_outcome)
        return RecordedEvent(entry=entry, stored=stored, delivery=delivery)

    @staticmethod
    def _log_instant_outcome(fut: asyncio.Future[DeliveryResult]) -> None:
        if fut.cancelled():
            return
        result = fut.result()
        if not result.ok:
            logger.info("instant_send_failed", extra={"status": result.status, "error": result.error})

    async def flush_batch(self) -> BatchFlushResult:
        """Send every journal entry past the batch cursor.

        Entries go in chunks of at most ``max_batch_events``; the cursor moves
        after each acknowledged chunk and the flush stops at the first failure.
        """

        pending = self.journal.since(self.cursor.value)
        sent = 0
        last: DeliveryResult | None = None
        for start in range(0, len(pending), self.max_batch_events):
            chunk = pending[start : start + self.max_batch_events]
            events = [e.batch_payload() for e in chunk]
            last = await self.batch_queue.send(lambda events=events: self.client.post_batch(events))
            if not last.ok:
                logger.warning(
                    "batch_send_failed",
                    extra={"pending": len(pending) - sent, "status": last.status, "error": last.error},
                )
                break
            sent += len(chunk)
            saved = self.cursor.advance(chunk[-1].seq)
            if not saved.ok:
                logger.warning("batch_cursor_save_failed", extra={"seq": chunk[-1].seq, "error": saved.error})
        return BatchFlushResult(sent=sent, cursor=self.cursor.value, delivery=last)

    async def fetch_server_events(self) -> ServerSnapshot:
        try:
            data = await self.client.fetch_events()
        except (DeliveryError, httpx.HTTPError) as e:
            logger.warning("server_events_fetch_failed", extra={"error": str(e)})
            return ServerSnapshot()
        instant = data.get("instant")
        batch = data.get("batch")
        return ServerSnapshot(
            instant=instant if isinstance(instant, list) else [],
            batch=batch if isinstance(batch, list) else [],
        )

    async def close(self, *, align: Align = "position") -> ReconciliationView:
        """End the session: settle instant sends, flush the batch channel, compare."""

        await self.instant_queue.drain()
        await self.flush_batch()
        snapshot = await self.fetch_server_events()
        return ReconciliationView.build(snapshot.instant, self.journal.all(), align=align)

    async def clear(self) -> DeliveryResult:
        """Start a new journal epoch locally and wipe both server logs.

        The remote wipe is queued behind any instant sends still in flight.
        """

        for name, result in (
            ("journal", self.journal.clear()),
            ("sequence", self.sequence.reset()),
            ("batch_cursor", self.cursor.reset()),
        ):
            if not result.ok:
                logger.warning("local_clear_failed", extra={"state": name, "error": result.error})

        outcome = await self.instant_queue.send(self.client.clear_events)
        if not outcome.ok:
            logger.warning("remote_clear_failed", extra={"status": outcome.status, "error": outcome.error})
        return outcome

    async def aclose(self) -> None:
        await self.instant_queue.aclose()
        await self.batch_queue.aclose()
        await self.client.aclose()
