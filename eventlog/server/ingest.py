"""eventlog.server.ingest

Validation, stamping and persistence of incoming events.

Two entry points with the same per-event rules:

- instant: one event; a bad event fails alone.
- batch: up to ``max_batch_events`` events; a bad item at index ``i`` fails
  the whole batch and nothing is written.

A missing or invalid ``seq`` is not an error. The instant channel favours
availability over strict numbering, so the server substitutes the next
position in the target log.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from typing import Any

from eventlog.core.exceptions import ValidationError
from eventlog.core.models import SEQ_MAX, BatchRecord, InstantRecord
from eventlog.core.time import ServerClock
from eventlog.server.store import EventStore

MESSAGE_REQUIRED = "message is required"


def normalize_string(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def optional_string(value: Any) -> str | None:
    return normalize_string(value) or None


def normalize_seq(value: Any, fallback: int) -> int:
    """Positive integer ``seq`` or ``fallback``.

    Integral floats and numeric strings count as integers; booleans do not.
    """

    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        seq = value
    elif isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return fallback
        seq = int(value)
    elif isinstance(value, str):
        try:
            num = float(value.strip())
        except ValueError:
            return fallback
        if not math.isfinite(num) or not num.is_integer():
            return fallback
        seq = int(num)
    else:
        return fallback
    if 1 <= seq <= SEQ_MAX:
        return seq
    return fallback


def optional_mapping(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


def require_message(payload: dict[str, Any], *, index: int | None = None) -> str:
    message = normalize_string(payload.get("message"))
    if not message:
        reason = MESSAGE_REQUIRED if index is None else f"events[{index}] {MESSAGE_REQUIRED}"
        raise ValidationError(reason, index=index)
    return message


def batch_items(payload: Any, *, max_events: int) -> list[Any]:
    """The list under ``events`` (or its alias ``items``), bounds-checked."""

    body = payload if isinstance(payload, dict) else {}
    if isinstance(body.get("events"), list):
        items = body["events"]
    elif isinstance(body.get("items"), list):
        items = body["items"]
    else:
        raise ValidationError("events must be an array")
    if not items:
        raise ValidationError("events array is empty")
    if len(items) > max_events:
        raise ValidationError(f"events array exceeds {max_events}")
    return items


@dataclass(frozen=True, slots=True)
class BatchReceipt:
    batch_id: str
    stored: int


class EventIngestService:
    def __init__(self, store: EventStore, clock: ServerClock, *, max_batch_events: int = 5000) -> None:
        self.store = store
        self.clock = clock
        self.max_batch_events = max_batch_events

    def build_instant(self, payload: Any) -> InstantRecord:
        body = payload if isinstance(payload, dict) else {}
        message = require_message(body)
        stamp = self.clock.stamp()
        return InstantRecord(
            id=str(uuid.uuid4()),
            seq=normalize_seq(body.get("seq"), len(self.store.instant) + 1),
            message=message,
            event_type=optional_string(body.get("eventType")),
            client_time=optional_string(body.get("clientTime")),
            meta=optional_mapping(body.get("meta")),
            server_time=stamp.server_time,
            server_time_local=stamp.server_time_local,
            server_time_zone=stamp.server_time_zone,
            server_time_ms=stamp.server_time_ms,
        )

    def build_batch(self, payload: Any) -> tuple[str, list[BatchRecord]]:
        items = batch_items(payload, max_events=self.max_batch_events)
        batch_id = str(uuid.uuid4())
        stamp = self.clock.stamp()
        fallback_start = len(self.store.batch) + 1

        records: list[BatchRecord] = []
        for i, raw in enumerate(items):
            entry = raw if isinstance(raw, dict) else {}
            message = require_message(entry, index=i)
            local_time = optional_string(entry.get("localTime")) or optional_string(entry.get("clientTime"))
            records.append(
                BatchRecord(
                    id=str(uuid.uuid4()),
                    batch_id=batch_id,
                    seq=normalize_seq(entry.get("seq"), fallback_start + i),
                    message=message,
                    event_type=optional_string(entry.get("eventType")),
                    local_time=local_time,
                    extra=optional_mapping(entry.get("extra")),
                    server_time=stamp.server_time,
                    server_time_local=stamp.server_time_local,
                    server_time_zone=stamp.server_time_zone,
                    server_time_ms=stamp.server_time_ms,
                )
            )
        return batch_id, records

    async def ingest_instant(self, payload: Any) -> dict[str, Any]:
        """Validate, stamp and durably append one event. Returns the stored record.

        Raises:
            ValidationError: the payload was rejected; nothing was written.
            AppendLogError: the write failed; the index is unchanged.
        """

        record = self.build_instant(payload).to_wire()
        await self.store.instant.append([record])
        return record

    async def ingest_batch(self, payload: Any) -> BatchReceipt:
        """Validate every item, then append them all as one write."""

        batch_id, records = self.build_batch(payload)
        await self.store.batch.append([r.to_wire() for r in records])
        return BatchReceipt(batch_id=batch_id, stored=len(records))
