"""eventlog.core.models

Wire and storage shapes. Field names are snake_case in Python and camelCase
on the wire and on disk.

Stored records are immutable. The logs are append-only.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, JsonValue
from pydantic.alias_generators import to_camel

SEQ_MAX = 2**63 - 1


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class LocalJournalEntry(_Wire):
    """Client-side mirror of one event, kept whether or not the server saw it."""

    seq: int = Field(ge=1, le=SEQ_MAX)
    event_type: str | None = None
    message: str = Field(min_length=1)
    local_time: str
    extra: dict[str, JsonValue] | None = None

    def instant_payload(self) -> dict[str, Any]:
        """Body for the instant channel (client time travels as ``clientTime``)."""

        return {
            "seq": self.seq,
            "eventType": self.event_type,
            "message": self.message,
            "clientTime": self.local_time,
            "meta": self.extra,
        }

    def batch_payload(self) -> dict[str, Any]:
        return {
            "seq": self.seq,
            "message": self.message,
            "eventType": self.event_type,
            "localTime": self.local_time,
            "extra": self.extra,
        }


class _ServerStamped(_Wire):
    server_time: str
    server_time_local: str
    server_time_zone: str
    server_time_ms: int


class InstantRecord(_ServerStamped):
    id: str
    seq: int
    message: str
    event_type: str | None = None
    client_time: str | None = None
    meta: dict[str, Any] | None = None


class BatchRecord(_ServerStamped):
    id: str
    batch_id: str
    seq: int
    message: str
    event_type: str | None = None
    local_time: str | None = None
    extra: dict[str, Any] | None = None
