"""eventlog.core.types

Lightweight dataclasses for hot-path objects.

Pydantic models own IO boundaries; dataclasses keep runtime lean. Failures
of client-local persistence and of delivery are values, not exceptions: the
caller decides whether to ignore them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Channel(StrEnum):
    INSTANT = "instant"
    BATCH = "batch"


@dataclass(frozen=True, slots=True)
class StorageResult:
    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> StorageResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: BaseException | str) -> StorageResult:
        return cls(ok=False, error=str(error))


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    channel: Channel
    ok: bool
    status: int | None = None
    error: str | None = None
    body: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class BatchFlushResult:
    sent: int
    cursor: int
    delivery: DeliveryResult | None = None


@dataclass(frozen=True, slots=True)
class ServerSnapshot:
    instant: list[dict[str, Any]] = field(default_factory=list)
    batch: list[dict[str, Any]] = field(default_factory=list)
