"""eventlog.core.time

The only time helper surface in the codebase.

Server stamps are taken from a single clock read so that the four
server-time fields of one record can never disagree with each other.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

LOCAL_FORMAT = "%Y-%m-%d %H:%M:%S"
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    """Return an aware UTC datetime."""

    return datetime.now(tz=UTC)


def iso_z(dt: datetime) -> str:
    """Render ``dt`` as UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""

    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_zone(name: str) -> tuple[str, tzinfo]:
    """Return ``(name, zone)`` for an IANA zone name, falling back to UTC."""

    try:
        return name, ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("timezone_unknown", extra={"timezone": name})
        return "UTC", UTC


@dataclass(frozen=True, slots=True)
class ServerTime:
    server_time: str
    server_time_local: str
    server_time_zone: str
    server_time_ms: int


class ServerClock:
    """Stamps records with the server's view of "now" in one configured zone."""

    def __init__(self, timezone: str = "UTC", *, now: Callable[[], datetime] = utc_now) -> None:
        self.zone_name, self._zone = resolve_zone(timezone)
        self._now = now

    def stamp(self) -> ServerTime:
        now = self._now()
        # Truncate to whole milliseconds first; every field derives from this value.
        now = now.replace(microsecond=(now.microsecond // 1000) * 1000)
        return ServerTime(
            server_time=iso_z(now),
            server_time_local=now.astimezone(self._zone).strftime(LOCAL_FORMAT),
            server_time_zone=self.zone_name,
            server_time_ms=(now - EPOCH) // timedelta(milliseconds=1),
        )
