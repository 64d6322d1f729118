"""eventlog.server.store

Both channel logs of one server process.

The two files share nothing: a write to the instant log never waits on the
batch log and vice versa.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eventlog.core.config import Config
from eventlog.core.time import iso_z, utc_now
from eventlog.server.append_log import AppendLog


@dataclass
class EventStore:
    instant: AppendLog
    batch: AppendLog

    @classmethod
    def from_config(cls, config: Config) -> EventStore:
        store = cls(
            instant=AppendLog(config.instant_file, fsync=config.server.fsync),
            batch=AppendLog(config.batch_file, fsync=config.server.fsync),
        )
        store.load()
        return store

    def load(self) -> None:
        self.instant.load()
        self.batch.load()

    def counts(self) -> dict[str, int]:
        return {"instant": len(self.instant), "batch": len(self.batch)}

    def snapshot(self) -> dict[str, Any]:
        return {
            "instant": list(self.instant.items),
            "batch": list(self.batch.items),
            "counts": self.counts(),
            "updatedAt": iso_z(utc_now()),
        }

    async def clear(self) -> None:
        """Truncate both logs, on disk and in memory."""

        await self.instant.truncate()
        await self.batch.truncate()

    async def aclose(self) -> None:
        await self.instant.aclose()
        await self.batch.aclose()
