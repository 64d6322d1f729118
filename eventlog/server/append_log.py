"""eventlog.server.append_log

One append-only NDJSON file per channel.

Every write to a file goes through that file's own serial queue, so two
requests appending to the same file can never interleave, and write N+1 is
not issued until write N's I/O has completed. A multi-record append is one
write call followed by one fsync. The in-memory index is extended by the
queue worker only after the write succeeded: index order is file order, and
a failed write leaves the index untouched.

There is no transaction across crashes. A crash mid-write can leave a
partial trailing line; `load()` skips any line that does not parse, and the
next append starts on a fresh line so it is not merged into the broken one.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import aiofiles

from eventlog.core.exceptions import AppendLogError
from eventlog.core.serial import SerialQueue

logger = logging.getLogger(__name__)


def encode_line(record: dict[str, Any]) -> str:
    return json.dumps(record, ensure_ascii=False, separators=(",", ":")) + "\n"


def decode_lines(raw: str) -> tuple[list[dict[str, Any]], int]:
    """Parse NDJSON text. Returns ``(records, skipped)``; unparsable or non-object lines are skipped."""

    items: list[dict[str, Any]] = []
    skipped = 0
    for line in raw.split("\n"):
        if not line.strip():
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            skipped += 1
            continue
        if not isinstance(obj, dict):
            skipped += 1
            continue
        items.append(obj)
    return items, skipped


class AppendLog:
    def __init__(self, path: Path, *, fsync: bool = True) -> None:
        self.path = Path(path)
        self.fsync = fsync
        self.items: list[dict[str, Any]] = []
        self._torn_tail = False
        self._queue: SerialQueue[None] = SerialQueue(name=self.path.name)

    def __len__(self) -> int:
        return len(self.items)

    def load(self) -> list[dict[str, Any]]:
        """Create the file if missing and rebuild the index from it."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.write_text("", encoding="utf-8")
            self.items = []
            self._torn_tail = False
            return self.items

        raw = self.path.read_text(encoding="utf-8", errors="replace")
        items, skipped = decode_lines(raw)
        if skipped:
            logger.debug("append_log_lines_skipped", extra={"path": str(self.path), "skipped": skipped})
        self._torn_tail = bool(raw) and not raw.endswith("\n")
        if self._torn_tail:
            logger.warning("append_log_torn_tail", extra={"path": str(self.path)})
        self.items = items
        return self.items

    async def append(self, records: Sequence[dict[str, Any]]) -> None:
        """Durably append ``records`` as one write, then index them.

        Raises:
            AppendLogError: the write failed; nothing was indexed.
        """

        if not records:
            return
        batch = list(records)
        data = "".join(encode_line(r) for r in batch)

        async def _job() -> None:
            prefix = "\n" if self._torn_tail else ""
            await self._write(prefix + data, mode="a")
            self._torn_tail = False
            self.items.extend(batch)

        await self._queue.run(_job)

    async def truncate(self) -> None:
        """Empty the file and the index, after every write queued before it."""

        async def _job() -> None:
            await self._write("", mode="w")
            self._torn_tail = False
            self.items.clear()

        await self._queue.run(_job)

    async def aclose(self) -> None:
        await self._queue.aclose()

    async def _write(self, data: str, *, mode: str) -> None:
        try:
            async with aiofiles.open(self.path, mode, encoding="utf-8") as f:
                if data:
                    await f.write(data)
                await f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
        except OSError as e:
            logger.error(
                "append_log_write_failed",
                extra={"path": str(self.path), "mode": mode, "error": str(e)},
            )
            raise AppendLogError(f"write to {self.path} failed: {e}") from e
