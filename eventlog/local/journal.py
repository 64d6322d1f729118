"""eventlog.local.journal

Ordered, durable log of this client's own events.

The journal is the source of truth for replay and reconciliation. It is
written before any network send, so an event survives whatever happens to
its delivery. Unreadable persisted state loads as an empty journal: losing
old history is preferable to refusing to start.
"""

from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from eventlog.core.exceptions import StorageError
from eventlog.core.models import LocalJournalEntry
from eventlog.core.types import StorageResult
from eventlog.local.storage import JOURNAL_KEY, KeyValueStore

logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(list[LocalJournalEntry])


class LocalEventJournal:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._entries: list[LocalJournalEntry] = []

    def load(self) -> list[LocalJournalEntry]:
        try:
            raw = self._store.get(JOURNAL_KEY)
        except StorageError as e:
            logger.warning("journal_unreadable", extra={"error": str(e)})
            raw = None
        if not raw:
            self._entries = []
            return self.all()
        try:
            self._entries = _ENTRIES.validate_json(raw)
        except PydanticValidationError:
            logger.warning("journal_corrupt_reset")
            self._entries = []
        return self.all()

    def append(self, entry: LocalJournalEntry) -> StorageResult:
        """Add ``entry`` and persist the whole journal before returning.

        The entry stays in memory even if persisting fails.
        """

        self._entries.append(entry)
        return self._save()

    def all(self) -> list[LocalJournalEntry]:
        return list(self._entries)

    def since(self, seq: int) -> list[LocalJournalEntry]:
        """Entries with ``seq`` strictly greater than ``seq``."""

        return [e for e in self._entries if e.seq > seq]

    def max_seq(self) -> int:
        return max((e.seq for e in self._entries), default=0)

    def clear(self) -> StorageResult:
        self._entries = []
        try:
            self._store.remove(JOURNAL_KEY)
        except StorageError as e:
            return StorageResult.failure(e)
        return StorageResult.success()

    def __len__(self) -> int:
        return len(self._entries)

    def _save(self) -> StorageResult:
        data = json.dumps([e.to_wire() for e in self._entries], ensure_ascii=False, separators=(",", ":"))
        try:
            self._store.set(JOURNAL_KEY, data)
        except StorageError as e:
            return StorageResult.failure(e)
        return StorageResult.success()
