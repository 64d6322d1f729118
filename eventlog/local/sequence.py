"""eventlog.local.sequence

Monotonic local sequence numbers.

On load the counter resumes from the larger of the persisted counter and the
highest ``seq`` already in the journal, so a lost counter write can never
cause a number to be handed out twice. ``reset()`` starts a new journal
epoch: the next number is 1 again and is not comparable with numbers from
before the reset.
"""

from __future__ import annotations

import logging

from eventlog.core.exceptions import StorageError
from eventlog.core.types import StorageResult
from eventlog.local.journal import LocalEventJournal
from eventlog.local.storage import SEQ_KEY, KeyValueStore, read_int

logger = logging.getLogger(__name__)


class SequenceAllocator:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._value = 0

    @property
    def current(self) -> int:
        return self._value

    def load(self, journal: LocalEventJournal | None = None) -> int:
        stored = read_int(self._store, SEQ_KEY) or 0
        scanned = journal.max_seq() if journal is not None else 0
        self._value = max(stored, scanned)
        return self._value

    def next(self) -> int:
        self._value += 1
        result = self.save()
        if not result.ok:
            # Allocation never waits on storage; the journal scan on load covers the gap.
            logger.warning("sequence_save_failed", extra={"seq": self._value, "error": result.error})
        return self._value

    def save(self) -> StorageResult:
        try:
            self._store.set(SEQ_KEY, str(self._value))
        except StorageError as e:
            return StorageResult.failure(e)
        return StorageResult.success()

    def reset(self) -> StorageResult:
        self._value = 0
        try:
            self._store.remove(SEQ_KEY)
        except StorageError as e:
            return StorageResult.failure(e)
        return StorageResult.success()
