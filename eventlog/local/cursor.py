"""eventlog.local.cursor

``lastBatchSeq``: the highest local seq known to be durably stored by an
acknowledged batch. It only moves forward, and only after the server said
yes.
"""

from __future__ import annotations

from eventlog.core.exceptions import StorageError
from eventlog.core.types import StorageResult
from eventlog.local.storage import BATCH_SEQ_KEY, KeyValueStore, read_int


class BatchCursor:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def load(self) -> int:
        self._value = read_int(self._store, BATCH_SEQ_KEY) or 0
        return self._value

    def advance(self, seq: int) -> StorageResult:
        if seq <= self._value:
            return StorageResult.success()
        self._value = seq
        return self.save()

    def save(self) -> StorageResult:
        try:
            self._store.set(BATCH_SEQ_KEY, str(self._value))
        except StorageError as e:
            return StorageResult.failure(e)
        return StorageResult.success()

    def reset(self) -> StorageResult:
        self._value = 0
        try:
            self._store.remove(BATCH_SEQ_KEY)
        except StorageError as e:
            return StorageResult.failure(e)
        return StorageResult.success()
