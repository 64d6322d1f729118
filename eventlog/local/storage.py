"""eventlog.local.storage

Client-local key/value persistence: one small file per key in a state
directory. Keys are independent, so a corrupt journal never takes the
sequence counter down with it.

Writes are atomic: write a temp file, fsync, rename over the old value.
"""

from __future__ import annotations

import os
from pathlib import Path

from eventlog.core.exceptions import StorageError

JOURNAL_KEY = "journal"
SEQ_KEY = "seq"
BATCH_SEQ_KEY = "batch_seq"


class KeyValueStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"read {key} failed: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as e:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                pass
            raise StorageError(f"write {key} failed: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"remove {key} failed: {e}") from e


def read_int(store: KeyValueStore, key: str) -> int | None:
    """Stored non-negative integer, or None when absent or unreadable."""

    try:
        raw = store.get(key)
    except StorageError:
        return None
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value >= 0 else None
