"""eventlog.core

Core primitives.

If a module needs to exist, it should probably depend only on this package.
"""

from .config import Config
from .exceptions import EventLogError
from .models import BatchRecord, InstantRecord, LocalJournalEntry
from .serial import SerialQueue
from .time import ServerClock, utc_now
from .types import Channel, DeliveryResult, StorageResult

__all__ = [
    "BatchRecord",
    "Channel",
    "Config",
    "DeliveryResult",
    "EventLogError",
    "InstantRecord",
    "LocalJournalEntry",
    "SerialQueue",
    "ServerClock",
    "StorageResult",
    "utc_now",
]
