"""eventlog.local

Client side: sequence numbers, the local journal, the batch cursor and the
per-channel delivery queues.
"""

from .cursor import BatchCursor
from .delivery import DeliveryQueue
from .journal import LocalEventJournal
from .recorder import EventRecorder, RecordedEvent
from .sequence import SequenceAllocator
from .storage import KeyValueStore

__all__ = [
    "BatchCursor",
    "DeliveryQueue",
    "EventRecorder",
    "KeyValueStore",
    "LocalEventJournal",
    "RecordedEvent",
    "SequenceAllocator",
]
