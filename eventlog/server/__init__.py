"""eventlog.server

Server side: validation and stamping, per-channel append logs.
"""

from .append_log import AppendLog
from .ingest import BatchReceipt, EventIngestService
from .store import EventStore

__all__ = ["AppendLog", "BatchReceipt", "EventIngestService", "EventStore"]
