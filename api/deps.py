from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from eventlog.core.config import Config
from eventlog.core.time import ServerClock
from eventlog.server.ingest import EventIngestService
from eventlog.server.store import EventStore


@lru_cache
def _load_config() -> Config:
    return Config.load()


def get_config(request: Request) -> Config:
    cfg = getattr(request.app.state, "config", None)
    return cfg or _load_config()


def get_store(request: Request) -> EventStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        # Lifespan did not run (e.g. ASGITransport in tests): load on first use.
        store = EventStore.from_config(get_config(request))
        request.app.state.store = store
    return store


def get_ingest(request: Request) -> EventIngestService:
    service = getattr(request.app.state, "ingest", None)
    if service is None:
        cfg = get_config(request)
        service = EventIngestService(
            get_store(request),
            ServerClock(cfg.server.timezone),
            max_batch_events=cfg.server.max_batch_events,
        )
        request.app.state.ingest = service
    return service
