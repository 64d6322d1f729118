from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from api.deps import get_store
from eventlog import __version__
from eventlog.server.store import EventStore

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    counts: dict[str, int]


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, store: EventStore = Depends(get_store)) -> HealthResponse:
    started_at = float(getattr(request.app.state, "started_at", time.monotonic()))
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=time.monotonic() - started_at,
        counts=store.counts(),
    )
