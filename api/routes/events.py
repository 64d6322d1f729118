from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from api.body import read_json_body
from api.deps import get_config, get_ingest, get_store
from api.errors import ApiError
from eventlog.core.config import Config
from eventlog.core.exceptions import AppendLogError, ValidationError
from eventlog.server.ingest import EventIngestService
from eventlog.server.store import EventStore

logger = logging.getLogger(__name__)

router = APIRouter()
fallback = APIRouter()

API_METHODS = "GET, POST, DELETE"


@router.get("/events")
async def list_events(store: EventStore = Depends(get_store)) -> dict[str, Any]:
    return store.snapshot()


@router.get("/instant-events")
async def list_instant_events(store: EventStore = Depends(get_store)) -> dict[str, Any]:
    return {"items": list(store.instant.items)}


@router.get("/batch-events")
async def list_batch_events(store: EventStore = Depends(get_store)) -> dict[str, Any]:
    return {"items": list(store.batch.items)}


@router.post("/instant-events", status_code=201)
async def post_instant_event(
    request: Request,
    config: Config = Depends(get_config),
    service: EventIngestService = Depends(get_ingest),
) -> dict[str, Any]:
    payload = await read_json_body(request, max_bytes=config.server.max_body_bytes)
    try:
        record = await service.ingest_instant(payload)
    except ValidationError as e:
        raise ApiError.invalid(e) from e
    except AppendLogError as e:
        raise ApiError.write_failed() from e
    return {"ok": True, "event": record}


@router.post("/batch-events", status_code=201)
async def post_batch_events(
    request: Request,
    config: Config = Depends(get_config),
    service: EventIngestService = Depends(get_ingest),
) -> dict[str, Any]:
    payload = await read_json_body(request, max_bytes=config.server.max_body_bytes)
    try:
        receipt = await service.ingest_batch(payload)
    except ValidationError as e:
        raise ApiError.invalid(e) from e
    except AppendLogError as e:
        raise ApiError.write_failed() from e
    logger.info("batch_stored", extra={"batch_id": receipt.batch_id, "stored": receipt.stored})
    return {"ok": True, "batchId": receipt.batch_id, "stored": receipt.stored}


@router.delete("/events")
async def clear_events(store: EventStore = Depends(get_store)) -> dict[str, bool]:
    try:
        await store.clear()
    except AppendLogError as e:
        raise ApiError.write_failed() from e
    logger.info("events_cleared")
    return {"ok": True}


@fallback.api_route(
    "/{path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def unmatched(request: Request, path: str) -> None:
    if request.method in ("GET", "HEAD"):
        raise ApiError(code="route.not_found", message="Not found", status=404)
    raise ApiError(
        code="route.method_not_allowed",
        message="Method Not Allowed",
        status=405,
        headers={"Allow": API_METHODS},
    )
