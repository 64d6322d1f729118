from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from api.errors import ApiError, api_error_handler
from api.routes import get_api_router
from eventlog import __version__
from eventlog.core.config import Config
from eventlog.core.exceptions import ConfigError
from eventlog.server.store import EventStore

logger = logging.getLogger(__name__)


def create_app(config: Config | None = None) -> FastAPI:
    start = time.monotonic()
    config = config or Config.load()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.started_at = start

        # Load both logs before the first request; tests may inject their own store.
        if getattr(app.state, "store", None) is None:
            app.state.store = EventStore.from_config(app.state.config)
        logger.info("server_started", extra=app.state.store.counts())

        yield

        await app.state.store.aclose()

    openapi_tags = [
        {"name": "health", "description": "Liveness and version metadata."},
        {"name": "events", "description": "Instant and batch event ingestion, listing and clearing."},
    ]

    app = FastAPI(
        title="eventlog API",
        description="Dual-channel event recording with durable append logs",
        version=__version__,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.started_at = start

    app.add_exception_handler(ApiError, api_error_handler)
    app.include_router(get_api_router(), prefix="/api")

    # Everything outside /api is plain static content, when there is any.
    if config.public_dir.is_dir():
        app.mount("/", StaticFiles(directory=config.public_dir, html=True), name="static")
    return app


# Module-level app for uvicorn (e.g. `uvicorn api.main:app`).
# Guarded so imports don't crash on a broken config file.
try:
    app = create_app()
except ConfigError:
    app = None
