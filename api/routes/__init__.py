from __future__ import annotations

from fastapi import APIRouter

from api.routes import events, health


def get_api_router() -> APIRouter:
    router = APIRouter()

    router.include_router(health.router, tags=["health"])
    router.include_router(events.router, tags=["events"])
    # Must stay last: answers every path the routers above do not.
    router.include_router(events.fallback)

    return router
