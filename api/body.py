from __future__ import annotations

import json
from typing import Any

from fastapi import Request

from api.errors import ApiError


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON token {token}")


async def read_json_body(request: Request, *, max_bytes: int) -> Any:
    """Read and parse the request body, refusing to buffer more than ``max_bytes``.

    An empty body parses as ``{}``.
    """

    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise ApiError(code="request.too_large", message="Payload too large", status=413)

    buf = bytearray()
    async for chunk in request.stream():
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise ApiError(code="request.too_large", message="Payload too large", status=413)

    if not buf.strip():
        return {}
    try:
        return json.loads(bytes(buf), parse_constant=_reject_constant)
    except ValueError as e:
        raise ApiError(code="request.invalid_json", message="Invalid JSON payload") from e
