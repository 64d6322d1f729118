from __future__ import annotations

import httpx
import pytest

from eventlog.core.client import EventApiClient
from eventlog.core.config import ClientConfig
from eventlog.core.exceptions import DeliveryError


def _client(handler, **cfg) -> EventApiClient:
    config = ClientConfig(base_url="http://test", **cfg)
    return EventApiClient(config, transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_request_json_blocks_too_large() -> None:
    client = _client(lambda req: httpx.Response(200, content=b"x" * 2048), max_response_bytes=1024)

    with pytest.raises(httpx.TransportError):
        await client.fetch_events()
    await client.aclose()


@pytest.mark.anyio
async def test_request_json_schema_mismatch() -> None:
    client = _client(lambda req: httpx.Response(200, json=[1, 2, 3]))

    with pytest.raises(DeliveryError):
        await client.fetch_events()
    await client.aclose()


@pytest.mark.anyio
async def test_unexpected_status_carries_code() -> None:
    client = _client(lambda req: httpx.Response(400, json={"error": "message is required"}))

    with pytest.raises(DeliveryError) as exc:
        await client.post_instant({"seq": 1})
    assert exc.value.status == 400
    await client.aclose()


@pytest.mark.anyio
async def test_paths_are_under_api_prefix() -> None:
    seen: list[tuple[str, str]] = []

    def handler(req: httpx.Request) -> httpx.Response:
        seen.append((req.method, req.url.path))
        status = 201 if req.method == "POST" else 200
        return httpx.Response(status, json={"ok": True})

    client = _client(handler)
    await client.post_instant({"message": "a"})
    await client.post_batch([{"message": "a"}])
    await client.fetch_events()
    await client.clear_events()
    await client.aclose()

    assert seen == [
        ("POST", "/api/instant-events"),
        ("POST", "/api/batch-events"),
        ("GET", "/api/events"),
        ("DELETE", "/api/events"),
    ]
