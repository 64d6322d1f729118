"""eventlog.core.client

Shared HTTP client for the event API.

- one `httpx.AsyncClient` per process
- hard cap on response bodies
- no retries: a failed send is final at this layer; the local journal is
  the durable record and the batch channel is the second chance
"""

from __future__ import annotations

from typing import Any

import httpx

from eventlog.core.config import ClientConfig
from eventlog.core.exceptions import DeliveryError

API_PREFIX = "/api"


class EventApiClient:
    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> EventApiClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _enforce_max_bytes(self, resp: httpx.Response) -> None:
        size = len(resp.content)
        if size > self.config.max_response_bytes:
            raise httpx.TransportError(f"response_too_large:{size}")

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        resp = await self._client.request(method, API_PREFIX + path, **kwargs)
        await resp.aread()
        self._enforce_max_bytes(resp)
        return resp

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        expected_status: int = 200,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Request and parse a JSON object, raising `DeliveryError` on anything else."""

        resp = await self.request(method, path, **kwargs)
        if resp.status_code != expected_status:
            raise DeliveryError(f"unexpected_status:{resp.status_code}", status=resp.status_code)
        try:
            data: Any = resp.json()
        except ValueError as e:
            raise DeliveryError("response_not_json", status=resp.status_code) from e
        if not isinstance(data, dict):
            raise DeliveryError("response_schema_mismatch", status=resp.status_code)
        return data

    async def post_instant(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.request_json("POST", "/instant-events", json=payload, expected_status=201)

    async def post_batch(self, events: list[dict[str, Any]]) -> dict[str, Any]:
        return await self.request_json("POST", "/batch-events", json={"events": events}, expected_status=201)

    async def fetch_events(self) -> dict[str, Any]:
        return await self.request_json("GET", "/events", headers={"Cache-Control": "no-store"})

    async def clear_events(self) -> dict[str, Any]:
        return await self.request_json("DELETE", "/events")
