"""JSON-RPC over HTTP with per-endpoint rate limiting."""

import asyncio
import itertools
import logging
import time
from typing import Any

import httpx

from tracesim.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


def rpc_error_message(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("message", error))
    return str(error)


class RpcHttpClient:
    """Sends JSON-RPC envelopes to one node, at most ``rate_per_second`` requests per second.

    Node providers throttle debug_* and trace_* methods harder than plain
    reads, so every request (a whole batch counts as one) waits for its slot.
    Throttling and server errors surface as ExternalServiceError so callers
    can retry them.
    """

    def __init__(
        self,
        rpc_url: str,
        rate_per_second: float = 10.0,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._min_interval = 1.0 / rate_per_second
        self._last_request_time = 0.0
        self._lock = asyncio.Lock()
        self._ids = itertools.count(1)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def _wait_for_slot(self) -> None:
        async with self._lock:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()

    def _envelope(self, method: str, params: list) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}

    async def _send(self, payload: dict | list) -> Any:
        await self._wait_for_slot()
        try:
            resp = await self._client.post(self._rpc_url, json=payload)
        except httpx.TransportError as exc:
            raise ExternalServiceError(f"RPC node unreachable: {exc}") from exc

        if resp.status_code == 429 or resp.status_code >= 500:
            raise ExternalServiceError(f"RPC node returned HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise ExternalServiceError(f"RPC node returned invalid JSON: {exc}") from exc

    async def request(self, method: str, params: list) -> dict[str, Any]:
        """One call; returns the response envelope (``result`` or ``error``)."""
        data = await self._send(self._envelope(method, params))
        if not isinstance(data, dict):
            raise ExternalServiceError(f"RPC node returned a non-object response to {method}")
        return data

    async def batch(self, calls: list[tuple[str, list]]) -> list[dict[str, Any]]:
        """One HTTP batch; envelopes come back in request order whatever order the node used."""
        envelopes = [self._envelope(method, params) for method, params in calls]
        data = await self._send(envelopes)
        if not isinstance(data, list):
            error = data.get("error", data) if isinstance(data, dict) else data
            raise ExternalServiceError(f"RPC batch error: {rpc_error_message(error)}")

        by_id = {item.get("id"): item for item in data if isinstance(item, dict)}
        missing = {"error": {"message": "missing response"}}
        responses = [by_id.get(env["id"], missing) for env in envelopes]
        logger.debug("Batch of %d calls, %d responses", len(envelopes), len(data))
        return responses

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RpcHttpClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
