"""RPC client — JSON-RPC over HTTP, used to probe endpoints.

Each probe posts a cheap read-only call (``getblockcount`` by default) and
times the round trip. The reply must be a well-formed JSON-RPC 2.0 envelope
with a ``result`` and no ``error``; anything else is a probe failure.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

from aiohttp import ClientError, ClientSession, ClientTimeout
from pydantic import BaseModel, ValidationError

from chain_network.rpc.endpoint import ProbeResult, normalize_endpoint

logger = logging.getLogger(__name__)

PROBE_METHOD = "getblockcount"
DEFAULT_TIMEOUT = ClientTimeout(total=10)


class ProbeFailure(Exception):
    """Raised when an endpoint does not answer a probe correctly."""


class RpcError(BaseModel):
    code: int = 0
    message: str = ""


class RpcResponse(BaseModel):
    """JSON-RPC 2.0 response envelope."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: RpcError | None = None


class RpcClient:
    """JSON-RPC client over a shared aiohttp session.

    The session is owned by the caller; the client never closes it.
    """

    def __init__(
        self,
        session: ClientSession,
        method: str = PROBE_METHOD,
        params: list[Any] | None = None,
    ) -> None:
        self._session = session
        self.method = method
        self.params = params or []
        self._next_id = 0

    async def query(
        self,
        endpoint: str,
        method: str,
        params: list[Any] | None = None,
    ) -> Any:
        """Call ``method`` on an endpoint and return its result.

        Raises:
            ProbeFailure: On transport errors, non-200 replies, malformed
                envelopes or JSON-RPC errors.
        """
        self._next_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": self._next_id,
        }
        url = normalize_endpoint(endpoint)
        try:
            async with self._session.post(url, json=payload) as resp:
                if resp.status != 200:
                    raise ProbeFailure(f"{url} answered HTTP {resp.status}")
                body = await resp.text()
        except (ClientError, asyncio.TimeoutError) as e:
            raise ProbeFailure(f"{url} unreachable: {e}") from e

        try:
            response = RpcResponse.model_validate(json.loads(body))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ProbeFailure(f"{url} sent a malformed response") from e

        if response.error is not None:
            raise ProbeFailure(
                f"{url} returned error {response.error.code}: {response.error.message}"
            )
        if response.result is None:
            raise ProbeFailure(f"{url} returned no result")
        return response.result

    async def probe(self, endpoint: str) -> ProbeResult:
        """Time one round trip to ``endpoint``.

        Raises:
            ProbeFailure: If the endpoint does not answer correctly.
        """
        start = time.perf_counter()
        result = await self.query(endpoint, self.method, self.params)
        latency_ms = (time.perf_counter() - start) * 1000
        height = result if isinstance(result, int) and not isinstance(result, bool) else None
        logger.debug("Probe %s: %.1f ms (height=%s)", endpoint, latency_ms, height)
        return ProbeResult.success(endpoint, latency_ms, height)
