"""Endpoint selection — pick the fastest RPC endpoint within a time budget.

Selection runs in three stages:
  1. Probe: one asyncio task per unique candidate, all in flight at once.
     A failing probe is logged at DEBUG and recorded as FAILED; it never
     aborts the selection.
  2. Aggregate: wait until every probe finished or the budget elapsed,
     whichever comes first. Probes still running at the deadline are
     ABANDONED: cancelled, and whatever they would have produced is ignored.
     Cancelled probes get a short grace period to unwind; any still running
     after it finish in the background without delaying the caller.
  3. Rank: successful probes ordered by latency (lowest first), ties going
     to the higher chain tip and then to candidate order.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Protocol, Sequence

from aiohttp import ClientSession

from chain_network.rpc.client import DEFAULT_TIMEOUT, RpcClient
from chain_network.rpc.endpoint import ProbeResult

logger = logging.getLogger(__name__)

DEFAULT_SELECTION_TIMEOUT = 2.0  # Seconds
ABANDON_GRACE = 0.1            # Seconds cancelled probes get to unwind

# Abandoned probes still unwinding after the grace period
_stragglers: set[asyncio.Task[ProbeResult]] = set()


class Prober(Protocol):
    """Anything that can probe an endpoint and report its latency."""

    async def probe(self, endpoint: str) -> ProbeResult:
        ...


def validate_timeout(timeout: float) -> float:
    """Check that a selection budget is a positive, finite number of seconds."""
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ValueError(f"Selection timeout must be a number, got {timeout!r}")
    if not math.isfinite(timeout) or timeout <= 0:
        raise ValueError(f"Selection timeout must be positive, got {timeout!r}")
    return float(timeout)


def rank_results(results: Sequence[ProbeResult]) -> list[ProbeResult]:
    """Successful results, lowest latency first.

    sorted() is stable, so equal keys keep candidate order.
    """
    return sorted((r for r in results if r.succeeded), key=ProbeResult.sort_key)


class EndpointSelector:
    """Chooses the best-responding endpoint from a candidate list.

    Args:
        client: Probe transport. When omitted, each call opens its own
            aiohttp session and probes with an ``RpcClient``.
        timeout: Default selection budget in seconds.
    """

    def __init__(
        self,
        client: Prober | None = None,
        timeout: float = DEFAULT_SELECTION_TIMEOUT,
    ) -> None:
        self._client = client
        self.timeout = validate_timeout(timeout)

    async def select(
        self,
        candidates: Sequence[str],
        timeout: float | None = None,
    ) -> str | None:
        """Return the lowest-latency responsive candidate, or None."""
        ranked = await self.rank(candidates, timeout)
        if not ranked:
            if candidates:
                logger.warning("No RPC endpoint answered out of %d candidates", len(candidates))
            return None
        best = ranked[0]
        logger.info("Selected %s (%.1f ms)", best.endpoint, best.latency_ms)
        return best.endpoint

    async def rank(
        self,
        candidates: Sequence[str],
        timeout: float | None = None,
    ) -> list[ProbeResult]:
        """Return successful probe results, best first."""
        return rank_results(await self.probe_all(candidates, timeout))

    async def probe_all(
        self,
        candidates: Sequence[str],
        timeout: float | None = None,
    ) -> list[ProbeResult]:
        """Probe every unique candidate within the budget.

        Returns:
            One result per unique candidate, in candidate order. Probes that
            missed the deadline are reported as ABANDONED.

        Raises:
            ValueError: If the budget is not a positive number.
        """
        budget = validate_timeout(self.timeout if timeout is None else timeout)
        endpoints = list(dict.fromkeys(candidates))
        if not endpoints:
            return []

        if self._client is not None:
            return await self._probe_within(self._client, endpoints, budget)

        async with ClientSession(timeout=DEFAULT_TIMEOUT) as session:
            return await self._probe_within(RpcClient(session), endpoints, budget)

    async def _probe_within(
        self,
        client: Prober,
        endpoints: list[str],
        budget: float,
    ) -> list[ProbeResult]:
        tasks = {
            endpoint: asyncio.create_task(self._probe_one(client, endpoint))
            for endpoint in endpoints
        }
        _, pending = await asyncio.wait(tasks.values(), timeout=budget)

        for task in pending:
            task.cancel()
        if pending:
            # Bounded: a probe slow to unwind finishes in the background
            _, unwinding = await asyncio.wait(pending, timeout=ABANDON_GRACE)
            for task in unwinding:
                _stragglers.add(task)
                task.add_done_callback(_stragglers.discard)
            logger.debug("%d probes abandoned after %.2fs", len(pending), budget)

        return [
            ProbeResult.abandoned(endpoint) if task in pending else task.result()
            for endpoint, task in tasks.items()
        ]

    @staticmethod
    async def _probe_one(client: Prober, endpoint: str) -> ProbeResult:
        try:
            return await client.probe(endpoint)
        except Exception as e:
            logger.debug("Probe of %s failed", endpoint, exc_info=True)
            return ProbeResult.failure(endpoint, str(e) or type(e).__name__)
