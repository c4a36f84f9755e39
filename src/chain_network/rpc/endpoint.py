"""Probe bookkeeping — per-endpoint outcome of a latency check."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProbeState(str, Enum):
    """Lifecycle of a single probe."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABANDONED = "abandoned"


@dataclass
class ProbeResult:
    """Outcome of probing one endpoint."""

    endpoint: str
    latency_ms: float | None = None
    state: ProbeState = ProbeState.PENDING
    block_height: int | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is ProbeState.SUCCEEDED

    @classmethod
    def success(
        cls, endpoint: str, latency_ms: float, block_height: int | None = None,
    ) -> ProbeResult:
        return cls(
            endpoint=endpoint,
            latency_ms=latency_ms,
            state=ProbeState.SUCCEEDED,
            block_height=block_height,
        )

    @classmethod
    def failure(cls, endpoint: str, error: str = "") -> ProbeResult:
        return cls(endpoint=endpoint, state=ProbeState.FAILED, error=error or None)

    @classmethod
    def abandoned(cls, endpoint: str) -> ProbeResult:
        return cls(endpoint=endpoint, state=ProbeState.ABANDONED)

    def sort_key(self) -> tuple[float, int]:
        """Lower latency first, then the higher chain tip."""
        return (self.latency_ms or 0.0, -(self.block_height or 0))


def normalize_endpoint(endpoint: str) -> str:
    """Turn a seed entry like ``host:port`` into an HTTP URL."""
    endpoint = endpoint.strip()
    if "://" not in endpoint:
        return f"http://{endpoint}"
    return endpoint
