"""Endpoint sources — where RPC candidates come from.

Two sources besides a network's own seed list:
  1. Seed lookup: a table mapping network name to its default seed list,
     passed explicitly to whoever needs it (usually loaded from a
     networks file).
  2. Remote endpoint list: a curated list served over HTTP, keyed by
     network name. Only consulted when nothing is known locally.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from chain_network.config.store import ConfigStore, FileConfigStore

logger = logging.getLogger(__name__)

LIST_TIMEOUT = ClientTimeout(total=5)


class EndpointListError(Exception):
    """Raised when a remote endpoint list cannot be fetched or understood."""


def _extract_endpoints(entry: Any) -> list[str] | None:
    """Pull an endpoint list out of a list or a network entry object."""
    if isinstance(entry, list):
        return [str(e) for e in entry]
    if isinstance(entry, Mapping):
        protocol = entry.get("ProtocolConfiguration")
        if isinstance(protocol, Mapping) and isinstance(protocol.get("SeedList"), list):
            return [str(e) for e in protocol["SeedList"]]
        for key in ("SeedList", "rpcs", "endpoints"):
            if isinstance(entry.get(key), list):
                return [str(e) for e in entry[key]]
    return None


class SeedListLookup:
    """Network name → default candidate endpoints."""

    def __init__(self, table: Mapping[str, Sequence[str]] | None = None) -> None:
        self._table: dict[str, list[str]] = {
            name: list(endpoints) for name, endpoints in (table or {}).items()
        }

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __len__(self) -> int:
        return len(self._table)

    @property
    def networks(self) -> list[str]:
        return list(self._table)

    def candidates_for(self, name: str) -> list[str]:
        """Return a copy of the seed list for ``name`` (empty if unknown)."""
        return list(self._table.get(name, []))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SeedListLookup:
        """Build from ``{name: [...]}`` or a networks file layout.

        Networks files map each name to a full network config; its
        ``ProtocolConfiguration.SeedList`` is used. Entries without an
        endpoint list are skipped.
        """
        table = {}
        for name, entry in data.items():
            endpoints = _extract_endpoints(entry)
            if endpoints is None:
                logger.debug("Skipping %s: no endpoint list", name)
                continue
            table[name] = endpoints
        return cls(table)

    @classmethod
    def read_file(
        cls,
        path: str | Path,
        store: ConfigStore | None = None,
    ) -> SeedListLookup:
        """Load a seed table from a JSON file.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If it is not a JSON object.
        """
        store = store or FileConfigStore()
        data = json.loads(store.read_text(path))
        if not isinstance(data, Mapping):
            raise ValueError(f"Seed table in {path} must be a JSON object")
        return cls.from_dict(data)


class RemoteEndpointList:
    """Fetches curated endpoint lists from a remote HTTP source.

    Args:
        url: URL template; ``{network}`` is replaced with the network name.
        session: Shared aiohttp session. A short-lived one is opened per
            fetch when omitted.
    """

    def __init__(
        self,
        url: str,
        session: ClientSession | None = None,
        timeout: ClientTimeout = LIST_TIMEOUT,
    ) -> None:
        self.url = url
        self._session = session
        self._timeout = timeout

    async def fetch_candidates(self, network_name: str) -> list[str]:
        """Fetch the endpoint list for a network.

        Raises:
            EndpointListError: On transport errors, non-200 replies or an
                unrecognized body.
        """
        url = self.url.format(network=network_name)
        if self._session is not None:
            data = await self._fetch(self._session, url)
        else:
            async with ClientSession() as session:
                data = await self._fetch(session, url)

        endpoints = _extract_endpoints(data)
        if endpoints is None and isinstance(data, Mapping):
            endpoints = _extract_endpoints(data.get(network_name))
        if endpoints is None:
            raise EndpointListError(f"No endpoint list for {network_name} at {url}")

        logger.info("Fetched %d endpoints for %s from %s", len(endpoints), network_name, url)
        return endpoints

    async def _fetch(self, session: ClientSession, url: str) -> Any:
        try:
            async with session.get(url, timeout=self._timeout) as resp:
                if resp.status != 200:
                    raise EndpointListError(f"{url} answered HTTP {resp.status}")
                return await resp.json(content_type=None)
        except (ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
            raise EndpointListError(f"Could not fetch endpoint list from {url}: {e}") from e
