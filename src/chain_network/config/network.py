"""Network configuration — identity, protocol block, nodes and extras.

A ``NetworkConfig`` is built from a loosely-typed config object (the JSON
layout used by node config files), from a JSON string, or from a config
store. It exports back to the same layout.

It is also the entry point for picking an RPC endpoint: candidates are
resolved from an injected seed lookup, the protocol seed list, or the
``rpcs`` extra, and then handed to an ``EndpointSelector``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping

from chain_network.config.fields import (
    NetworkConfigError,
    NetworkParseError,
    as_dict,
    as_list,
    first_present,
)
from chain_network.config.protocol import ProtocolConfig
from chain_network.config.store import ConfigStore, FileConfigStore

if TYPE_CHECKING:
    from chain_network.rpc.endpoint import ProbeResult
    from chain_network.rpc.selector import EndpointSelector
    from chain_network.rpc.sources import RemoteEndpointList, SeedListLookup

logger = logging.getLogger(__name__)

DEFAULT_NETWORK_NAME = "RandomNet"


def node_entry(result: ProbeResult) -> dict[str, Any]:
    """Node descriptor recorded for a responsive endpoint."""
    return {
        "url": result.endpoint,
        "latency": result.latency_ms,
        "height": result.block_height,
    }


@dataclass
class NetworkConfig:
    """A blockchain network: name, protocol parameters, nodes and extras.

    Only ``nodes`` is expected to change after construction, and only
    wholesale (see ``replace_nodes`` and ``update``).
    """

    name: str = DEFAULT_NETWORK_NAME
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    nodes: list[Any] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = DEFAULT_NETWORK_NAME

    # ── Construction ─────────────────────────────────────────────

    @classmethod
    def from_dict(
        cls,
        config: Mapping[str, Any] | None = None,
        name: str | None = None,
    ) -> NetworkConfig:
        """Build from a config object.

        Args:
            config: Object with ``Name``/``name``, ``ProtocolConfiguration``/
                ``protocol``, ``Nodes``/``nodes`` and
                ``ExtraConfiguration``/``extra`` fields. Missing fields
                take their defaults.
            name: Overrides any name found in ``config``.

        Raises:
            NetworkParseError: If ``config`` is not a mapping.
        """
        if config is None:
            config = {}
        if not isinstance(config, Mapping):
            raise NetworkParseError(
                f"Network config must be an object, got {type(config).__name__}"
            )

        protocol_like = as_dict(
            first_present(config, "ProtocolConfiguration", "protocol", default={}),
            "ProtocolConfiguration",
        )

        return cls(
            name=name or first_present(config, "Name", "name", "net") or DEFAULT_NETWORK_NAME,
            protocol=ProtocolConfig.from_dict(protocol_like),
            nodes=as_list(first_present(config, "Nodes", "nodes", default=[]), "Nodes"),
            extra=as_dict(
                first_present(config, "ExtraConfiguration", "extra", default={}),
                "ExtraConfiguration",
            ),
        )

    @classmethod
    def import_config(
        cls,
        json_like: Mapping[str, Any] | str | bytes,
        name: str | None = None,
    ) -> NetworkConfig:
        """Import a config object or a JSON document.

        Raises:
            NetworkParseError: If a string is not valid JSON or does not
                hold a JSON object.
        """
        if isinstance(json_like, (str, bytes, bytearray)):
            try:
                json_like = json.loads(json_like)
            except json.JSONDecodeError as e:
                raise NetworkParseError(f"Invalid network JSON: {e}") from e
        return cls.from_dict(json_like, name)

    @classmethod
    def read_file(
        cls,
        path: str | Path,
        name: str | None = None,
        store: ConfigStore | None = None,
    ) -> NetworkConfig:
        """Read a network file from the store and import it.

        Raises:
            OSError: If the path cannot be read.
            NetworkParseError: If the content is not a valid network config.
        """
        store = store or FileConfigStore()
        logger.info("Importing network file from %s", path)
        return cls.import_config(store.read_text(path), name)

    # ── Export ───────────────────────────────────────────────────

    def export(self, protocol_only: bool = False) -> dict[str, Any] | str:
        """Export the configuration.

        Args:
            protocol_only: Export only the protocol block, serialized as a
                JSON string (the form a node reads).

        Returns:
            The full config object, or the protocol-only JSON string.
        """
        if protocol_only:
            return json.dumps({"ProtocolConfiguration": self.protocol.export()})
        return {
            "Name": self.name,
            "ProtocolConfiguration": self.protocol.export(),
            "ExtraConfiguration": dict(self.extra),
            "Nodes": list(self.nodes),
        }

    def write_file(
        self,
        path: str | Path,
        protocol_only: bool = False,
        store: ConfigStore | None = None,
    ) -> None:
        """Write the exported config to the store. Synchronous.

        Raises:
            OSError: If the write fails.
        """
        store = store or FileConfigStore()
        exported = self.export(protocol_only)
        text = exported if isinstance(exported, str) else json.dumps(exported, indent=2)
        store.write_text(path, text)
        logger.info("Network file written to %s", path)

    # ── Nodes & endpoint selection ───────────────────────────────

    def replace_nodes(self, nodes: list[Any]) -> None:
        """Replace the node list wholesale."""
        self.nodes = list(nodes)

    def candidate_endpoints(self, lookup: SeedListLookup | None = None) -> list[str]:
        """Resolve RPC candidates known locally.

        Order: the lookup table entry for this network, then the protocol
        seed list, then the ``rpcs`` extra.
        """
        if lookup is not None:
            candidates = lookup.candidates_for(self.name)
            if candidates:
                return candidates
        if self.protocol.seed_list:
            return list(self.protocol.seed_list)
        return list(self.extra.get("rpcs") or [])

    async def resolve_candidates(
        self,
        lookup: SeedListLookup | None = None,
        endpoint_list: RemoteEndpointList | None = None,
    ) -> list[str]:
        """Local candidates, or the remote list when nothing is known locally."""
        candidates = self.candidate_endpoints(lookup)
        if not candidates and endpoint_list is not None:
            candidates = await endpoint_list.fetch_candidates(self.name)
        return candidates

    async def get_best_rpc_endpoint(
        self,
        selector: EndpointSelector | None = None,
        timeout: float | None = None,
        lookup: SeedListLookup | None = None,
        endpoint_list: RemoteEndpointList | None = None,
    ) -> str | None:
        """Select the lowest-latency RPC endpoint for this network.

        Returns:
            The winning endpoint, or None if no candidate answered in time.

        Raises:
            EndpointListError: If the remote endpoint list had to be
                consulted and could not be fetched.
        """
        from chain_network.rpc.selector import EndpointSelector

        selector = selector or EndpointSelector()
        candidates = await self.resolve_candidates(lookup, endpoint_list)
        return await selector.select(candidates, timeout)

    async def update(
        self,
        selector: EndpointSelector | None = None,
        timeout: float | None = None,
        lookup: SeedListLookup | None = None,
        endpoint_list: RemoteEndpointList | None = None,
    ) -> NetworkConfig:
        """Probe the candidates and store the responsive ones as ``nodes``.

        Nodes are ordered best first. If nothing answers, ``nodes`` is
        left as it was.
        """
        from chain_network.rpc.selector import EndpointSelector

        selector = selector or EndpointSelector()
        candidates = await self.resolve_candidates(lookup, endpoint_list)
        self.set_responsive_nodes(await selector.rank(candidates, timeout))
        return self

    def set_responsive_nodes(self, ranked: list[ProbeResult]) -> bool:
        """Replace ``nodes`` with ranked probe results, best first.

        Returns:
            False (and leaves ``nodes`` alone) when ``ranked`` is empty.
        """
        if not ranked:
            logger.warning("No RPC endpoint answered for %s, nodes unchanged", self.name)
            return False

        self.replace_nodes([node_entry(r) for r in ranked])
        logger.info("Updated %s with %d responsive nodes", self.name, len(ranked))
        return True
