"""RPC layer — endpoint probing, selection and candidate sources."""

from chain_network.rpc.endpoint import ProbeResult, ProbeState
from chain_network.rpc.client import ProbeFailure, RpcClient
from chain_network.rpc.selector import EndpointSelector
from chain_network.rpc.sources import EndpointListError, RemoteEndpointList, SeedListLookup

__all__ = [
    "ProbeResult",
    "ProbeState",
    "ProbeFailure",
    "RpcClient",
    "EndpointSelector",
    "EndpointListError",
    "RemoteEndpointList",
    "SeedListLookup",
]
