"""Network configuration — protocol block, network config and config stores."""

from chain_network.config.protocol import ProtocolConfig
from chain_network.config.network import NetworkConfig, NetworkConfigError, NetworkParseError
from chain_network.config.store import ConfigStore, FileConfigStore, MemoryConfigStore

__all__ = [
    "ProtocolConfig",
    "NetworkConfig",
    "NetworkConfigError",
    "NetworkParseError",
    "ConfigStore",
    "FileConfigStore",
    "MemoryConfigStore",
]
