"""chain-network — network configuration and lowest-latency RPC endpoint selection."""

__version__ = "0.1.0"
