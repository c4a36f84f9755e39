"""CLI entry point for inspecting network configs and picking RPC endpoints.

Usage:
    chain-network select mainnet.json
    chain-network select mainnet.json --seeds networks.json --timeout-ms 4000
    chain-network select mainnet.json --update --output mainnet.updated.json
    chain-network export mainnet.json --protocol-only --output protocol.json

Environment variables:
    CHAIN_NETWORK_TIMEOUT_MS:         Default selection budget (milliseconds)
    CHAIN_NETWORK_ENDPOINT_LIST_URL:  Remote endpoint list URL template,
                                      ``{network}`` is replaced by the name
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any

from chain_network.config.network import NetworkConfig, NetworkParseError
from chain_network.rpc.endpoint import ProbeResult, ProbeState
from chain_network.rpc.selector import (
    DEFAULT_SELECTION_TIMEOUT,
    EndpointSelector,
    rank_results,
)
from chain_network.rpc.sources import EndpointListError, RemoteEndpointList, SeedListLookup

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_ENDPOINT = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="chain-network",
        description="Network config tool and RPC endpoint selector",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--log-level", "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    select = sub.add_parser("select", help="Probe candidates and print the fastest endpoint")
    select.add_argument("config", help="Path to network JSON config")
    select.add_argument("--name", "-n", help="Override the network name")
    select.add_argument("--seeds", help="JSON file mapping network names to seed lists")
    select.add_argument(
        "--endpoint-list-url",
        default=os.environ.get("CHAIN_NETWORK_ENDPOINT_LIST_URL"),
        help="Remote endpoint list URL template (used when no seeds are known)",
    )
    select.add_argument(
        "--timeout-ms",
        type=int,
        default=None,
        help=f"Selection budget in ms (default: {int(DEFAULT_SELECTION_TIMEOUT * 1000)})",
    )
    select.add_argument(
        "--update",
        action="store_true",
        help="Replace the config's nodes with the responsive endpoints and write it",
    )
    select.add_argument("--output", "-o", help="Where --update writes (default: config path)")

    export = sub.add_parser("export", help="Export a network config")
    export.add_argument("config", help="Path to network JSON config")
    export.add_argument("--name", "-n", help="Override the network name")
    export.add_argument(
        "--protocol-only",
        action="store_true",
        help="Export only the protocol block",
    )
    export.add_argument("--output", "-o", help="Write to this path instead of stdout")

    return parser.parse_args(argv)


def resolve_timeout(timeout_ms: int | None) -> float:
    """Selection budget in seconds from the flag, the environment, or the default."""
    if timeout_ms is None:
        env = os.environ.get("CHAIN_NETWORK_TIMEOUT_MS")
        if not env:
            return DEFAULT_SELECTION_TIMEOUT
        try:
            timeout_ms = int(env)
        except ValueError:
            raise ValueError(f"CHAIN_NETWORK_TIMEOUT_MS must be an integer, got {env!r}") from None
    return timeout_ms / 1000


def format_result(result: ProbeResult) -> str:
    if result.state is ProbeState.SUCCEEDED:
        height = "-" if result.block_height is None else str(result.block_height)
        return f"  {result.endpoint:<45} {result.latency_ms:8.1f} ms   height {height}"
    detail = f" ({result.error})" if result.error else ""
    return f"  {result.endpoint:<45} {result.state.value}{detail}"


async def run_select(args: argparse.Namespace) -> int:
    network = NetworkConfig.read_file(args.config, args.name)
    lookup = SeedListLookup.read_file(args.seeds) if args.seeds else None
    endpoint_list = RemoteEndpointList(args.endpoint_list_url) if args.endpoint_list_url else None
    selector = EndpointSelector(timeout=resolve_timeout(args.timeout_ms))

    candidates = await network.resolve_candidates(lookup, endpoint_list)

    print(f"Network {network.name}: probing {len(candidates)} candidates "
          f"({selector.timeout * 1000:.0f} ms budget)")
    results = await selector.probe_all(candidates)
    for result in results:
        print(format_result(result))

    ranked = rank_results(results)
    if not ranked:
        print("No endpoint answered within the budget.")
        return EXIT_NO_ENDPOINT

    print(f"Best endpoint: {ranked[0].endpoint}")
    if args.update:
        network.set_responsive_nodes(ranked)
        output = args.output or args.config
        network.write_file(output)
        print(f"Nodes written to {output}")
    return EXIT_OK


def run_export(args: argparse.Namespace) -> int:
    network = NetworkConfig.read_file(args.config, args.name)
    if args.output:
        network.write_file(args.output, protocol_only=args.protocol_only)
        print(f"Exported {network.name} to {args.output}")
        return EXIT_OK

    exported: Any = network.export(args.protocol_only)
    print(exported if isinstance(exported, str) else json.dumps(exported, indent=2))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        if args.command == "select":
            return asyncio.run(run_select(args))
        return run_export(args)
    except (OSError, NetworkParseError, EndpointListError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
