"""Protocol block of a network configuration.

Wraps the ``ProtocolConfiguration`` section that a node reads at startup:
network magic, address version, standby validators, seed list and system
fees. The contents are opaque to endpoint selection apart from the seed list.
Keys outside those fields are carried through untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from chain_network.config.fields import as_dict, as_list, first_present

DEFAULT_ADDRESS_VERSION = 23

DEFAULT_SYSTEM_FEE: dict[str, float] = {
    "EnrollmentTransaction": 1000,
    "IssueTransaction": 500,
    "PublishTransaction": 500,
    "RegisterTransaction": 10000,
}

# Field name → accepted keys, camelCase first
FIELD_KEYS: dict[str, tuple[str, str]] = {
    "magic": ("magic", "Magic"),
    "address_version": ("addressVersion", "AddressVersion"),
    "standby_validators": ("standbyValidators", "StandbyValidators"),
    "seed_list": ("seedList", "SeedList"),
    "system_fee": ("systemFee", "SystemFee"),
}

KNOWN_KEYS = frozenset(key for keys in FIELD_KEYS.values() for key in keys)


@dataclass
class ProtocolConfig:
    """Protocol parameters for a network."""

    magic: int = 0
    address_version: int = DEFAULT_ADDRESS_VERSION
    standby_validators: list[str] = field(default_factory=list)
    seed_list: list[str] = field(default_factory=list)
    system_fee: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_SYSTEM_FEE),
    )
    other: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, config: Mapping[str, Any] | None = None) -> ProtocolConfig:
        """Build from a protocol block using either PascalCase or camelCase keys.

        Raises:
            NetworkParseError: If a list or object field has the wrong shape.
        """
        config = config or {}
        return cls(
            magic=first_present(config, *FIELD_KEYS["magic"], default=0),
            address_version=first_present(
                config, *FIELD_KEYS["address_version"],
                default=DEFAULT_ADDRESS_VERSION,
            ),
            standby_validators=as_list(
                first_present(config, *FIELD_KEYS["standby_validators"], default=[]),
                "StandbyValidators",
            ),
            seed_list=as_list(
                first_present(config, *FIELD_KEYS["seed_list"], default=[]),
                "SeedList",
            ),
            system_fee=as_dict(
                first_present(config, *FIELD_KEYS["system_fee"], default=DEFAULT_SYSTEM_FEE),
                "SystemFee",
            ),
            other={k: v for k, v in config.items() if k not in KNOWN_KEYS},
        )

    def export(self) -> dict[str, Any]:
        """Export in the PascalCase layout nodes expect."""
        return {
            **self.other,
            "Magic": self.magic,
            "AddressVersion": self.address_version,
            "StandbyValidators": list(self.standby_validators),
            "SeedList": list(self.seed_list),
            "SystemFee": dict(self.system_fee),
        }
