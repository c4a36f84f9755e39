"""Tests for chain_network.config.protocol.ProtocolConfig."""

from __future__ import annotations

from chain_network.config.protocol import (
    DEFAULT_ADDRESS_VERSION,
    DEFAULT_SYSTEM_FEE,
    ProtocolConfig,
)


MAINNET_PROTOCOL = {
    "Magic": 7630401,
    "AddressVersion": 23,
    "StandbyValidators": ["03b209fd4f53a7170ea4444e0cb0a6bb6a53c2bd016926989cf85f9b0fba17a70c"],
    "SeedList": ["seed1.neo.org:10333", "seed2.neo.org:10333"],
    "SystemFee": {"EnrollmentTransaction": 1000, "RegisterTransaction": 10000},
}


class TestFromDict:
    def test_defaults(self):
        p = ProtocolConfig.from_dict()
        assert p.magic == 0
        assert p.address_version == DEFAULT_ADDRESS_VERSION
        assert p.seed_list == []
        assert p.system_fee == DEFAULT_SYSTEM_FEE

    def test_pascal_case(self):
        p = ProtocolConfig.from_dict(MAINNET_PROTOCOL)
        assert p.magic == 7630401
        assert p.seed_list == ["seed1.neo.org:10333", "seed2.neo.org:10333"]
        assert p.system_fee == {"EnrollmentTransaction": 1000, "RegisterTransaction": 10000}

    def test_camel_case(self):
        p = ProtocolConfig.from_dict({"magic": 56753, "seedList": ["a:1"], "addressVersion": 42})
        assert p.magic == 56753
        assert p.address_version == 42
        assert p.seed_list == ["a:1"]

    def test_zero_magic_kept(self):
        assert ProtocolConfig.from_dict({"Magic": 0}).magic == 0

    def test_system_fee_not_shared(self):
        fees = {"IssueTransaction": 1}
        p = ProtocolConfig.from_dict({"SystemFee": fees})
        p.system_fee["IssueTransaction"] = 99
        assert fees["IssueTransaction"] == 1

    def test_default_system_fee_not_shared(self):
        p = ProtocolConfig()
        p.system_fee["IssueTransaction"] = 0
        assert DEFAULT_SYSTEM_FEE["IssueTransaction"] == 500


class TestExport:
    def test_round_trip(self):
        assert ProtocolConfig.from_dict(MAINNET_PROTOCOL).export() == MAINNET_PROTOCOL

    def test_export_keys(self):
        assert set(ProtocolConfig().export()) == {
            "Magic", "AddressVersion", "StandbyValidators", "SeedList", "SystemFee",
        }

    def test_export_is_a_copy(self):
        p = ProtocolConfig(seed_list=["a:1"])
        p.export()["SeedList"].append("b:2")
        assert p.seed_list == ["a:1"]

    def test_unknown_keys_carried_through(self):
        block = {**MAINNET_PROTOCOL, "SecondsPerBlock": 15, "MaxTransactionsPerBlock": 500}
        p = ProtocolConfig.from_dict(block)
        assert p.other == {"SecondsPerBlock": 15, "MaxTransactionsPerBlock": 500}
        assert p.export() == block

    def test_camel_case_keys_not_duplicated_as_unknown(self):
        p = ProtocolConfig.from_dict({"magic": 1, "seedList": ["a:1"]})
        assert p.other == {}
        assert "seedList" not in p.export()
