"""Tests for the chain-network command line."""

from __future__ import annotations

import json

import pytest

from chain_network import cli
from chain_network.rpc.client import ProbeFailure
from chain_network.rpc.endpoint import ProbeResult
from chain_network.rpc.selector import EndpointSelector


# ── Helpers ──────────────────────────────────────────────────────

PRIVNET = {
    "Name": "PrivNet",
    "ProtocolConfiguration": {
        "Magic": 56753,
        "SeedList": ["127.0.0.1:30333", "127.0.0.1:30334", "127.0.0.1:30335"],
    },
    "ExtraConfiguration": {"neonDB": "http://127.0.0.1:5000"},
    "Nodes": [],
}

LATENCIES = {"127.0.0.1:30333": 40.0, "127.0.0.1:30334": 15.0}


class FakeClient:
    async def probe(self, endpoint: str) -> ProbeResult:
        if endpoint not in LATENCIES:
            raise ProbeFailure("connection refused")
        return ProbeResult.success(endpoint, LATENCIES[endpoint], 120)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "privnet.json"
    path.write_text(json.dumps(PRIVNET))
    return path


@pytest.fixture
def fake_selector(monkeypatch):
    """Make the CLI probe through FakeClient instead of HTTP."""
    created: list[EndpointSelector] = []

    def factory(timeout: float = 2.0) -> EndpointSelector:
        selector = EndpointSelector(FakeClient(), timeout=timeout)
        created.append(selector)
        return selector

    monkeypatch.setattr(cli, "EndpointSelector", factory)
    return created


# ── Timeout resolution ───────────────────────────────────────────

class TestResolveTimeout:
    def test_flag(self, monkeypatch):
        monkeypatch.setenv("CHAIN_NETWORK_TIMEOUT_MS", "9000")
        assert cli.resolve_timeout(500) == 0.5

    def test_env(self, monkeypatch):
        monkeypatch.setenv("CHAIN_NETWORK_TIMEOUT_MS", "4000")
        assert cli.resolve_timeout(None) == 4.0

    def test_default(self, monkeypatch):
        monkeypatch.delenv("CHAIN_NETWORK_TIMEOUT_MS", raising=False)
        assert cli.resolve_timeout(None) == 2.0

    def test_bad_env(self, monkeypatch):
        monkeypatch.setenv("CHAIN_NETWORK_TIMEOUT_MS", "soon")
        with pytest.raises(ValueError):
            cli.resolve_timeout(None)


# ── select ───────────────────────────────────────────────────────

class TestSelectCommand:
    def test_prints_best(self, config_path, fake_selector, capsys):
        code = cli.main(["select", str(config_path), "--timeout-ms", "1500"])
        out = capsys.readouterr().out
        assert code == cli.EXIT_OK
        assert "Best endpoint: 127.0.0.1:30334" in out
        assert "failed (connection refused)" in out
        assert fake_selector[0].timeout == 1.5

    def test_no_endpoint(self, tmp_path, fake_selector, capsys):
        path = tmp_path / "dead.json"
        path.write_text(json.dumps({"Name": "Dead", "ProtocolConfiguration": {"SeedList": ["x:1"]}}))
        assert cli.main(["select", str(path)]) == cli.EXIT_NO_ENDPOINT
        assert "No endpoint answered" in capsys.readouterr().out

    def test_seeds_file(self, tmp_path, config_path, fake_selector, capsys):
        seeds = tmp_path / "networks.json"
        seeds.write_text(json.dumps({"PrivNet": ["127.0.0.1:30333"]}))
        assert cli.main(["select", str(config_path), "--seeds", str(seeds)]) == cli.EXIT_OK
        assert "Best endpoint: 127.0.0.1:30333" in capsys.readouterr().out

    def test_update_writes_nodes(self, tmp_path, config_path, fake_selector):
        output = tmp_path / "updated.json"
        code = cli.main(["select", str(config_path), "--update", "--output", str(output)])
        assert code == cli.EXIT_OK
        data = json.loads(output.read_text())
        assert [n["url"] for n in data["Nodes"]] == ["127.0.0.1:30334", "127.0.0.1:30333"]
        assert json.loads(config_path.read_text())["Nodes"] == []

    def test_endpoint_list_used_without_seeds(self, tmp_path, fake_selector, monkeypatch, capsys):
        requested: list[tuple[str, str]] = []

        class FakeEndpointList:
            def __init__(self, url: str) -> None:
                self.url = url

            async def fetch_candidates(self, network_name: str) -> list[str]:
                requested.append((self.url, network_name))
                return ["127.0.0.1:30333"]

        monkeypatch.setattr(cli, "RemoteEndpointList", FakeEndpointList)
        path = tmp_path / "bare.json"
        path.write_text(json.dumps({"Name": "PrivNet"}))
        code = cli.main([
            "select", str(path), "--endpoint-list-url", "http://lists/{network}",
        ])
        assert code == cli.EXIT_OK
        assert requested == [("http://lists/{network}", "PrivNet")]
        assert "Best endpoint: 127.0.0.1:30333" in capsys.readouterr().out

    def test_missing_config(self, tmp_path, fake_selector, capsys):
        assert cli.main(["select", str(tmp_path / "nope.json")]) == cli.EXIT_ERROR
        assert "Error:" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, fake_selector, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{")
        assert cli.main(["select", str(path)]) == cli.EXIT_ERROR
        assert "Invalid network JSON" in capsys.readouterr().err


# ── export ───────────────────────────────────────────────────────

class TestExportCommand:
    def test_stdout(self, config_path, capsys):
        assert cli.main(["export", str(config_path)]) == cli.EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["Name"] == "PrivNet"
        assert data["ExtraConfiguration"] == PRIVNET["ExtraConfiguration"]

    def test_protocol_only_stdout(self, config_path, capsys):
        assert cli.main(["export", str(config_path), "--protocol-only"]) == cli.EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert list(data) == ["ProtocolConfiguration"]
        assert data["ProtocolConfiguration"]["Magic"] == 56753

    def test_name_override_to_file(self, tmp_path, config_path):
        output = tmp_path / "out.json"
        assert cli.main(["export", str(config_path), "-n", "Local", "-o", str(output)]) == cli.EXIT_OK
        assert json.loads(output.read_text())["Name"] == "Local"

    @pytest.mark.parametrize("config", [
        {"Name": "Bad", "Nodes": 5},
        {"Name": "Bad", "ProtocolConfiguration": {"SystemFee": 5}},
        {"Name": "Bad", "ProtocolConfiguration": {"SeedList": 7}},
    ])
    def test_wrong_field_shape(self, tmp_path, capsys, config):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(config))
        assert cli.main(["export", str(path)]) == cli.EXIT_ERROR
        assert "Error:" in capsys.readouterr().err
