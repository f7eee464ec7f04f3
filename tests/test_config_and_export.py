"""
Tests for configuration loading and result export.
"""

import json

import pytest

from relayfetch.config import FetcherConfig, RelayConfig
from relayfetch.exceptions import TransportError
from relayfetch.export import JSONExporter, outcome_to_record
from relayfetch.models import FetchOutcome, OutcomeKind, UpstreamResponse


class TestRelayConfig:
    """Tests for relay settings."""

    def test_key_list(self):
        """Test semicolon splitting with empty entries dropped."""
        relay = RelayConfig(keys="alpha;;beta ; ;gamma;")
        assert relay.key_list == ["alpha", "beta", "gamma"]

    def test_keys_from_environment(self, monkeypatch):
        """Test loading keys from the environment."""
        monkeypatch.setenv("RELAYFETCH_RELAY_KEYS", "one;two")
        assert RelayConfig().key_list == ["one", "two"]

    def test_defaults(self):
        """Test timeouts of the individual roles."""
        config = FetcherConfig()
        assert config.direct.timeout == 10.0
        assert config.redirect.timeout == 5.0
        assert config.relay.key_header == "x-api-key"


def make_outcomes() -> list[FetchOutcome]:
    return [
        FetchOutcome.ok("https://api.test/a", UpstreamResponse(code=0, data={"x": 1}), via_relay=True, credential_index=1),
        FetchOutcome.failed(OutcomeKind.TRANSPORT_ERROR, "https://api.test/b", TransportError("boom", status_code=500)),
    ]


def test_outcome_to_record():
    """Test flattening outcomes."""
    ok, failed = (outcome_to_record(o) for o in make_outcomes())

    assert ok["success"] is True
    assert ok["response"]["data"] == {"x": 1}
    assert ok["credential_index"] == 1
    assert failed["success"] is False
    assert failed["kind"] == "transport_error"
    assert "status=500" in failed["error"]
    assert failed["response"] is None


@pytest.mark.asyncio
async def test_export_jsonl(tmp_path):
    """Test JSON Lines export."""
    records = [outcome_to_record(o) for o in make_outcomes()]
    path = await JSONExporter(jsonl=True).export(records, tmp_path / "out" / "results.jsonl")

    lines = (tmp_path / "out" / "results.jsonl").read_text(encoding="utf-8").splitlines()
    assert path.endswith("results.jsonl")
    assert [json.loads(line)["url"] for line in lines] == ["https://api.test/a", "https://api.test/b"]


@pytest.mark.asyncio
async def test_export_json(tmp_path):
    """Test standard JSON export."""
    records = [outcome_to_record(o) for o in make_outcomes()]
    await JSONExporter().export(records, tmp_path / "results.json")

    data = json.loads((tmp_path / "results.json").read_text(encoding="utf-8"))
    assert len(data) == 2
