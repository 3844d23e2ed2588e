"""
Tests for scripts/journal.py: end-to-end through the command line.
"""

import importlib.util
from pathlib import Path

import pytest

from llm.insight_client import API_KEY_ENV

SCRIPT = Path(__file__).parent.parent / "scripts" / "journal.py"


@pytest.fixture
def cli(tmp_path, monkeypatch):
    monkeypatch.delenv("TRADE_JOURNAL_DB_URL", raising=False)
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    spec = importlib.util.spec_from_file_location("journal_cli", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    db_url = f"sqlite:///{tmp_path / 'journal.db'}"
    config = str(tmp_path / "missing.yaml")

    def run(*args):
        return module.main(["--config", config, "--db-url", db_url, "--owner", "alice", *args])

    assert run("init-db") == 0
    return run


def test_add_and_analyze(cli, capsys):
    assert cli("add", "--pair", "EURUSD", "--session", "London", "--time", "2025-09-28T09:30:00Z",
               "--outcome", "Win", "--risk", "100", "--reward", "200", "--setup", "Breakout") == 0
    assert cli("add", "--pair", "GBPUSD", "--session", "Asia", "--time", "2025-09-28T02:00:00Z",
               "--outcome", "Loss", "--risk", "50") == 0

    assert cli("analytics") == 0
    out = capsys.readouterr().out
    assert "Total trades: 2" in out
    assert "Win rate:     50.0%" in out
    assert "Total P&L:    $150.00" in out

    assert cli("dashboard") == 0
    out = capsys.readouterr().out
    assert "Focus on London session" in out


def test_invalid_trade_exits_nonzero(cli):
    assert cli("add", "--pair", "DOGEUSD", "--session", "London", "--time", "2025-09-28T09:30:00Z",
               "--outcome", "Win") == 1
    assert cli("add", "--pair", "EURUSD", "--session", "London", "--time", "2025-09-28T09:30:00Z",
               "--outcome", "Maybe") == 1


def test_insights_refused_without_trades(cli):
    assert cli("insights") == 1


def test_insights_without_key(cli):
    cli("add", "--pair", "EURUSD", "--session", "London", "--time", "2025-09-28T09:30:00Z",
        "--outcome", "Win")
    assert cli("insights") == 1


def test_delete_missing_trade(cli):
    assert cli("delete", "no-such-id") == 1
