"""
CLI smoke tests - verify commands are wired up and run against a throwaway snapshot.

Advisory commands are only exercised on their offline / unconfigured paths.
"""
from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def data_path(tmp_path: Path) -> str:
    return str(tmp_path / "club_data.json")


class TestCLIStructure:
    """Test that CLI commands are properly registered and accessible."""

    def test_cli_imports_without_error(self):
        from clubfolio.cli import app
        assert app is not None

    def test_main_help(self):
        from clubfolio.cli import app
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Investment club" in result.output

    @pytest.mark.parametrize("group", ["members", "tx", "advise"])
    def test_group_help(self, group):
        from clubfolio.cli import app
        result = runner.invoke(app, [group, "--help"])
        assert result.exit_code == 0


class TestCLICommands:
    def test_status_seeds_snapshot(self, data_path):
        from clubfolio.cli import app
        result = runner.invoke(app, ["status", "--data", data_path])
        assert result.exit_code == 0, result.output
        assert Path(data_path).exists()
        raw = json.loads(Path(data_path).read_text())
        assert len(raw["members"]) == 3

    @pytest.mark.parametrize(
        "args",
        [
            ["holdings", "--view", "flagship"],
            ["members", "list"],
            ["tx", "list", "-n", "3"],
            ["track-record"],
            ["risk"],
            ["stress"],
            ["stress", "-s", "stock_crash", "-a", "googl", "--pct", "-40"],
            ["allocation", "--offline"],
        ],
    )
    def test_read_only_commands(self, data_path, args):
        from clubfolio.cli import app
        result = runner.invoke(app, [*args, "--data", data_path])
        assert result.exit_code == 0, result.output

    def test_tx_add_deposit_persists(self, data_path):
        from clubfolio.cli import app
        result = runner.invoke(
            app,
            ["tx", "add", "deposit", "-p", "phronesis", "-m", "m1", "--amount", "1000", "--date", "2024-01-05", "--data", data_path],
        )
        assert result.exit_code == 0, result.output
        raw = json.loads(Path(data_path).read_text())
        last = raw["transactions"][-1]
        assert (last["type"], last["memberId"], last["amount"]) == ("DEPOSIT", "m1", 1000.0)

    def test_tx_add_buy_missing_price_is_rejected(self, data_path):
        from clubfolio.cli import app
        result = runner.invoke(app, ["tx", "add", "BUY", "-p", "flagship", "-a", "MSFT", "--qty", "2", "--data", data_path])
        assert result.exit_code == 2
        assert not Path(data_path).exists()

    def test_tx_add_rejects_combined_portfolio(self, data_path):
        from clubfolio.cli import app
        result = runner.invoke(app, ["tx", "add", "DIVIDEND", "-p", "combined", "-a", "AAPL", "--amount", "5", "--data", data_path])
        assert result.exit_code == 2

    def test_members_add_and_report(self, data_path):
        from clubfolio.cli import app
        result = runner.invoke(app, ["members", "add", "Dana Scully", "dana@email.com", "--data", data_path])
        assert result.exit_code == 0, result.output

        ok = runner.invoke(app, ["members", "report", "m1", "ALICE@email.com", "--data", data_path])
        assert ok.exit_code == 0, ok.output
        bad = runner.invoke(app, ["members", "report", "m1", "wrong@email.com", "--data", data_path])
        assert bad.exit_code == 1

    def test_stress_json_output(self, data_path):
        from clubfolio.cli import app
        result = runner.invoke(app, ["stress", "-s", "tech_sector_boom", "--json", "--data", data_path])
        assert result.exit_code == 0, result.output
        assert "tech_sector_boom" in result.output

    def test_stress_unknown_scenario(self, data_path):
        from clubfolio.cli import app
        result = runner.invoke(app, ["stress", "-s", "alien_invasion", "--data", data_path])
        assert result.exit_code == 1

    def test_export_all(self, data_path, tmp_path: Path):
        from clubfolio.cli import app
        out = tmp_path / "csv"
        result = runner.invoke(app, ["export", "all", "--out", str(out), "--data", data_path])
        assert result.exit_code == 0, result.output
        names = sorted(p.name for p in out.iterdir())
        assert names == ["annual_returns.csv", "portfolio-combined.csv", "track_record.csv", "transactions.csv"]

    def test_export_unknown_dataset(self, data_path):
        from clubfolio.cli import app
        result = runner.invoke(app, ["export", "ledger", "--data", data_path])
        assert result.exit_code == 2

    def test_advise_without_key_fails_cleanly(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        from clubfolio.cli import app
        result = runner.invoke(app, ["advise", "yield-curve"])
        assert result.exit_code == 1

    def test_advise_model_rejects_unknown_model(self):
        from clubfolio.cli import app
        result = runner.invoke(app, ["advise", "model", "AAPL", "--model", "black_scholes"])
        assert result.exit_code == 2

    @pytest.mark.parametrize(
        "args",
        [
            ["advise", "model", "IBM", "--model", "bond", "--coupon", "4.5", "--maturity", "7"],
            ["advise", "reit", "O", "--ffo", "3.8"],
        ],
    )
    def test_advise_valuation_commands_without_key(self, monkeypatch, args):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        from clubfolio.cli import app
        result = runner.invoke(app, args)
        assert result.exit_code == 1
