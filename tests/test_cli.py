"""Tests for CLI commands."""

import json
import logging
from decimal import Decimal

import pytest
from typer.testing import CliRunner

from cryptotax.cli import app

runner = CliRunner()

TRANSACTIONS = [
    {
        "id": "buy-1",
        "type": "Buy",
        "asset_symbol": "BTC",
        "amount_value": "1",
        "value_usd": "20000",
        "tx_timestamp": "2023-01-01T00:00:00Z",
    },
    {
        "id": "sell-1",
        "type": "Sell",
        "asset_symbol": "BTC",
        "amount_value": "1",
        "value_usd": "25000",
        "tx_timestamp": "2023-06-01T00:00:00Z",
    },
    {
        "id": "stake-1",
        "type": "Staking Reward",
        "asset_symbol": "ETH",
        "amount_value": "0.1",
        "value_usd": "150",
        "tx_timestamp": "2023-07-01T00:00:00Z",
    },
]


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("cryptotax")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def tx_file(tmp_path):
    path = tmp_path / "transactions.json"
    path.write_text(json.dumps(TRANSACTIONS))
    return path


class TestCLI:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Cost-basis" in result.output

    @pytest.mark.parametrize("command", ["classify", "report", "form8949", "diagnose"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0

    def test_report(self, tx_file):
        result = runner.invoke(app, ["report", str(tx_file), "--year", "2023"])
        assert result.exit_code == 0
        assert "CRYPTO TAX SUMMARY: 2023 (FIFO)" in result.output
        assert "5,000.00" in result.output
        assert "150.00" in result.output

    def test_report_json(self, tx_file):
        result = runner.invoke(app, ["report", str(tx_file), "-y", "2023", "-m", "hifo", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["matching_method"] == "HIFO"
        assert Decimal(data["summary"]["net_capital_gain"]) == Decimal("5000")
        assert Decimal(data["summary"]["staking_income"]) == Decimal("150")

    def test_report_to_file(self, tx_file, tmp_path):
        out = tmp_path / "summary.txt"
        result = runner.invoke(app, ["report", str(tx_file), "-y", "2023", "--output", str(out)])
        assert result.exit_code == 0
        assert "Report written to" in result.output
        assert "CRYPTO TAX SUMMARY" in out.read_text()

    def test_report_to_missing_directory(self, tx_file, tmp_path):
        out = tmp_path / "missing" / "summary.txt"
        result = runner.invoke(app, ["report", str(tx_file), "-y", "2023", "-o", str(out)])
        assert result.exit_code == 1
        assert "Error: cannot write" in result.output
        assert not out.exists()

    def test_report_rate(self, tx_file):
        result = runner.invoke(app, ["report", str(tx_file), "-y", "2023", "--rate", "0.1", "--json"])
        data = json.loads(result.output)
        assert Decimal(data["summary"]["estimated_liability"]) == Decimal("515.0")

    def test_invalid_method(self, tx_file):
        result = runner.invoke(app, ["report", str(tx_file), "-y", "2023", "-m", "average"])
        assert result.exit_code == 1
        assert "Unknown matching method" in result.output

    def test_invalid_year(self, tx_file):
        result = runner.invoke(app, ["report", str(tx_file), "-y", "1999"])
        assert result.exit_code == 1
        assert "Invalid tax year" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["report", str(tmp_path / "none.json"), "-y", "2023"])
        assert result.exit_code == 1
        assert "file not found" in result.output

    def test_classify(self, tx_file):
        result = runner.invoke(app, ["classify", str(tx_file)])
        assert result.exit_code == 0
        assert "buy-1" in result.output
        assert "staking" in result.output

    def test_form8949(self, tx_file):
        result = runner.invoke(app, ["form8949", str(tx_file), "-y", "2023"])
        assert result.exit_code == 0
        assert "PART I: SHORT-TERM" in result.output
        assert "PART II: LONG-TERM" in result.output
        assert "1 BTC" in result.output

    def test_diagnose_clean(self, tx_file):
        result = runner.invoke(app, ["diagnose", str(tx_file), "-y", "2023"])
        assert result.exit_code == 0
        assert "=== Data Quality Review ===" in result.output
        assert "No problems found" in result.output

    def test_diagnose_problems(self, tmp_path):
        path = tmp_path / "messy.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "id": "odd-1",
                        "type": "Mystery",
                        "asset_symbol": "ETH",
                        "amount_value": "1",
                        "tx_timestamp": "2023-02-01T00:00:00Z",
                    },
                    {
                        "id": "sell-9",
                        "type": "Sell",
                        "asset_symbol": "SOL",
                        "amount_value": "10",
                        "value_usd": "200",
                        "tx_timestamp": "2023-03-01T00:00:00Z",
                    },
                ]
            )
        )
        result = runner.invoke(app, ["diagnose", str(path), "-y", "2023"])
        assert result.exit_code == 0
        assert "[!] odd-1" in result.output
        assert "[!] sell-9" in result.output
        assert "Units disposed at zero basis: 10" in result.output
