"""Tests for the asset-sync command line."""

from unittest.mock import patch

import httpx
import pytest

from asset_sync.cli import build_parser, main
from asset_sync.services.dashboard_session import DashboardSession
from asset_sync.services.ledger_client import LedgerClient


@pytest.fixture
def portfolio(ledger):
    ledger.add_account(1, name="Brokerage", owner="A", sheet_name="brokerage")
    ledger.add_asset(1, 1, code="KRX:005930", quantity=10, average_purchase_price=50000, current_price=55000)
    ledger.add_account(2, name="Pension", owner="B", sheet_name="pension")
    return ledger


@pytest.fixture
def run_cli(ledger):
    """Run main() against the fake accounts API; the command closes its own client."""

    def make_session():
        client = LedgerClient(
            base_url="http://ledger.test/api",
            transport=httpx.MockTransport(ledger.handle),
            retry_wait=0,
        )
        return DashboardSession(client=client, code_prefix="KRX:")

    def run(*argv):
        with patch("asset_sync.cli.DashboardSession", make_session):
            return main(list(argv))

    return run


class TestParser:
    """Test argument parsing."""

    def test_refresh_defaults_to_force(self):
        args = build_parser().parse_args(["refresh", "3"])

        assert args.account_id == 3
        assert args.force is True
        assert args.asset_id is None

    def test_refresh_single_asset_without_force(self):
        args = build_parser().parse_args(["refresh", "3", "--asset", "7", "--no-force"])

        assert args.asset_id == 7
        assert args.force is False

    def test_overview_owner_default(self):
        assert build_parser().parse_args(["overview"]).owner == "ALL"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    """Test command output and exit codes."""

    def test_accounts(self, run_cli, portfolio, capsys):
        assert run_cli("accounts") == 0

        out = capsys.readouterr().out
        assert "[1] Brokerage" in out
        assert "[2] Pension" in out

    def test_summary(self, run_cli, portfolio, capsys):
        assert run_cli("summary", "1") == 0

        out = capsys.readouterr().out
        assert "Brokerage" in out
        assert "550,000.00" in out

    def test_overview_for_owner(self, run_cli, portfolio, capsys):
        assert run_cli("overview", "--owner", "A") == 0

        out = capsys.readouterr().out
        assert "Overview (A, 1 accounts)" in out
        assert "Domestic equity" in out

    def test_sync_failure_exit_code(self, run_cli, portfolio, capsys):
        portfolio.failures["POST /accounts/1/sync"] = (500, {"message": "Sheet is locked"})

        assert run_cli("sync", "1") == 1
        assert "Sheet is locked" in capsys.readouterr().err

    def test_export(self, run_cli, portfolio, capsys):
        assert run_cli("export", "1") == 0
        assert "Exported to the spreadsheet." in capsys.readouterr().out
