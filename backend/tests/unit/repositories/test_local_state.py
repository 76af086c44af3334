"""Tests for LocalPortfolioState."""

import pytest

from asset_sync.schemas import Account, AccountSummary, Asset
from asset_sync.services.exceptions import NotFoundError
from asset_sync.services.repositories.local_state import LocalPortfolioState


@pytest.fixture
def populated():
    state = LocalPortfolioState()
    state.replace_accounts(
        [
            Account(id=1, name="Main", sheet_name="main"),
            Account(id=2, name="Pension", sheet_name="pension"),
        ]
    )
    state.replace_summary(
        AccountSummary(account_id=1, assets=[Asset(id=10, name="A"), Asset(id=11, name="B")])
    )
    state.replace_summary(AccountSummary(account_id=2))
    return state


class TestAccounts:
    """Test account lookups."""

    def test_find_account(self, populated):
        assert populated.find_account(2).name == "Pension"
        assert populated.find_account(99) is None

    def test_get_account_missing_raises(self, populated):
        with pytest.raises(NotFoundError) as exc_info:
            populated.get_account(99)

        assert exc_info.value.entity_type == "Account"
        assert exc_info.value.identifier == 99

    def test_find_account_by_sheet(self, populated):
        assert populated.find_account_by_sheet("main").id == 1
        assert populated.find_account_by_sheet("other") is None

    def test_accounts_returns_a_copy(self, populated):
        populated.accounts.clear()
        assert len(populated.accounts) == 2

    def test_replace_accounts_drops_orphaned_summaries(self, populated):
        populated.replace_accounts([Account(id=2, name="Pension")])

        assert populated.find_summary(1) is None
        assert populated.find_summary(2) is not None

    def test_remove_account_removes_its_assets(self, populated):
        populated.remove_account(1)

        assert populated.find_account(1) is None
        assert populated.find_asset(1, 10) is None


class TestSummariesAndAssets:
    """Test summary and asset lookups."""

    def test_replace_summary_supersedes(self, populated):
        populated.replace_summary(AccountSummary(account_id=1, assets=[Asset(id=12)]))

        assert populated.find_asset(1, 10) is None
        assert populated.get_asset(1, 12).name == "Unknown Asset"

    def test_get_summary_missing_raises(self, populated):
        with pytest.raises(NotFoundError):
            populated.get_summary(99)

    def test_get_asset_missing_raises(self, populated):
        with pytest.raises(NotFoundError):
            populated.get_asset(1, 99)
        with pytest.raises(NotFoundError):
            populated.get_asset(99, 10)

    def test_remove_asset(self, populated):
        populated.remove_asset(1, 10)

        assert [asset.id for asset in populated.get_summary(1).assets] == [11]

    def test_remove_asset_unknown_account_is_noop(self, populated):
        populated.remove_asset(99, 10)
        assert populated.find_asset(1, 10) is not None
