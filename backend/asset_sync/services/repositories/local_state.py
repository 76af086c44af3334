"""In-memory projection of accounts and their latest summaries.

The projection is a cache of the system of record: optimistic price patches
land here, and every authoritative reload fully replaces what it covers.
"""

import logging

from asset_sync.schemas import Account, AccountSummary, Asset
from asset_sync.services.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class LocalPortfolioState:
    """Centralized access to the local account/asset projection.

    Naming conventions:
    - find_* : Lookup that may return None
    - get_* : Lookup that raises NotFoundError if missing
    """

    def __init__(self) -> None:
        self._accounts: list[Account] = []
        self._summaries: dict[int, AccountSummary] = {}

    # ── Accounts ──────────────────────────────────────────────────

    @property
    def accounts(self) -> list[Account]:
        return list(self._accounts)

    def replace_accounts(self, accounts: list[Account]) -> None:
        """Replace the account list, dropping summaries of accounts that are gone."""
        self._accounts = list(accounts)
        known_ids = {account.id for account in self._accounts}
        for account_id in list(self._summaries):
            if account_id not in known_ids:
                del self._summaries[account_id]

    def find_account(self, account_id: int) -> Account | None:
        return next((a for a in self._accounts if a.id == account_id), None)

    def get_account(self, account_id: int) -> Account:
        account = self.find_account(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    def find_account_by_sheet(self, sheet_name: str) -> Account | None:
        return next((a for a in self._accounts if a.sheet_name == sheet_name), None)

    def remove_account(self, account_id: int) -> None:
        """Forget an account together with its assets."""
        self._accounts = [a for a in self._accounts if a.id != account_id]
        self._summaries.pop(account_id, None)

    # ── Summaries and assets ──────────────────────────────────────

    def find_summary(self, account_id: int) -> AccountSummary | None:
        return self._summaries.get(account_id)

    def get_summary(self, account_id: int) -> AccountSummary:
        summary = self.find_summary(account_id)
        if summary is None:
            raise NotFoundError("AccountSummary", account_id)
        return summary

    def replace_summary(self, summary: AccountSummary) -> None:
        """Overwrite the account's summary, superseding any optimistic patch."""
        self._summaries[summary.account_id] = summary

    def find_asset(self, account_id: int, asset_id: int) -> Asset | None:
        summary = self.find_summary(account_id)
        if summary is None:
            return None
        return summary.find_asset(asset_id)

    def get_asset(self, account_id: int, asset_id: int) -> Asset:
        asset = self.find_asset(account_id, asset_id)
        if asset is None:
            raise NotFoundError("Asset", asset_id)
        return asset

    def remove_asset(self, account_id: int, asset_id: int) -> None:
        summary = self.find_summary(account_id)
        if summary is None:
            return
        summary.assets = [asset for asset in summary.assets if asset.id != asset_id]
        logger.debug(f"Removed asset {asset_id} from local account {account_id}")
