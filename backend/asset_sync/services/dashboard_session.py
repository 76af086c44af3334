"""Session context tying accounts, valuation, price refresh and sheet sync together.

Every public operation catches its failures at the boundary and records a
user-visible notice instead of raising. Any operation can be retried by
calling it again.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Literal, Self

from pydantic import ValidationError

from asset_sync.constants import ALL_OWNERS
from asset_sync.schemas import (
    Account,
    AccountCreate,
    AccountSummary,
    AccountUpdate,
    AssetCreate,
    AssetUpdate,
    OverviewSummary,
    RefreshResult,
)
from asset_sync.services.exceptions import (
    DuplicateError,
    NotFoundError,
    SheetSyncError,
    ValidationFailure,
)
from asset_sync.services.ledger_client import LedgerClient
from asset_sync.services.market_data.price_refresh_service import PriceRefreshCoordinator
from asset_sync.services.portfolio.summary_service import list_owners, summarize_overview
from asset_sync.services.repositories.local_state import LocalPortfolioState
from asset_sync.services.shared.http_client import HTTPClientError
from asset_sync.services.sync.auto_refresh import AttemptRegistry, AutoRefreshTrigger
from asset_sync.services.sync.sheet_sync_service import SheetSyncService
from asset_sync.services.sync.sync_status_monitor import SyncStatusMonitor

logger = logging.getLogger(__name__)

NoticeLevel = Literal["success", "error"]

# Asset fields that can be edited inline; all numeric
EDITABLE_ASSET_FIELDS = frozenset({"quantity", "average_purchase_price", "dividend_per_share"})

# Failures coming back from the accounts API
_API_ERRORS = (HTTPClientError, ValidationError)


@dataclass
class Notice:
    """A user-visible message produced by an operation."""

    message: str
    level: NoticeLevel = "success"
    created_at: datetime = field(default_factory=datetime.now)


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "__root__")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def _api_message(error: Exception) -> str | None:
    if isinstance(error, HTTPClientError):
        return error.payload_message()
    return None


def _parse_number(field_name: str, value: Any) -> Decimal:
    """Parse an edited value, rejecting anything that is not a finite number."""
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValidationFailure(f"{field_name} must be a number", field=field_name) from e
    if not number.is_finite():
        raise ValidationFailure(f"{field_name} must be a number", field=field_name)
    return number


class DashboardSession:
    """Holds the selected account, its summary and the session-scoped helpers.

    Usage:
        async with DashboardSession() as session:
            await session.load_accounts()
            await session.load_summary()
            session.start_sync_monitor()
    """

    def __init__(
        self,
        client: LedgerClient | None = None,
        state: LocalPortfolioState | None = None,
        registry: AttemptRegistry | None = None,
        poll_interval: float | None = None,
        code_prefix: str | None = None,
    ) -> None:
        self.client = client or LedgerClient()
        self.state = state or LocalPortfolioState()
        self.coordinator = PriceRefreshCoordinator(self.client, self.state, code_prefix=code_prefix)
        self.auto_refresh = AutoRefreshTrigger(self.coordinator, registry or AttemptRegistry())
        self.sheets = SheetSyncService(self.client)
        self.sync_monitor = SyncStatusMonitor(self.client, self.reload, interval=poll_interval)

        self.current_account_id: int | None = None
        self.notices: list[Notice] = []
        self.owners: list[str] = [ALL_OWNERS]
        self.overview: OverviewSummary | None = None
        self._overview_source: list[AccountSummary] = []

    # ── Views ─────────────────────────────────────────────────────

    @property
    def accounts(self) -> list[Account]:
        return self.state.accounts

    @property
    def summary(self) -> AccountSummary | None:
        if self.current_account_id is None:
            return None
        return self.state.find_summary(self.current_account_id)

    @property
    def is_initial_syncing(self) -> bool:
        return self.sync_monitor.is_syncing

    @property
    def refreshing_asset_ids(self) -> frozenset[int]:
        return self.coordinator.in_flight

    @property
    def last_notice(self) -> Notice | None:
        return self.notices[-1] if self.notices else None

    def notify(self, message: str, level: NoticeLevel = "success") -> Notice:
        notice = Notice(message=message, level=level)
        self.notices.append(notice)
        return notice

    # ── Loading ───────────────────────────────────────────────────

    async def load_accounts(self) -> list[Account]:
        """Reload the account list; selects the first account if none is selected."""
        try:
            accounts = await self.client.list_accounts()
        except _API_ERRORS as e:
            logger.error(f"Error fetching accounts: {e}")
            self.notify("Could not load accounts.", "error")
            return self.state.accounts

        self.state.replace_accounts(accounts)
        if self.current_account_id is None and accounts:
            self.current_account_id = accounts[0].id
        return accounts

    async def select_account(self, account_id: int) -> AccountSummary | None:
        self.current_account_id = account_id
        return await self.load_summary()

    async def load_summary(self, auto_refresh: bool = True) -> AccountSummary | None:
        """Fetch the authoritative summary of the selected account.

        Args:
            auto_refresh: Run the one-shot refresh check for never-priced assets
        """
        account_id = self.current_account_id
        if account_id is None:
            return None
        try:
            summary = await self.client.get_account_summary(account_id)
        except _API_ERRORS as e:
            logger.error(f"Error fetching summary for account {account_id}: {e}")
            self.notify("Could not load the account summary.", "error")
            return self.state.find_summary(account_id)

        self.state.replace_summary(summary)
        if auto_refresh:
            result = await self.auto_refresh.evaluate(summary, self.current_account_id)
            if result is not None:
                self._report_refresh(result, "All asset prices were updated.")
        return self.state.find_summary(account_id)

    async def reload(self) -> None:
        """Full reload of accounts and the selected summary."""
        await self.load_accounts()
        await self.load_summary()

    # ── Price refresh ─────────────────────────────────────────────

    def _report_refresh(self, result: RefreshResult, success_message: str) -> None:
        if result.failed:
            self.notify(
                f"{len(result.failed)} of {result.total} price updates failed.",
                "error",
            )
        if result.is_stale:
            self.notify("Prices were updated but could not be confirmed; values may be stale.", "error")
        if not result.failed and not result.is_stale:
            self.notify(success_message)

    async def refresh_all_prices(self, force: bool = True) -> RefreshResult | None:
        """Refresh every lookup-eligible asset of the selected account."""
        account_id = self.current_account_id
        if account_id is None:
            return None
        try:
            result = await self.coordinator.refresh_prices(account_id, force=force)
        except _API_ERRORS as e:
            logger.error(f"Error refreshing prices for account {account_id}: {e}")
            self.notify("Some prices could not be updated.", "error")
            return None
        if result.total:
            self._report_refresh(result, "All asset prices were updated.")
        return result

    async def refresh_asset_price(self, asset_id: int, force: bool = True) -> RefreshResult | None:
        account_id = self.current_account_id
        if account_id is None:
            return None
        try:
            result = await self.coordinator.refresh_price(account_id, asset_id, force=force)
        except _API_ERRORS as e:
            logger.error(f"Error refreshing price for asset {asset_id}: {e}")
            self.notify("The asset price could not be updated.", "error")
            return None
        if result.total:
            self._report_refresh(result, "Asset price updated.")
        return result

    # ── Assets ────────────────────────────────────────────────────

    async def add_asset(self, payload: dict[str, Any] | AssetCreate) -> bool:
        account_id = self.current_account_id
        if account_id is None:
            return False
        try:
            asset = AssetCreate.model_validate(payload)
        except ValidationError as e:
            self.notify(_validation_message(e), "error")
            return False
        try:
            await self.client.add_asset(account_id, asset)
        except _API_ERRORS as e:
            logger.error(f"Error adding asset to account {account_id}: {e}")
            self.notify("The asset could not be added.", "error")
            return False
        await self.load_summary()
        self.notify("New asset added.")
        return True

    async def update_asset_field(self, asset_id: int, field_name: str, value: Any) -> bool:
        """Edit one numeric field of an asset.

        The value is validated before anything changes; on success the asset's
        derived fields are recomputed and the summary reloaded.
        """
        account_id = self.current_account_id
        if account_id is None:
            return False
        try:
            asset = self.state.get_asset(account_id, asset_id)
            if field_name not in EDITABLE_ASSET_FIELDS:
                raise ValidationFailure(f"{field_name} cannot be edited", field=field_name)
            number = _parse_number(field_name, value)
            payload = asset.to_update().model_dump()
            payload[field_name] = number
            update = AssetUpdate.model_validate(payload)
        except (NotFoundError, ValidationFailure) as e:
            self.notify(str(e), "error")
            return False
        except ValidationError as e:
            self.notify(_validation_message(e), "error")
            return False

        try:
            await self.client.update_asset(account_id, asset_id, update)
        except _API_ERRORS as e:
            logger.error(f"Error updating asset {asset_id}: {e}")
            self.notify("The asset could not be updated.", "error")
            return False

        if field_name == "dividend_per_share":
            asset.dividend_per_share = update.dividend_per_share
        else:
            asset.revalue(
                quantity=update.quantity,
                average_purchase_price=update.average_purchase_price,
            )
        await self.load_summary()
        self.notify("Asset updated.")
        return True

    async def delete_asset(self, asset_id: int) -> bool:
        account_id = self.current_account_id
        if account_id is None:
            return False
        try:
            await self.client.delete_asset(account_id, asset_id)
        except _API_ERRORS as e:
            logger.error(f"Error deleting asset {asset_id}: {e}")
            self.notify("The asset could not be deleted.", "error")
            return False
        self.state.remove_asset(account_id, asset_id)
        await self.load_summary()
        self.notify("Asset deleted.")
        return True

    # ── Accounts ──────────────────────────────────────────────────

    async def create_account(self, payload: dict[str, Any] | AccountCreate) -> Account | None:
        """Register a new account against a spreadsheet tab and select it."""
        try:
            account = AccountCreate.model_validate(payload)
            if self.state.find_account_by_sheet(account.sheet_name) is not None:
                raise DuplicateError("Account", "sheet_name", account.sheet_name)
        except ValidationError as e:
            self.notify(_validation_message(e), "error")
            return None
        except DuplicateError as e:
            self.notify(str(e), "error")
            return None

        try:
            created = await self.client.create_account(account)
        except _API_ERRORS as e:
            logger.error(f"Error creating account: {e}")
            self.notify(_api_message(e) or "The account could not be saved.", "error")
            return None

        await self.load_accounts()
        self.current_account_id = created.id
        await self.load_summary()
        self.notify(f"Account {created.name} created.")
        return created

    async def update_account(self, account_id: int, payload: dict[str, Any]) -> Account | None:
        """Edit an account's details; its sheet tab cannot change.

        Fields missing from ``payload`` (snake_case names) keep their current values.
        """
        try:
            existing = self.state.get_account(account_id)
            fields = dict(payload)
            for key in ("sheet_name", "sheetName"):
                if key in fields:
                    if fields.pop(key) != existing.sheet_name:
                        raise ValidationFailure(
                            "The sheet tab of an account cannot be changed.", field="sheet_name"
                        )
            current = existing.model_dump(include=set(AccountUpdate.model_fields), exclude_none=True)
            update = AccountUpdate.model_validate({**current, **fields})
        except (NotFoundError, ValidationFailure) as e:
            self.notify(str(e), "error")
            return None
        except ValidationError as e:
            self.notify(_validation_message(e), "error")
            return None

        try:
            updated = await self.client.update_account(account_id, update, existing.sheet_name)
        except _API_ERRORS as e:
            logger.error(f"Error updating account {account_id}: {e}")
            self.notify(_api_message(e) or "The account could not be saved.", "error")
            return None

        await self.load_accounts()
        self.notify(f"Account {updated.name} updated.")
        return updated

    async def delete_account(self, account_id: int) -> bool:
        """Delete an account and, through the system of record, all its assets."""
        try:
            await self.client.delete_account(account_id)
        except _API_ERRORS as e:
            logger.error(f"Error deleting account {account_id}: {e}")
            self.notify("The account could not be deleted.", "error")
            return False

        self.state.remove_account(account_id)
        if self.current_account_id == account_id:
            self.current_account_id = None
        await self.load_accounts()
        self.notify("Account deleted.")
        return True

    async def sheet_names_for_registration(self, editing: bool = False) -> list[str]:
        try:
            return await self.sheets.registrable_sheet_names(include_raw=editing)
        except SheetSyncError as e:
            self.notify(str(e), "error")
            return []

    # ── Spreadsheet sync ──────────────────────────────────────────

    async def sync_account(self) -> bool:
        """Pull the selected account from its sheet tab, then reload."""
        account_id = self.current_account_id
        if account_id is None:
            return False
        try:
            await self.sheets.sync_account(account_id)
        except SheetSyncError as e:
            self.notify(str(e), "error")
            return False
        await self.reload()
        self.notify("Synced with the spreadsheet.")
        return True

    async def export_account(self) -> bool:
        """Push the selected account to its sheet tab."""
        account_id = self.current_account_id
        if account_id is None:
            return False
        try:
            await self.sheets.export_account(account_id)
        except SheetSyncError as e:
            self.notify(str(e), "error")
            return False
        self.notify("Exported to the spreadsheet.")
        return True

    def start_sync_monitor(self) -> None:
        self.sync_monitor.start()

    # ── Overview ──────────────────────────────────────────────────

    async def load_overview(self, owner_filter: str = ALL_OWNERS) -> OverviewSummary | None:
        """Fetch every account summary and aggregate the cross-account overview."""
        try:
            summaries = await self.client.list_account_summaries()
        except _API_ERRORS as e:
            logger.error(f"Error fetching account summaries: {e}")
            self.notify("Could not load the overview.", "error")
            return self.overview

        self._overview_source = summaries
        self.owners = list_owners(summaries)
        return self.filter_overview(owner_filter)

    def filter_overview(self, owner_filter: str = ALL_OWNERS) -> OverviewSummary:
        """Re-aggregate the last fetched summaries for another owner."""
        self.overview = summarize_overview(self._overview_source, owner_filter)
        return self.overview

    # ── Lifecycle ─────────────────────────────────────────────────

    async def close(self) -> None:
        """Stop background polling and release the HTTP client."""
        await self.sync_monitor.stop()
        await self.client.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
