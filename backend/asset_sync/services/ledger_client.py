"""Client for the accounts API, the system of record backed by the spreadsheet.

Only the request/response contract matters here; storage, the spreadsheet
adapter and price providers live behind it.
"""

import logging

from asset_sync.config import settings
from asset_sync.schemas import (
    Account,
    AccountCreate,
    AccountSummary,
    AccountUpdate,
    Asset,
    AssetCreate,
    AssetUpdate,
    MessageResponse,
    RefreshPriceResponse,
    SyncStatus,
)
from asset_sync.services.shared.http_client import HTTPClient

logger = logging.getLogger(__name__)


class LedgerClient(HTTPClient):
    """Typed access to every accounts API endpoint.

    Usage:
        async with LedgerClient() as client:
            summary = await client.get_account_summary(1)
    """

    def __init__(self, base_url: str | None = None, **kwargs):
        kwargs.setdefault("timeout", settings.request_timeout)
        kwargs.setdefault("max_retries", settings.max_retries)
        super().__init__(
            base_url=base_url or settings.api_base_url,
            headers={"Content-Type": "application/json"},
            **kwargs,
        )

    # ── Accounts ──────────────────────────────────────────────────

    async def list_accounts(self) -> list[Account]:
        data = await self.get_json("/accounts")
        return [Account.model_validate(item) for item in data or []]

    async def create_account(self, account: AccountCreate) -> Account:
        payload = account.model_dump(by_alias=True, mode="json")
        data = await self.post_json("/accounts", json=payload)
        logger.info(f"Registered account {data.get('id')} on sheet {account.sheet_name}")
        return Account.model_validate(data)

    async def update_account(self, account_id: int, update: AccountUpdate, sheet_name: str | None) -> Account:
        """Update an account, always sending back its original sheet tab."""
        payload = update.model_dump(by_alias=True, mode="json")
        payload["sheetName"] = sheet_name
        data = await self.put_json(f"/accounts/{account_id}", json=payload)
        return Account.model_validate(data)

    async def delete_account(self, account_id: int) -> None:
        """Delete an account; the system of record cascades to its assets."""
        await self.delete(f"/accounts/{account_id}")

    async def list_sheet_names(self) -> list[str]:
        data = await self.get_json("/accounts/sheet-names")
        return [str(name) for name in data or []]

    # ── Summaries ─────────────────────────────────────────────────

    async def get_account_summary(self, account_id: int) -> AccountSummary:
        data = await self.get_json(f"/accounts/{account_id}/summary")
        return AccountSummary.model_validate(data)

    async def list_account_summaries(self) -> list[AccountSummary]:
        data = await self.get_json("/accounts/summary")
        return [AccountSummary.model_validate(item) for item in data or []]

    # ── Assets ────────────────────────────────────────────────────

    async def add_asset(self, account_id: int, asset: AssetCreate) -> Asset:
        payload = asset.model_dump(by_alias=True, mode="json", exclude_none=True)
        data = await self.post_json(f"/accounts/{account_id}/assets", json=payload)
        return Asset.model_validate(data)

    async def update_asset(self, account_id: int, asset_id: int, asset: AssetUpdate) -> Asset:
        payload = asset.model_dump(by_alias=True, mode="json", exclude_none=True)
        data = await self.put_json(f"/accounts/{account_id}/assets/{asset_id}", json=payload)
        return Asset.model_validate(data)

    async def delete_asset(self, account_id: int, asset_id: int) -> None:
        await self.delete(f"/accounts/{account_id}/assets/{asset_id}")

    async def refresh_asset_price(
        self, account_id: int, asset_id: int, force: bool = True
    ) -> RefreshPriceResponse:
        """Ask the price lookup collaborator for a fresh price.

        With ``force`` false the collaborator may answer from its staleness cache.
        """
        data = await self.post_json(
            f"/accounts/{account_id}/assets/{asset_id}/refresh-price",
            params={"force": "true" if force else "false"},
        )
        return RefreshPriceResponse.model_validate(data or {})

    # ── Spreadsheet sync ──────────────────────────────────────────

    async def get_sync_status(self) -> SyncStatus:
        data = await self.get_json("/accounts/sync-status")
        return SyncStatus.model_validate(data or {})

    async def sync_account(self, account_id: int) -> MessageResponse:
        """Pull the account's sheet tab into the local store."""
        data = await self.post_json(f"/accounts/{account_id}/sync")
        return MessageResponse.model_validate(data or {})

    async def export_account(self, account_id: int) -> MessageResponse:
        """Push the local store to the account's sheet tab."""
        data = await self.post_json(f"/accounts/{account_id}/export")
        return MessageResponse.model_validate(data or {})
