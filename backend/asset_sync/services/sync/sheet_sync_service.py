"""Explicit spreadsheet sync and export operations."""

import logging
from collections.abc import Iterable

from asset_sync.config import settings
from asset_sync.schemas import MessageResponse
from asset_sync.services.exceptions import SheetSyncError
from asset_sync.services.ledger_client import LedgerClient
from asset_sync.services.shared.http_client import HTTPClientError

logger = logging.getLogger(__name__)

SYNC_FAILED_MESSAGE = "Sync with the spreadsheet failed."
EXPORT_FAILED_MESSAGE = "Export to the spreadsheet failed."
SHEET_NAMES_FAILED_MESSAGE = "Could not load spreadsheet tabs."


class SheetSyncService:
    """Pulls from and pushes to the spreadsheet through the accounts API.

    Failures surface as SheetSyncError carrying the collaborator's message
    when it sent one; local state is never touched here.
    """

    def __init__(self, client: LedgerClient, raw_sheet_prefix: str | None = None) -> None:
        self._client = client
        self._raw_sheet_prefix = (
            settings.raw_sheet_prefix if raw_sheet_prefix is None else raw_sheet_prefix
        )

    async def sync_account(self, account_id: int) -> MessageResponse:
        """Pull the account's sheet tab into the system of record."""
        try:
            response = await self._client.sync_account(account_id)
        except HTTPClientError as e:
            logger.error(f"Error syncing account {account_id} with spreadsheet: {e}")
            raise SheetSyncError(e.payload_message() or SYNC_FAILED_MESSAGE) from e
        logger.info(f"Synced account {account_id} from spreadsheet")
        return response

    async def export_account(self, account_id: int) -> MessageResponse:
        """Push the account's stored assets to its sheet tab."""
        try:
            response = await self._client.export_account(account_id)
        except HTTPClientError as e:
            logger.error(f"Error exporting account {account_id} to spreadsheet: {e}")
            raise SheetSyncError(e.payload_message() or EXPORT_FAILED_MESSAGE) from e
        logger.info(f"Exported account {account_id} to spreadsheet")
        return response

    async def registrable_sheet_names(
        self,
        registered: Iterable[str] = (),
        include_raw: bool = False,
    ) -> list[str]:
        """Sheet tabs that can back a new account.

        Args:
            registered: Tabs already linked to an account
            include_raw: Keep raw-data tabs (used when editing an existing account)
        """
        try:
            names = await self._client.list_sheet_names()
        except HTTPClientError as e:
            logger.error(f"Error fetching sheet names: {e}")
            raise SheetSyncError(e.payload_message() or SHEET_NAMES_FAILED_MESSAGE) from e

        taken = set(registered)
        return [
            name
            for name in names
            if name not in taken
            and (include_raw or not (self._raw_sheet_prefix and name.startswith(self._raw_sheet_prefix)))
        ]
