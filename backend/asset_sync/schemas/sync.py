"""Schemas for spreadsheet sync status."""

from asset_sync.schemas.common import WireModel


class SyncStatus(WireModel):
    """Process-wide background sync flag owned by the spreadsheet sync collaborator."""

    is_initial_syncing: bool = False
