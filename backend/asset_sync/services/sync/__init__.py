"""Spreadsheet synchronization services.

- SyncStatusMonitor: polls the background sync flag and reloads on completion
- AutoRefreshTrigger: one-shot refresh of never-priced assets per account
- SheetSyncService: explicit sync/export and sheet tab listing
"""

from .auto_refresh import AttemptRegistry, AutoRefreshTrigger
from .sheet_sync_service import SheetSyncService
from .sync_status_monitor import SyncState, SyncStatusMonitor

__all__ = [
    "AttemptRegistry",
    "AutoRefreshTrigger",
    "SheetSyncService",
    "SyncState",
    "SyncStatusMonitor",
]
