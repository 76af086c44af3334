"""Background spreadsheet sync observer.

The spreadsheet sync collaborator owns the ``isInitialSyncing`` flag; this
module only polls it. State changes come exclusively from poll results, and
the completion callback fires once per observed SYNCING -> IDLE edge.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Self

from pydantic import ValidationError

from asset_sync.config import settings
from asset_sync.services.ledger_client import LedgerClient
from asset_sync.services.shared.http_client import HTTPClientError

logger = logging.getLogger(__name__)

OnSyncComplete = Callable[[], Awaitable[None]]
"""Async callable run after a background sync finishes, typically a full reload."""


class SyncState(str, Enum):
    """Locally observed sync state."""

    IDLE = "idle"
    SYNCING = "syncing"


class SyncStatusMonitor:
    """Polls the sync status endpoint on a fixed interval until stopped.

    Args:
        client: Accounts API client
        on_sync_complete: Awaited once per SYNCING -> IDLE transition
        interval: Seconds between polls (defaults to settings.sync_poll_interval)
    """

    def __init__(
        self,
        client: LedgerClient,
        on_sync_complete: OnSyncComplete,
        interval: float | None = None,
    ) -> None:
        self._client = client
        self._on_sync_complete = on_sync_complete
        self._interval = settings.sync_poll_interval if interval is None else interval
        self._state = SyncState.IDLE
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_syncing(self) -> bool:
        return self._state is SyncState.SYNCING

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> bool:
        """Poll the status endpoint once and apply the observed state.

        Returns:
            True if this poll observed the end of a sync and ran the callback
        """
        try:
            status = await self._client.get_sync_status()
        except (HTTPClientError, ValidationError) as e:
            logger.error(f"Error checking sync status: {e}")
            return False

        previous = self._state
        self._state = SyncState.SYNCING if status.is_initial_syncing else SyncState.IDLE

        if previous is SyncState.IDLE and self._state is SyncState.SYNCING:
            logger.info("Background spreadsheet sync in progress")
        if previous is SyncState.SYNCING and self._state is SyncState.IDLE:
            logger.info("Background spreadsheet sync finished, reloading accounts")
            await self._on_sync_complete()
            return True
        return False

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Sync completion handler failed")
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Start polling in the background; a no-op if already running."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="sync-status-monitor")
        logger.debug(f"Sync status polling started every {self._interval}s")

    async def stop(self) -> None:
        """Cancel polling and wait for the task to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.debug("Sync status polling stopped")

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
