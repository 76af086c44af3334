"""One-shot price refresh for accounts holding never-priced assets."""

import logging
from collections.abc import Hashable

from asset_sync.schemas import AccountSummary, RefreshResult
from asset_sync.services.market_data.price_refresh_service import PriceRefreshCoordinator

logger = logging.getLogger(__name__)


class AttemptRegistry:
    """At-most-once arbitration keyed by account id.

    Owned by the session that created it; nothing here is persisted.
    """

    def __init__(self) -> None:
        self._attempted: set[Hashable] = set()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._attempted

    def __len__(self) -> int:
        return len(self._attempted)

    def try_mark(self, key: Hashable) -> bool:
        """Mark ``key`` as attempted. Returns False if it already was."""
        if key in self._attempted:
            return False
        self._attempted.add(key)
        return True


class AutoRefreshTrigger:
    """Decides once per account whether missing prices should be fetched."""

    def __init__(self, coordinator: PriceRefreshCoordinator, registry: AttemptRegistry) -> None:
        self._coordinator = coordinator
        self._registry = registry

    def missing_price_asset_ids(self, summary: AccountSummary) -> list[int]:
        """Lookup-eligible assets that have never had a price update."""
        return [
            asset.id
            for asset in summary.assets
            if self._coordinator.is_eligible(asset) and not asset.has_price_history
        ]

    async def evaluate(
        self, summary: AccountSummary | None, current_account_id: int | None
    ) -> RefreshResult | None:
        """Run the one-shot check for the currently selected account.

        The account is marked as attempted before the refresh starts, so a
        re-evaluation while it is in flight, or after it failed, does nothing.

        Args:
            summary: Summary just loaded for display
            current_account_id: Account currently selected by the caller

        Returns:
            The refresh outcome if a refresh was started, otherwise None
        """
        if summary is None or current_account_id is None:
            return None
        if summary.account_id != current_account_id:
            return None
        if not self._registry.try_mark(current_account_id):
            return None

        missing = self.missing_price_asset_ids(summary)
        if not missing:
            return None

        logger.info(
            f"Account {current_account_id} has {len(missing)} unpriced assets, refreshing once"
        )
        return await self._coordinator.refresh_prices(current_account_id, missing, force=True)
