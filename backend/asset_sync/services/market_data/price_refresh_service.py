"""Concurrent price refresh with optimistic local patches.

Lookups for a batch are issued together and settle independently. Each
price is written into the local projection as soon as it arrives; once every
lookup has settled the authoritative summary is fetched and replaces the
patched one.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from asset_sync.config import settings
from asset_sync.schemas import AccountSummary, Asset, PriceUpdate, RefreshFailure, RefreshResult
from asset_sync.services.exceptions import LookupFailure
from asset_sync.services.ledger_client import LedgerClient
from asset_sync.services.portfolio.summary_service import refresh_totals
from asset_sync.services.repositories.local_state import LocalPortfolioState
from asset_sync.services.shared.http_client import HTTPClientError

logger = logging.getLogger(__name__)


class PriceRefreshCoordinator:
    """Fans out price lookups for an account's assets and reconciles afterwards.

    Failed lookups are recorded, never retried here, and never hold up the
    rest of the batch or the reconciliation fetch.
    """

    def __init__(
        self,
        client: LedgerClient,
        state: LocalPortfolioState,
        code_prefix: str | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._client = client
        self._state = state
        self._code_prefix = settings.lookup_code_prefix if code_prefix is None else code_prefix
        self._clock = clock
        self._in_flight: set[int] = set()

    @property
    def in_flight(self) -> frozenset[int]:
        """Asset ids whose lookups have been issued but not yet settled."""
        return frozenset(self._in_flight)

    def is_eligible(self, asset: Asset) -> bool:
        return asset.is_lookup_eligible(self._code_prefix)

    async def _load_summary(self, account_id: int) -> AccountSummary:
        summary = self._state.find_summary(account_id)
        if summary is None:
            summary = await self._client.get_account_summary(account_id)
            self._state.replace_summary(summary)
        return summary

    async def eligible_assets(
        self, account_id: int, asset_ids: Iterable[int] | None = None
    ) -> list[Asset]:
        """Assets of the account that can be sent to the price lookup."""
        summary = await self._load_summary(account_id)
        wanted = None if asset_ids is None else set(asset_ids)
        return [
            asset
            for asset in summary.assets
            if (wanted is None or asset.id in wanted) and self.is_eligible(asset)
        ]

    async def refresh_prices(
        self,
        account_id: int,
        asset_ids: Iterable[int] | None = None,
        force: bool = True,
        reconcile: bool = True,
    ) -> RefreshResult:
        """Refresh prices for several assets of one account.

        Args:
            account_id: Owning account
            asset_ids: Assets to refresh; None means every asset of the account
            force: Bypass the lookup collaborator's staleness cache
            reconcile: Fetch the authoritative summary once all lookups settle

        Returns:
            RefreshResult with one outcome per eligible asset
        """
        assets = await self.eligible_assets(account_id, asset_ids)
        result = RefreshResult(account_id=account_id)
        if not assets:
            logger.info(f"No lookup-eligible assets to refresh for account {account_id}")
            return result

        logger.info(f"Refreshing {len(assets)} prices for account {account_id} (force={force})")
        outcomes = await asyncio.gather(
            *(self._refresh_one(account_id, asset.id, force) for asset in assets),
            return_exceptions=True,
        )

        for asset, outcome in zip(assets, outcomes, strict=True):
            if isinstance(outcome, PriceUpdate):
                result.updated.append(outcome)
            elif isinstance(outcome, LookupFailure):
                logger.warning(str(outcome))
                result.failed.append(RefreshFailure(asset_id=asset.id, reason=outcome.reason))
            elif isinstance(outcome, Exception):
                logger.warning(f"Price refresh failed for asset {asset.id}: {outcome}")
                result.failed.append(RefreshFailure(asset_id=asset.id, reason=_reason(outcome)))
            else:
                raise outcome

        if result.failed:
            logger.warning(
                f"{len(result.failed)} of {result.total} price lookups failed for account {account_id}"
            )

        if reconcile:
            result.reconciled = await self._reconcile(result)
        return result

    async def refresh_price(self, account_id: int, asset_id: int, force: bool = True) -> RefreshResult:
        """Refresh a single asset; same patch-then-reconcile contract as a batch."""
        return await self.refresh_prices(account_id, [asset_id], force=force)

    async def _refresh_one(self, account_id: int, asset_id: int, force: bool) -> PriceUpdate:
        self._in_flight.add(asset_id)
        try:
            response = await self._client.refresh_asset_price(account_id, asset_id, force=force)
        except (HTTPClientError, ValidationError) as e:
            raise LookupFailure(asset_id, _reason(e)) from e
        finally:
            self._in_flight.discard(asset_id)
        return PriceUpdate(
            asset_id=asset_id,
            new_price=response.new_price,
            applied=self._apply_patch(account_id, asset_id, response.new_price),
        )

    def _apply_patch(self, account_id: int, asset_id: int, new_price: Decimal | None) -> bool:
        """Write a fetched price into the local projection.

        Prices for assets deleted while the lookup was in flight are dropped.
        """
        if new_price is None:
            return False
        summary = self._state.find_summary(account_id)
        asset = summary.find_asset(asset_id) if summary else None
        if asset is None:
            logger.info(f"Discarding price for asset {asset_id}: no longer held locally")
            return False
        asset.reprice(new_price, self._clock())
        refresh_totals(summary)
        logger.debug(f"Patched asset {asset_id} price to {new_price}")
        return True

    async def _reconcile(self, result: RefreshResult) -> bool:
        """Replace the patched summary with the authoritative one."""
        account_id = result.account_id
        try:
            summary = await self._client.get_account_summary(account_id)
        except (HTTPClientError, ValidationError) as e:
            logger.error(f"Reconciliation failed for account {account_id}: {e}")
            return False

        if self._state.find_summary(account_id) is None:
            logger.info(f"Account {account_id} dropped during refresh, skipping reconciliation")
            return False
        self._state.replace_summary(summary)
        result.summary = summary
        return True


def _reason(error: Exception) -> str:
    if isinstance(error, HTTPClientError):
        return error.payload_message() or str(error)
    return str(error) or error.__class__.__name__
