"""Account and overview aggregation.

Account totals are computed from the account-level sums, never by averaging
per-asset rates. Assets without a price contribute their cost basis but no
value, so they show up as a loss until a price arrives.
"""

import logging
from collections.abc import Iterable, Sequence
from decimal import Decimal

from asset_sync.constants import ALL_OWNERS, AccountType, AssetClass
from asset_sync.schemas import Account, AccountSummary, AllocationSlice, Asset, OverviewSummary
from asset_sync.services.portfolio.valuation_service import return_rate

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def refresh_totals(summary: AccountSummary) -> AccountSummary:
    """Recompute a summary's totals in place from its current asset list."""
    total_purchase = sum((asset.purchase_amount for asset in summary.assets), _ZERO)
    total_value = sum((asset.current_value or _ZERO for asset in summary.assets), _ZERO)
    total_income = sum((asset.expected_annual_income for asset in summary.assets), _ZERO)
    total_profit_loss = total_value - total_purchase

    summary.total_purchase_amount = total_purchase
    summary.total_current_value = total_value
    summary.total_profit_loss = total_profit_loss
    summary.total_return_rate = return_rate(total_profit_loss, total_purchase)
    summary.total_expected_income = total_income
    return summary


def summarize_account(account: Account, assets: Iterable[Asset]) -> AccountSummary:
    """Build the summary of one account from its assets.

    Args:
        account: The account header
        assets: Assets owned by the account, derived fields populated

    Returns:
        AccountSummary holding the same asset objects
    """
    summary = AccountSummary(
        account_id=account.id,
        account_name=account.name,
        owner=account.owner,
        account_type=account.account_type or AccountType.SPECIAL,
        financial_institution=account.financial_institution,
        account_number=account.account_number,
        assets=list(assets),
    )
    return refresh_totals(summary)


def filter_by_owner(
    summaries: Iterable[AccountSummary], owner_filter: str | None = ALL_OWNERS
) -> list[AccountSummary]:
    """Keep summaries of one owner; ``ALL`` (or None) keeps everything."""
    if not owner_filter or owner_filter == ALL_OWNERS:
        return list(summaries)
    return [summary for summary in summaries if summary.owner == owner_filter]


def build_allocation(summaries: Sequence[AccountSummary], total_value: Decimal) -> list[AllocationSlice]:
    """Sum asset values per class across accounts.

    Zero-value buckets are dropped and the rest sorted by value, largest
    first; ties keep first-seen order.
    """
    if total_value <= 0:
        return []

    buckets: dict[AssetClass, Decimal] = {}
    for summary in summaries:
        for asset in summary.assets:
            value = asset.current_value or _ZERO
            buckets[asset.asset_class] = buckets.get(asset.asset_class, _ZERO) + value

    slices = [
        AllocationSlice(
            asset_class=asset_class,
            label=asset_class.label,
            value=value,
            percent=value / total_value * _HUNDRED,
        )
        for asset_class, value in buckets.items()
        if value > 0
    ]
    return sorted(slices, key=lambda item: item.value, reverse=True)


def summarize_overview(
    summaries: Iterable[AccountSummary], owner_filter: str | None = ALL_OWNERS
) -> OverviewSummary:
    """Aggregate account summaries into the cross-account overview.

    Args:
        summaries: Account summaries, typically from the accounts summary endpoint
        owner_filter: Owner label to keep, or ``ALL`` for no filtering

    Returns:
        OverviewSummary with totals and the per-class allocation
    """
    selected = filter_by_owner(summaries, owner_filter)

    total_value = sum((s.total_current_value for s in selected), _ZERO)
    total_purchase = sum((s.total_purchase_amount for s in selected), _ZERO)
    total_income = sum((s.total_expected_income for s in selected), _ZERO)
    total_profit_loss = total_value - total_purchase

    logger.debug(
        f"Overview for owner={owner_filter}: {len(selected)} accounts, total value {total_value}"
    )

    return OverviewSummary(
        owner_filter=owner_filter or ALL_OWNERS,
        account_count=len(selected),
        total_purchase_amount=total_purchase,
        total_current_value=total_value,
        total_profit_loss=total_profit_loss,
        total_return_rate=return_rate(total_profit_loss, total_purchase),
        total_expected_income=total_income,
        allocation=build_allocation(selected, total_value),
        accounts=selected,
    )


def list_owners(summaries: Iterable[AccountSummary]) -> list[str]:
    """Owner filter choices: ``ALL`` followed by each distinct owner, first-seen order."""
    owners = [ALL_OWNERS]
    for summary in summaries:
        if summary.owner and summary.owner not in owners:
            owners.append(summary.owner)
    return owners
