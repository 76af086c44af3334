"""Asset valuation - single source of truth for derived value calculations.

Every place that needs current value, profit/loss or return rate goes through
these functions so optimistic patches, local summaries and user edits agree.
"""

from decimal import ROUND_HALF_UP, Decimal

from asset_sync.constants import DividendCycle
from asset_sync.services.portfolio.valuation_types import DerivedMetrics

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_RATE_QUANT = Decimal("0.01")


def purchase_amount(quantity: Decimal, cost_basis: Decimal) -> Decimal:
    """Total amount paid for a holding."""
    return quantity * cost_basis


def return_rate(profit_loss: Decimal, purchase: Decimal) -> Decimal:
    """Return rate in percent, rounded to 2 decimal places.

    A zero purchase amount yields a rate of 0 rather than an error.
    """
    if purchase == 0:
        return _ZERO.quantize(_RATE_QUANT)
    return (profit_loss / purchase * _HUNDRED).quantize(_RATE_QUANT, rounding=ROUND_HALF_UP)


def derive_metrics(
    quantity: Decimal,
    cost_basis: Decimal,
    current_price: Decimal | None,
) -> DerivedMetrics:
    """Derive current value, profit/loss and return rate for one holding.

    Args:
        quantity: Units held (non-negative)
        cost_basis: Average purchase price per unit (non-negative)
        current_price: Latest market price, or None if never fetched

    Returns:
        DerivedMetrics; all fields are None when the price is unknown
    """
    if current_price is None:
        return DerivedMetrics(current_value=None, profit_loss=None, return_rate=None)

    purchase = purchase_amount(quantity, cost_basis)
    current_value = quantity * current_price
    profit_loss = current_value - purchase

    return DerivedMetrics(
        current_value=current_value,
        profit_loss=profit_loss,
        return_rate=return_rate(profit_loss, purchase),
    )


def annual_expected_income(
    quantity: Decimal,
    dividend_per_share: Decimal | None,
    dividend_cycle: str | None,
) -> Decimal:
    """Projected yearly distributions for a holding.

    Args:
        quantity: Units held
        dividend_per_share: Amount paid per unit per distribution
        dividend_cycle: Raw cycle label from the spreadsheet (e.g. "3개월")

    Returns:
        Per-distribution amount x distributions per year x quantity
    """
    if not dividend_per_share:
        return _ZERO
    payments = DividendCycle.parse(dividend_cycle).payments_per_year
    return dividend_per_share * payments * quantity
