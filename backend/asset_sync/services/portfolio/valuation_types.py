"""Value objects for asset valuation."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class DerivedMetrics:
    """Metrics derived from quantity, cost basis and current price.

    All three are ``None`` when no current price is known; callers must not
    display a return rate in that case.
    """

    current_value: Decimal | None
    profit_loss: Decimal | None
    return_rate: Decimal | None

    @property
    def is_priced(self) -> bool:
        return self.current_value is not None
