"""Pydantic schemas for account and overview summaries."""

from decimal import Decimal
from typing import Any

from pydantic import Field, field_validator

from asset_sync.constants import ALL_OWNERS, AccountType, AssetClass
from asset_sync.schemas.asset import Asset
from asset_sync.schemas.common import Money, WireModel


class AccountSummary(WireModel):
    """Aggregate over one account's assets. Rebuilt on demand, never persisted."""

    account_id: int
    account_name: str | None = None
    owner: str | None = None
    account_type: AccountType = AccountType.SPECIAL
    financial_institution: str | None = None
    account_number: str | None = None

    total_purchase_amount: Money = Decimal("0")
    total_current_value: Money = Decimal("0")
    total_profit_loss: Money = Decimal("0")
    total_return_rate: Money = Decimal("0")
    total_expected_income: Money = Field(Decimal("0"), alias="totalExpectedDividend")

    assets: list[Asset] = Field(default_factory=list)

    @field_validator("account_type", mode="before")
    @classmethod
    def _default_account_type(cls, value: Any) -> Any:
        return value or AccountType.SPECIAL

    @field_validator(
        "total_purchase_amount",
        "total_current_value",
        "total_profit_loss",
        "total_return_rate",
        "total_expected_income",
        mode="before",
    )
    @classmethod
    def _null_total_as_zero(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    def find_asset(self, asset_id: int) -> Asset | None:
        """Find an asset in this summary by id."""
        return next((asset for asset in self.assets if asset.id == asset_id), None)


class AllocationSlice(WireModel):
    """Summed current value of one asset class and its share of the total."""

    asset_class: AssetClass
    label: str
    value: Money
    percent: Money = Field(..., description="Share of the filtered total, 0-100")


class OverviewSummary(WireModel):
    """Cross-account aggregate, optionally filtered by owner."""

    owner_filter: str = ALL_OWNERS
    account_count: int = 0
    total_purchase_amount: Money = Decimal("0")
    total_current_value: Money = Decimal("0")
    total_profit_loss: Money = Decimal("0")
    total_return_rate: Money = Decimal("0")
    total_expected_income: Money = Decimal("0")
    allocation: list[AllocationSlice] = Field(default_factory=list)
    accounts: list[AccountSummary] = Field(default_factory=list)
