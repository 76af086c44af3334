"""Pydantic schemas for Asset payloads and the in-memory asset record."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Self

from pydantic import Field, field_validator, model_validator

from asset_sync.constants import AssetClass
from asset_sync.schemas.common import Money, WireModel
from asset_sync.services.portfolio.valuation_service import (
    annual_expected_income,
    derive_metrics,
    purchase_amount,
)


def _coerce_asset_class(value: Any) -> Any:
    """Absent or unknown classes are treated as plain equity."""
    if isinstance(value, AssetClass):
        return value
    try:
        return AssetClass(value)
    except ValueError:
        return AssetClass.STOCK


class AssetBase(WireModel):
    """Base Asset schema with common fields."""

    asset_class: AssetClass = Field(AssetClass.STOCK, alias="type")
    code: str | None = Field(None, max_length=50, description="Market lookup code, e.g. KRX:005930")
    purchase_date: date | None = None
    dividend_cycle: str | None = Field(None, description="Distribution cycle label, e.g. 3개월")

    @field_validator("asset_class", mode="before")
    @classmethod
    def _default_asset_class(cls, value: Any) -> Any:
        return _coerce_asset_class(value)

    @field_validator("code", mode="before")
    @classmethod
    def _strip_code(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value


class AssetUpdate(AssetBase):
    """Schema for the full asset payload sent on update.

    Rejects negative or missing amounts before anything is sent. Rows pulled
    from the spreadsheet without a lookup code stay editable.
    """

    name: str = Field(..., min_length=1, max_length=200)
    quantity: Money = Field(..., ge=0)
    average_purchase_price: Money = Field(..., ge=0)
    dividend_per_share: Money | None = Field(None, ge=0)


class AssetCreate(AssetUpdate):
    """Schema for adding a new Asset."""

    @model_validator(mode="after")
    def _require_code(self) -> Self:
        if self.asset_class.requires_code and not self.code:
            raise ValueError(f"A lookup code is required for {self.asset_class.value} assets")
        return self


class Asset(AssetBase):
    """An asset as held in memory.

    Derived fields are always recomputed from quantity, cost basis and
    current price; values sent by the server for them are not trusted.
    """

    id: int
    name: str = "Unknown Asset"
    quantity: Money = Decimal("0")
    average_purchase_price: Money = Decimal("0")
    current_price: Money | None = None
    last_price_update: datetime | None = None
    dividend_per_share: Money | None = None

    current_value: Money | None = None
    profit_loss: Money | None = None
    return_rate: Money | None = None

    @field_validator("quantity", "average_purchase_price", mode="before")
    @classmethod
    def _null_as_zero(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value: Any) -> Any:
        return value or "Unknown Asset"

    @model_validator(mode="after")
    def _derive(self) -> Self:
        self._recompute()
        return self

    def _recompute(self) -> None:
        metrics = derive_metrics(self.quantity, self.average_purchase_price, self.current_price)
        self.current_value = metrics.current_value
        self.profit_loss = metrics.profit_loss
        self.return_rate = metrics.return_rate

    def reprice(self, price: Decimal, at: datetime | None = None) -> None:
        """Apply a fetched market price and stamp the update time."""
        self.current_price = price
        self.last_price_update = at or datetime.now()
        self._recompute()

    def revalue(
        self,
        quantity: Decimal | None = None,
        average_purchase_price: Decimal | None = None,
    ) -> None:
        """Change position size or cost basis, keeping derived fields in step."""
        if quantity is not None:
            self.quantity = quantity
        if average_purchase_price is not None:
            self.average_purchase_price = average_purchase_price
        self._recompute()

    @property
    def purchase_amount(self) -> Decimal:
        return purchase_amount(self.quantity, self.average_purchase_price)

    @property
    def expected_annual_income(self) -> Decimal:
        return annual_expected_income(self.quantity, self.dividend_per_share, self.dividend_cycle)

    @property
    def has_price_history(self) -> bool:
        return self.last_price_update is not None

    def is_lookup_eligible(self, code_prefix: str = "") -> bool:
        """Whether the external price lookup can be asked for this asset."""
        if not self.asset_class.requires_code or not self.code:
            return False
        return self.code.startswith(code_prefix)

    def to_update(self) -> AssetUpdate:
        """Build the validated full payload used to replace this asset."""
        return AssetUpdate.model_validate(
            self.model_dump(include=set(AssetUpdate.model_fields)),
        )
