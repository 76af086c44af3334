"""Schemas for price refresh requests and batch outcomes."""

from pydantic import Field

from asset_sync.schemas.common import Money, WireModel
from asset_sync.schemas.summary import AccountSummary


class RefreshPriceResponse(WireModel):
    """Response of the price lookup endpoint.

    A missing ``newPrice`` means no update occurred; it is not an error.
    """

    status: str | None = None
    new_price: Money | None = None
    forced: bool | None = None


class PriceUpdate(WireModel):
    """A lookup that completed.

    ``applied`` is False when the response carried no price or the asset no
    longer exists locally.
    """

    asset_id: int
    new_price: Money | None = None
    applied: bool = False


class RefreshFailure(WireModel):
    """A lookup that raised."""

    asset_id: int
    reason: str


class RefreshResult(WireModel):
    """Aggregate outcome of one refresh batch."""

    account_id: int
    updated: list[PriceUpdate] = Field(default_factory=list)
    failed: list[RefreshFailure] = Field(default_factory=list)
    reconciled: bool = False
    summary: AccountSummary | None = Field(
        None, description="Authoritative summary fetched after all lookups settled"
    )

    @property
    def total(self) -> int:
        return len(self.updated) + len(self.failed)

    @property
    def is_stale(self) -> bool:
        """True when local values are optimistic patches not yet confirmed."""
        return self.total > 0 and not self.reconciled
