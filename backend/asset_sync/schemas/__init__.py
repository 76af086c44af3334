"""Pydantic schemas for the accounts API payloads."""

from .account import Account, AccountCreate, AccountUpdate
from .asset import Asset, AssetCreate, AssetUpdate
from .common import MessageResponse, Money, WireModel
from .refresh import PriceUpdate, RefreshFailure, RefreshPriceResponse, RefreshResult
from .summary import AccountSummary, AllocationSlice, OverviewSummary
from .sync import SyncStatus

__all__ = [
    "Account",
    "AccountCreate",
    "AccountSummary",
    "AccountUpdate",
    "AllocationSlice",
    "Asset",
    "AssetCreate",
    "AssetUpdate",
    "MessageResponse",
    "Money",
    "OverviewSummary",
    "PriceUpdate",
    "RefreshFailure",
    "RefreshPriceResponse",
    "RefreshResult",
    "SyncStatus",
    "WireModel",
]
