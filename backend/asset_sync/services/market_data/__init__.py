"""Market price refresh services."""

from .price_refresh_service import PriceRefreshCoordinator

__all__ = ["PriceRefreshCoordinator"]
