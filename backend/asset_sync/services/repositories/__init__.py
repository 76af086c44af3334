"""Local state access layer."""

from .local_state import LocalPortfolioState

__all__ = ["LocalPortfolioState"]
