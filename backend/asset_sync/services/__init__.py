"""Services layer - valuation, price refresh and spreadsheet sync orchestration.

This module is organized into domain-based subpackages:
- market_data/: Price refresh fan-out against the price lookup endpoint
- portfolio/: Valuation and account/overview aggregation
- repositories/: In-memory projection of accounts and assets
- shared/: HTTP client base
- sync/: Sync status polling, auto refresh and sheet sync/export
"""
