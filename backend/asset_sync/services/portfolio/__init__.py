"""Valuation and aggregation services."""
