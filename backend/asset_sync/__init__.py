"""Valuation and spreadsheet synchronization engine for tracked accounts."""

__version__ = "0.1.0"
