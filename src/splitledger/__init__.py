"""Ledger engine for shared expenses: share allocation, balances and settle-up suggestions."""

__version__ = "0.1.0"
