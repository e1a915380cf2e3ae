"""Ledger engine and the pure views it is built on."""

from financeflow.ledger import dates, views
from financeflow.ledger.engine import LedgerEngine

__all__ = ["LedgerEngine", "dates", "views"]
