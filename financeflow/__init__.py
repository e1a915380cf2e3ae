"""
FinanceFlow - Source Package

A personal-finance ledger: accounts, categorized operations,
budgets with threshold alerts and savings goals, kept in a
local record store.

DESIGN PRINCIPLES:
1. The store owns durable state, the engine owns derived views
2. Derived views are recomputed on every read
3. Validation happens at the input boundary, before any write
4. Persistence failures are logged, never half-applied
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinanceFlow Team"
