"""
Data Models Package

This package contains all Pydantic models used in FinanceFlow.
All data flowing through the ledger must conform to these schemas.
"""

from financeflow.models.finance import (
    RECORD_MODELS,
    Account,
    AccountDraft,
    AccountType,
    Budget,
    BudgetDraft,
    BudgetPeriod,
    Category,
    CategoryDraft,
    Goal,
    GoalDraft,
    Operation,
    OperationDraft,
    OperationType,
    Record,
    RecordKind,
)
from financeflow.models.views import (
    BudgetBuckets,
    BudgetView,
    CategoryTotal,
    DashboardSummary,
    GoalView,
    MonthlyStats,
    OperationFilter,
    OperationQueryResult,
    OperationRow,
    ValidationIssue,
    ValidationResult,
)
from financeflow.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventSeverity,
    LedgerEventType,
)

__all__ = [
    # Records
    "RECORD_MODELS",
    "Account",
    "AccountType",
    "Budget",
    "BudgetPeriod",
    "Category",
    "Goal",
    "Operation",
    "OperationType",
    "Record",
    "RecordKind",
    # Drafts
    "AccountDraft",
    "BudgetDraft",
    "CategoryDraft",
    "GoalDraft",
    "OperationDraft",
    # Views
    "BudgetBuckets",
    "BudgetView",
    "CategoryTotal",
    "DashboardSummary",
    "GoalView",
    "MonthlyStats",
    "OperationFilter",
    "OperationQueryResult",
    "OperationRow",
    "ValidationIssue",
    "ValidationResult",
    # Events
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventSeverity",
    "LedgerEventType",
]
