"""
Ledger Event Models for FinanceFlow

Every mutation of the ledger produces an event. Events are the
notification channel between the engine and whatever renders it:
subscribers react to them, and every event is written to the
structured log.

DESIGN DECISION: Events are NOT persisted. There is no audit trail;
the store only ever holds the current state.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events the ledger publishes."""
    # Accounts
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"
    DEFAULT_CATEGORIES_SEEDED = "default_categories_seeded"

    # Operations
    OPERATION_RECORDED = "operation_recorded"
    OPERATION_DELETED = "operation_deleted"
    BALANCE_CHANGED = "balance_changed"

    # Budgets
    BUDGET_ADDED = "budget_added"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_DELETED = "budget_deleted"
    BUDGET_WARNING = "budget_warning"
    BUDGET_EXCEEDED = "budget_exceeded"

    # Goals
    GOAL_ADDED = "goal_added"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"
    GOAL_FUNDED = "goal_funded"
    GOAL_COMPLETED = "goal_completed"

    # System events
    WORKING_SET_RELOADED = "working_set_reloaded"
    PERSISTENCE_FAILED = "persistence_failed"


class LedgerEventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=datetime.now)

    event_type: LedgerEventType
    severity: LedgerEventSeverity = LedgerEventSeverity.INFO

    # Which record this is about
    record_kind: Optional[str] = None
    record_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "record_kind": self.record_kind,
            "record_id": str(self.record_id) if self.record_id else None,
            "description": self.description,
            "details": self.details,
        }


# CRUD event types per (record kind, action)
_CRUD_EVENTS = {
    ("accounts", "added"): LedgerEventType.ACCOUNT_ADDED,
    ("accounts", "updated"): LedgerEventType.ACCOUNT_UPDATED,
    ("accounts", "deleted"): LedgerEventType.ACCOUNT_DELETED,
    ("categories", "added"): LedgerEventType.CATEGORY_ADDED,
    ("categories", "updated"): LedgerEventType.CATEGORY_UPDATED,
    ("categories", "deleted"): LedgerEventType.CATEGORY_DELETED,
    ("operations", "deleted"): LedgerEventType.OPERATION_DELETED,
    ("budgets", "added"): LedgerEventType.BUDGET_ADDED,
    ("budgets", "updated"): LedgerEventType.BUDGET_UPDATED,
    ("budgets", "deleted"): LedgerEventType.BUDGET_DELETED,
    ("goals", "added"): LedgerEventType.GOAL_ADDED,
    ("goals", "updated"): LedgerEventType.GOAL_UPDATED,
    ("goals", "deleted"): LedgerEventType.GOAL_DELETED,
}


_RECORD_NAMES = {
    "accounts": "Account",
    "categories": "Category",
    "operations": "Operation",
    "budgets": "Budget",
    "goals": "Goal",
}


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.operation_recorded(operation_id, "expense", amount)
        event = LedgerEventBuilder.record_changed("budgets", "deleted", budget_id)
    """

    @staticmethod
    def record_changed(
        record_kind: str,
        action: str,
        record_id: UUID,
        details: Optional[dict] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=_CRUD_EVENTS[(record_kind, action)],
            record_kind=record_kind,
            record_id=record_id,
            description=f"{_RECORD_NAMES[record_kind]} {action}",
            details=details or {},
        )

    @staticmethod
    def operation_recorded(
        operation_id: UUID,
        operation_type: str,
        amount: Decimal,
        account_id: UUID,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.OPERATION_RECORDED,
            record_kind="operations",
            record_id=operation_id,
            description=f"Recorded {operation_type} of {amount}",
            details={
                "operation_type": operation_type,
                "amount": str(amount),
                "account_id": str(account_id),
            },
        )

    @staticmethod
    def balance_changed(
        account_id: UUID,
        old_balance: Decimal,
        new_balance: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BALANCE_CHANGED,
            record_kind="accounts",
            record_id=account_id,
            description=f"Balance changed from {old_balance} to {new_balance}",
            details={
                "old_balance": str(old_balance),
                "new_balance": str(new_balance),
            },
        )

    @staticmethod
    def budget_alert(
        budget_id: UUID,
        exceeded: bool,
        spent: Decimal,
        limit: Decimal,
        percentage: Decimal,
    ) -> LedgerEvent:
        if exceeded:
            event_type = LedgerEventType.BUDGET_EXCEEDED
            description = f"Budget exceeded: {spent} / {limit}"
        else:
            event_type = LedgerEventType.BUDGET_WARNING
            description = f"Budget at {percentage:.0f}%: {spent} / {limit}"
        return LedgerEvent(
            event_type=event_type,
            severity=LedgerEventSeverity.WARNING,
            record_kind="budgets",
            record_id=budget_id,
            description=description,
            details={
                "spent": str(spent),
                "limit": str(limit),
                "percentage": str(percentage),
            },
        )

    @staticmethod
    def goal_funded(
        goal_id: UUID,
        amount: Decimal,
        current_amount: Decimal,
        target_amount: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.GOAL_FUNDED,
            record_kind="goals",
            record_id=goal_id,
            description=f"Goal funded with {amount}",
            details={
                "amount": str(amount),
                "current_amount": str(current_amount),
                "target_amount": str(target_amount),
            },
        )

    @staticmethod
    def goal_completed(goal_id: UUID, target_amount: Decimal) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.GOAL_COMPLETED,
            record_kind="goals",
            record_id=goal_id,
            description=f"Goal reached its target of {target_amount}",
            details={"target_amount": str(target_amount)},
        )

    @staticmethod
    def categories_seeded(count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.DEFAULT_CATEGORIES_SEEDED,
            record_kind="categories",
            description=f"Seeded {count} built-in categories",
            details={"count": count},
        )

    @staticmethod
    def working_set_reloaded(counts: dict[str, int]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.WORKING_SET_RELOADED,
            severity=LedgerEventSeverity.DEBUG,
            description="Working set reloaded from store",
            details=counts,
        )

    @staticmethod
    def persistence_failed(
        action: str,
        error_message: str,
        record_kind: Optional[str] = None,
        record_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PERSISTENCE_FAILED,
            severity=LedgerEventSeverity.ERROR,
            record_kind=record_kind,
            record_id=record_id,
            description=f"Persistence failed during {action}",
            details={
                "action": action,
                "error_message": error_message,
            },
        )
