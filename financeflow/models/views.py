"""
Derived View Models for FinanceFlow

Everything in this module is COMPUTED from records, never stored.
The ledger rebuilds these on every read so they always agree with
the latest operations.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from financeflow.models.finance import (
    Budget,
    Goal,
    Operation,
    OperationType,
)


# =============================================================================
# BUDGETS AND GOALS
# =============================================================================

class BudgetView(BaseModel):
    """
    A budget with its consumption recomputed from operations.

    The three states are mutually exclusive:
    exceeded, warning, normal.
    """

    budget: Budget
    spent: Decimal = Field(..., ge=0)
    percentage: Decimal = Field(..., ge=0, le=100)
    is_exceeded: bool
    is_warning: bool

    @property
    def is_normal(self) -> bool:
        return not self.is_warning and not self.is_exceeded

    @property
    def remaining(self) -> Decimal:
        """Budget left before the limit. Negative once exceeded."""
        return self.budget.limit - self.spent


class BudgetBuckets(BaseModel):
    """All budgets partitioned by state."""

    exceeded: list[BudgetView] = Field(default_factory=list)
    warning: list[BudgetView] = Field(default_factory=list)
    normal: list[BudgetView] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.exceeded) + len(self.warning) + len(self.normal)


class GoalView(BaseModel):
    """A goal with its progress."""

    goal: Goal
    percentage: Decimal = Field(..., ge=0, le=100)
    days_remaining: int = Field(..., ge=0)

    @property
    def is_completed(self) -> bool:
        return self.goal.current_amount >= self.goal.target_amount


# =============================================================================
# ANALYTICS
# =============================================================================

class CategoryTotal(BaseModel):
    """Summed expense amount for one category display name."""

    name: str
    amount: Decimal


class MonthlyStats(BaseModel):
    """Income and expense totals over the last month."""

    window_start: datetime
    window_end: datetime
    monthly_expenses: Decimal = Decimal("0")
    monthly_income: Decimal = Decimal("0")
    expenses_by_category: dict[str, Decimal] = Field(default_factory=dict)
    top_categories: list[CategoryTotal] = Field(default_factory=list)

    @property
    def net(self) -> Decimal:
        return self.monthly_income - self.monthly_expenses


class DashboardSummary(BaseModel):
    """Headline numbers for the dashboard screen."""

    total_balance: Decimal = Decimal("0")
    window_start: datetime
    window_expenses: Decimal = Decimal("0")
    window_income: Decimal = Decimal("0")
    recent_operations: list[Operation] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of validating user input.

    Stage 1: Schema validation (presence, parsing, ranges)
    Stage 2: Semantic validation (warnings that never block)
    """

    record_kind: str = Field(
        ...,
        description="Kind of record being validated"
    )
    validated_at: datetime = Field(
        default_factory=datetime.now
    )
    schema_valid: bool
    semantic_valid: bool = True
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.schema_valid and not self.has_errors

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def errors(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]


# =============================================================================
# QUERY MODELS
# =============================================================================

class OperationFilter(BaseModel):
    """
    Filter for the operations list.

    Every filter is optional; an empty filter returns everything.
    """

    operation_type: Optional[OperationType] = None
    category_id: Optional[UUID] = None
    account_id: Optional[UUID] = None
    search_text: str = ""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: Optional[int] = Field(default=None, ge=1)


class OperationRow(BaseModel):
    """An operation with its references resolved to display names."""

    operation: Operation
    category_name: str
    account_name: str


class OperationQueryResult(BaseModel):
    """Result of running an OperationFilter against the working set."""

    executed_at: datetime = Field(default_factory=datetime.now)
    success: bool
    error_message: Optional[str] = None
    result_count: int = Field(ge=0)
    rows: list[OperationRow] = Field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    query_description: str = ""

    @property
    def data_found(self) -> bool:
        return self.result_count > 0
