"""
Derived Views

Pure functions over sequences of records. Nothing here mutates its
inputs or touches storage, so every view can be recomputed as often
as the presentation layer likes and always agrees with the records
it was given.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union
from uuid import UUID

from financeflow.ledger.dates import add_months, whole_months_between
from financeflow.models.finance import (
    Account,
    Budget,
    Category,
    Goal,
    Operation,
    OperationType,
)
from financeflow.models.views import (
    BudgetBuckets,
    BudgetView,
    CategoryTotal,
    DashboardSummary,
    GoalView,
    MonthlyStats,
)


UNKNOWN_LABEL = "Unknown"
HUNDRED = Decimal("100")
ZERO = Decimal("0")

DEFAULT_WARNING_THRESHOLD = Decimal("80")


def _sum(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part/whole as a percentage capped at 100; 0 when whole is not positive."""
    if whole <= 0:
        return ZERO
    return min(part / whole * HUNDRED, HUNDRED)


def resolve_name(records: Iterable[Union[Account, Category, Goal]], record_id: Optional[UUID]) -> str:
    """Display name of the record with record_id, or "Unknown"."""
    for record in records:
        if record.id == record_id:
            return record.name
    return UNKNOWN_LABEL


# =============================================================================
# BALANCE RULE
# =============================================================================

def apply_operation(balance: Decimal, operation: Operation) -> Decimal:
    """
    New account balance after recording operation.

    Transfers are single-leg: they debit this account and
    credit nothing.
    """
    if operation.operation_type == OperationType.INCOME:
        return balance + operation.amount
    return balance - operation.amount


# =============================================================================
# BUDGETS
# =============================================================================

def budget_spent(budget: Budget, operations: Iterable[Operation]) -> Decimal:
    """
    Sum of all expense operations in the budget's category.

    NOTE: The whole history counts. period and start_date are
    not applied.
    """
    return _sum(
        op.amount
        for op in operations
        if op.operation_type == OperationType.EXPENSE and op.category_id == budget.category_id
    )


def budget_view(
    budget: Budget,
    operations: Iterable[Operation],
    warning_threshold: Decimal = DEFAULT_WARNING_THRESHOLD,
) -> BudgetView:
    spent = budget_spent(budget, operations)
    percentage = _percentage(spent, budget.limit)
    is_exceeded = spent > budget.limit
    return BudgetView(
        budget=budget,
        spent=spent,
        percentage=percentage,
        is_exceeded=is_exceeded,
        is_warning=percentage >= warning_threshold and not is_exceeded,
    )


def budget_buckets(
    budgets: Iterable[Budget],
    operations: Sequence[Operation],
    warning_threshold: Decimal = DEFAULT_WARNING_THRESHOLD,
) -> BudgetBuckets:
    """Partition budgets into exceeded, warning and normal."""
    buckets = BudgetBuckets()
    for budget in budgets:
        view = budget_view(budget, operations, warning_threshold)
        if view.is_exceeded:
            buckets.exceeded.append(view)
        elif view.is_warning:
            buckets.warning.append(view)
        else:
            buckets.normal.append(view)
    return buckets


# =============================================================================
# GOALS
# =============================================================================

def fund_goal(goal: Goal, amount: Decimal) -> Goal:
    """
    Goal after a top-up of amount.

    The new current amount is capped at the target; any excess
    is dropped, not refunded.
    """
    new_amount = min(goal.current_amount + amount, goal.target_amount)
    return goal.model_copy(update={"current_amount": new_amount})


def goal_view(goal: Goal, today: Optional[date] = None) -> GoalView:
    today = today or date.today()
    return GoalView(
        goal=goal,
        percentage=_percentage(goal.current_amount, goal.target_amount),
        days_remaining=max((goal.deadline - today).days, 0),
    )


# =============================================================================
# ANALYTICS
# =============================================================================

def _in_window(op: Operation, start: datetime, end: datetime) -> bool:
    return start <= op.date <= end


def monthly_stats(
    operations: Sequence[Operation],
    categories: Sequence[Category],
    now: datetime,
    top_limit: int = 5,
) -> MonthlyStats:
    """
    Income and expense totals over [now - 1 month, now].

    expenses_by_category keeps first-seen order of the operations,
    which makes the top-categories ranking stable for equal totals.
    """
    window_start = add_months(now, -1)
    in_window = [op for op in operations if _in_window(op, window_start, now)]

    names = {category.id: category.name for category in categories}
    by_category: dict[str, Decimal] = {}
    expenses = ZERO
    income = ZERO
    for op in in_window:
        if op.operation_type == OperationType.EXPENSE:
            expenses += op.amount
            name = names.get(op.category_id, UNKNOWN_LABEL)
            by_category[name] = by_category.get(name, ZERO) + op.amount
        elif op.operation_type == OperationType.INCOME:
            income += op.amount

    # sorted() is stable with reverse=True, ties keep insertion order
    ranked = sorted(by_category.items(), key=lambda item: item[1], reverse=True)

    return MonthlyStats(
        window_start=window_start,
        window_end=now,
        monthly_expenses=expenses,
        monthly_income=income,
        expenses_by_category=by_category,
        top_categories=[CategoryTotal(name=name, amount=amount) for name, amount in ranked[:top_limit]],
    )


def expense_trend(
    operations: Iterable[Operation],
    now: datetime,
    months: int = 12,
) -> list[Decimal]:
    """
    Monthly expense totals, oldest first.

    An expense lands in bucket (months - 1 - offset), where offset
    is the number of whole months elapsed since it happened.
    Offsets outside [0, months - 1] are dropped. Partial months
    truncate toward zero, so an expense dated less than a month after
    now still has offset 0.
    """
    totals = [ZERO] * months
    for op in operations:
        if op.operation_type != OperationType.EXPENSE:
            continue
        offset = whole_months_between(op.date, now)
        if 0 <= offset < months:
            totals[months - 1 - offset] += op.amount
    return totals


def dashboard_summary(
    accounts: Iterable[Account],
    operations: Sequence[Operation],
    now: datetime,
    window_days: int = 7,
    recent_limit: int = 5,
) -> DashboardSummary:
    """
    Headline numbers: total balance, last-week totals, recent operations.

    operations are expected newest first, as the store lists them.
    """
    window_start = now - timedelta(days=window_days)
    in_window = [op for op in operations if _in_window(op, window_start, now)]
    return DashboardSummary(
        total_balance=_sum(account.balance for account in accounts),
        window_start=window_start,
        window_expenses=_sum(op.amount for op in in_window if op.operation_type == OperationType.EXPENSE),
        window_income=_sum(op.amount for op in in_window if op.operation_type == OperationType.INCOME),
        recent_operations=list(operations[:recent_limit]),
    )
