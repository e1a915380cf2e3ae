"""
Ledger Engine

This module ties the record store, the validator and the event
channel together and defines the mutation rules of the ledger.

DESIGN DECISION: The engine keeps a WORKING SET, an in-memory copy
of every record, rebuilt from the store after each mutation:
- Every mutation runs "read working set -> mutate -> persist -> reload"
  under one lock, so sessions sharing an engine cannot lose updates
- Derived views are recomputed from the working set on every call
- A persistence failure is logged and published, the call returns
  False and the working set keeps its pre-call state. No retry.

The engine is constructed explicitly and passed to whoever needs it.
There is no module-level instance.
"""

import threading
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union
from uuid import UUID

import structlog

from financeflow.config import LedgerSettings, get_settings
from financeflow.events import EventPublisher
from financeflow.ledger import views
from financeflow.models.events import LedgerEventBuilder
from financeflow.models.finance import (
    Account,
    Budget,
    Category,
    Goal,
    Operation,
    OperationType,
    Record,
    RecordKind,
)
from financeflow.models.views import (
    BudgetBuckets,
    BudgetView,
    DashboardSummary,
    GoalView,
    MonthlyStats,
)
from financeflow.services.storage import RecordStore, StorageError
from financeflow.validation import LedgerValidator


logger = structlog.get_logger(__name__)


class LedgerEngine:
    """
    Owns the working set and applies the ledger's mutation rules.

    Mutations return True when the change was persisted and False
    when the store failed. Invalid input raises LedgerValidationError
    before anything is written.
    """

    def __init__(
        self,
        store: RecordStore,
        publisher: Optional[EventPublisher] = None,
        validator: Optional[LedgerValidator] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._store = store
        self._publisher = publisher or EventPublisher()
        self._settings = settings or get_settings().ledger
        self._validator = validator or LedgerValidator(self._settings)
        self._lock = threading.RLock()
        self._working_set: dict[RecordKind, list[Record]] = {kind: [] for kind in RecordKind}

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def publisher(self) -> EventPublisher:
        return self._publisher

    @property
    def validator(self) -> LedgerValidator:
        return self._validator

    @property
    def settings(self) -> LedgerSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Working set
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """
        Rebuild the working set from the store.

        All five kinds are read before anything is replaced, so a
        failed read leaves the previous working set intact.
        """
        with self._lock:
            try:
                fresh = {kind: self._store.list(kind) for kind in RecordKind}
            except StorageError as e:
                self._persistence_failed("load", e)
                return False
            self._working_set = fresh
            self._publisher.publish(LedgerEventBuilder.working_set_reloaded(
                {kind.value: len(records) for kind, records in fresh.items()}
            ))
            return True

    def _records(self, kind: RecordKind) -> list:
        return list(self._working_set[kind])

    @property
    def accounts(self) -> list[Account]:
        return self._records(RecordKind.ACCOUNTS)

    @property
    def operations(self) -> list[Operation]:
        return self._records(RecordKind.OPERATIONS)

    @property
    def categories(self) -> list[Category]:
        return self._records(RecordKind.CATEGORIES)

    @property
    def budgets(self) -> list[Budget]:
        return self._records(RecordKind.BUDGETS)

    @property
    def goals(self) -> list[Goal]:
        return self._records(RecordKind.GOALS)

    def list_accounts(self) -> list[Account]:
        return self.accounts

    def list_operations(self) -> list[Operation]:
        return self.operations

    def list_categories(self) -> list[Category]:
        return self.categories

    def list_budgets(self) -> list[Budget]:
        return self.budgets

    def list_goals(self) -> list[Goal]:
        return self.goals

    def _find(self, kind: RecordKind, record_id: UUID) -> Optional[Record]:
        return next((r for r in self._working_set[kind] if r.id == record_id), None)

    def get_account(self, account_id: UUID) -> Optional[Account]:
        return self._find(RecordKind.ACCOUNTS, account_id)

    def get_category(self, category_id: UUID) -> Optional[Category]:
        return self._find(RecordKind.CATEGORIES, category_id)

    def get_goal(self, goal_id: UUID) -> Optional[Goal]:
        return self._find(RecordKind.GOALS, goal_id)

    def category_name(self, category_id: Optional[UUID]) -> str:
        return views.resolve_name(self._working_set[RecordKind.CATEGORIES], category_id)

    def account_name(self, account_id: Optional[UUID]) -> str:
        return views.resolve_name(self._working_set[RecordKind.ACCOUNTS], account_id)

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    def _persistence_failed(
        self,
        action: str,
        error: Exception,
        kind: Optional[RecordKind] = None,
        record_id: Optional[UUID] = None,
    ) -> None:
        self._publisher.publish(LedgerEventBuilder.persistence_failed(
            action=action,
            error_message=str(error),
            record_kind=kind.value if kind else None,
            record_id=record_id,
        ))

    def _insert(self, kind: RecordKind, record: Record) -> bool:
        with self._lock:
            try:
                self._store.insert(kind, record)
            except StorageError as e:
                self._persistence_failed("insert", e, kind, record.id)
                return False
            self.load()
        self._publisher.publish(LedgerEventBuilder.record_changed(kind.value, "added", record.id))
        return True

    def _update(self, kind: RecordKind, record_id: UUID, fields: dict[str, Any]) -> bool:
        with self._lock:
            current = self._find(kind, record_id)
            if current is None:
                logger.warning("update_unknown_record", kind=kind.value, record_id=str(record_id))
                return False
            self._validator.validate_update(kind, current, fields)
            try:
                self._store.update(kind, record_id, fields)
            except StorageError as e:
                self._persistence_failed("update", e, kind, record_id)
                return False
            self.load()
        self._publisher.publish(LedgerEventBuilder.record_changed(
            kind.value, "updated", record_id, {"fields": sorted(fields)},
        ))
        return True

    def _delete(self, kind: RecordKind, record_id: UUID) -> bool:
        """Delete one record. Dependents are left in place."""
        with self._lock:
            try:
                deleted = self._store.delete(kind, record_id)
            except StorageError as e:
                self._persistence_failed("delete", e, kind, record_id)
                return False
            self.load()
        if deleted:
            self._publisher.publish(LedgerEventBuilder.record_changed(kind.value, "deleted", record_id))
        return deleted

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def add_account(self, account: Account) -> bool:
        return self._insert(RecordKind.ACCOUNTS, account)

    def update_account(self, account_id: UUID, **fields: Any) -> bool:
        """Explicit edit, e.g. rename or balance correction."""
        return self._update(RecordKind.ACCOUNTS, account_id, fields)

    def delete_account(self, account_id: UUID) -> bool:
        """Operations and goals that reference the account are kept."""
        return self._delete(RecordKind.ACCOUNTS, account_id)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def add_category(self, category: Category) -> bool:
        return self._insert(RecordKind.CATEGORIES, category)

    def update_category(self, category_id: UUID, **fields: Any) -> bool:
        return self._update(RecordKind.CATEGORIES, category_id, fields)

    def delete_category(self, category_id: UUID) -> bool:
        """Operations and budgets in the category are kept and show "Unknown"."""
        return self._delete(RecordKind.CATEGORIES, category_id)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def record_operation(self, operation: Operation, account_id: Optional[UUID] = None) -> bool:
        """
        Record an operation and apply it to the account balance.

        Order: persist the operation, persist the new balance, reload.
        If the account does not resolve the operation is still stored
        and the balance update is skipped.

        NOTE: There is no rollback across kinds. If the balance write
        fails the stored operation stays in the store; the working set
        is not reloaded, so callers keep seeing the pre-call state.
        """
        account_id = account_id or operation.account_id
        with self._lock:
            account = self.get_account(account_id)
            watched = [
                b for b in self._working_set[RecordKind.BUDGETS]
                if b.category_id == operation.category_id
            ]
            before = {b.id: self._budget_view(b) for b in watched}

            try:
                self._store.insert(RecordKind.OPERATIONS, operation)
            except StorageError as e:
                self._persistence_failed("record_operation", e, RecordKind.OPERATIONS, operation.id)
                return False

            new_balance = None
            if account is None:
                logger.warning(
                    "operation_account_unresolved",
                    operation_id=str(operation.id),
                    account_id=str(account_id),
                )
            else:
                new_balance = views.apply_operation(account.balance, operation)
                try:
                    self._store.update(RecordKind.ACCOUNTS, account.id, {"balance": new_balance})
                except StorageError as e:
                    self._persistence_failed("record_operation", e, RecordKind.ACCOUNTS, account.id)
                    return False

            self.load()
            after = {b.id: self._budget_view(b) for b in watched}

        self._publisher.publish(LedgerEventBuilder.operation_recorded(
            operation.id, operation.operation_type.value, operation.amount, account_id,
        ))
        if account is not None:
            self._publisher.publish(LedgerEventBuilder.balance_changed(
                account.id, account.balance, new_balance,
            ))
        if operation.operation_type == OperationType.EXPENSE:
            self._publish_budget_alerts(before, after)
        return True

    def delete_operation(self, operation_id: UUID) -> bool:
        """
        Delete an operation.

        NOTE: The account balance is NOT reverted. Balances only
        move when operations are recorded or accounts are edited.
        """
        return self._delete(RecordKind.OPERATIONS, operation_id)

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def add_budget(self, budget: Budget) -> bool:
        return self._insert(RecordKind.BUDGETS, budget)

    def update_budget(self, budget_id: UUID, **fields: Any) -> bool:
        return self._update(RecordKind.BUDGETS, budget_id, fields)

    def delete_budget(self, budget_id: UUID) -> bool:
        return self._delete(RecordKind.BUDGETS, budget_id)

    def _warning_threshold(self) -> Decimal:
        return Decimal(str(self._settings.budget_warning_threshold))

    def _budget_view(self, budget: Budget) -> BudgetView:
        return views.budget_view(
            budget, self._working_set[RecordKind.OPERATIONS], self._warning_threshold(),
        )

    def budget_view(self, budget: Budget) -> BudgetView:
        """Spent, percentage and state of a budget, recomputed now."""
        return self._budget_view(budget)

    def budget_views(self) -> list[BudgetView]:
        return [self._budget_view(b) for b in self._working_set[RecordKind.BUDGETS]]

    def budget_buckets(self) -> BudgetBuckets:
        return views.budget_buckets(
            self._working_set[RecordKind.BUDGETS],
            self._working_set[RecordKind.OPERATIONS],
            self._warning_threshold(),
        )

    def _publish_budget_alerts(
        self,
        before: dict[UUID, BudgetView],
        after: dict[UUID, BudgetView],
    ) -> None:
        """Publish an alert for each budget that entered warning or exceeded."""
        for budget_id, view in after.items():
            previous = before.get(budget_id)
            entered_exceeded = view.is_exceeded and not (previous and previous.is_exceeded)
            entered_warning = view.is_warning and not (previous and previous.is_warning)
            if entered_exceeded or entered_warning:
                self._publisher.publish(LedgerEventBuilder.budget_alert(
                    budget_id=budget_id,
                    exceeded=view.is_exceeded,
                    spent=view.spent,
                    limit=view.budget.limit,
                    percentage=view.percentage,
                ))

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def add_goal(self, goal: Goal) -> bool:
        return self._insert(RecordKind.GOALS, goal)

    def update_goal(self, goal_id: UUID, **fields: Any) -> bool:
        return self._update(RecordKind.GOALS, goal_id, fields)

    def delete_goal(self, goal_id: UUID) -> bool:
        return self._delete(RecordKind.GOALS, goal_id)

    def add_funds(self, goal: Goal, amount: Union[Decimal, str, int]) -> Goal:
        """
        Top up a goal.

        The current amount is capped at the target; over-funding is
        not an error and the excess is not tracked. The linked
        account balance is not touched.

        Returns:
            The goal as held in the working set afterwards (unchanged
            if the store failed)

        Raises:
            LedgerValidationError: If amount is not positive
        """
        value = self._validator.require_positive(amount)
        with self._lock:
            current = self.get_goal(goal.id) or goal
            funded = views.fund_goal(current, value)
            try:
                self._store.update(
                    RecordKind.GOALS, goal.id, {"current_amount": funded.current_amount},
                )
            except StorageError as e:
                self._persistence_failed("add_funds", e, RecordKind.GOALS, goal.id)
                return current
            self.load()
            result = self.get_goal(goal.id) or funded

        self._publisher.publish(LedgerEventBuilder.goal_funded(
            goal.id, value, result.current_amount, result.target_amount,
        ))
        if current.current_amount < current.target_amount <= result.current_amount:
            self._publisher.publish(LedgerEventBuilder.goal_completed(goal.id, result.target_amount))
        return result

    def goal_view(self, goal: Goal, today: Optional[date] = None) -> GoalView:
        return views.goal_view(goal, today)

    def goal_views(self, today: Optional[date] = None) -> list[GoalView]:
        return [views.goal_view(g, today) for g in self._working_set[RecordKind.GOALS]]

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def monthly_stats(self, now: Optional[datetime] = None) -> MonthlyStats:
        return views.monthly_stats(
            self._working_set[RecordKind.OPERATIONS],
            self._working_set[RecordKind.CATEGORIES],
            now or datetime.now(),
            top_limit=self._settings.top_categories_limit,
        )

    def expense_trend(self, now: Optional[datetime] = None) -> list[Decimal]:
        return views.expense_trend(
            self._working_set[RecordKind.OPERATIONS],
            now or datetime.now(),
            months=self._settings.trend_months,
        )

    def dashboard(self, now: Optional[datetime] = None) -> DashboardSummary:
        return views.dashboard_summary(
            self._working_set[RecordKind.ACCOUNTS],
            self._working_set[RecordKind.OPERATIONS],
            now or datetime.now(),
            window_days=self._settings.dashboard_window_days,
            recent_limit=self._settings.recent_operations_limit,
        )
