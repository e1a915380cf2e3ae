"""Tests for the pure derived views and calendar helpers."""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from financeflow.ledger import dates, views
from financeflow.models import (
    Account,
    Budget,
    Category,
    Goal,
    Operation,
    OperationType,
)


NOW = datetime(2026, 6, 15, 12, 0)


def op(
    amount: str,
    operation_type: OperationType = OperationType.EXPENSE,
    category_id=None,
    when: datetime = NOW,
) -> Operation:
    return Operation(
        operation_type=operation_type,
        amount=Decimal(amount),
        category_id=category_id or uuid4(),
        account_id=uuid4(),
        date=when,
    )


class TestDates:
    """Tests for month arithmetic."""

    def test_add_months_clamps_day(self):
        assert dates.add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert dates.add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_add_months_crosses_years(self):
        assert dates.add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)
        assert dates.add_months(date(2026, 1, 15), -1) == date(2025, 12, 15)

    def test_add_months_keeps_time(self):
        assert dates.add_months(datetime(2026, 3, 31, 18, 30), -1) == datetime(2026, 2, 28, 18, 30)

    def test_whole_months_between(self):
        start = datetime(2026, 1, 15, 10, 0)
        assert dates.whole_months_between(start, datetime(2026, 2, 15, 9, 59)) == 0
        assert dates.whole_months_between(start, datetime(2026, 2, 15, 10, 0)) == 1
        assert dates.whole_months_between(start, datetime(2027, 1, 20)) == 12
        assert dates.whole_months_between(datetime(2026, 1, 31), datetime(2026, 2, 28)) == 1

    def test_whole_months_between_negative(self):
        assert dates.whole_months_between(datetime(2026, 3, 1), datetime(2026, 1, 1)) == -2


class TestBalanceRule:
    """Tests for the sign of each operation type."""

    @pytest.mark.parametrize("operation_type, expected", [
        (OperationType.EXPENSE, Decimal("800")),
        (OperationType.INCOME, Decimal("1200")),
        (OperationType.TRANSFER, Decimal("800")),
    ])
    def test_apply_operation(self, operation_type, expected):
        assert views.apply_operation(Decimal("1000"), op("200", operation_type)) == expected


class TestBudgetViews:
    """Tests for budget spent, percentage and state."""

    def test_spent_counts_only_expenses_of_category(self):
        """Test that income and other categories are ignored."""
        food = uuid4()
        budget = Budget(category_id=food, limit=Decimal("500"))
        operations = [
            op("200", category_id=food),
            op("50", OperationType.INCOME, category_id=food),
            op("70", OperationType.TRANSFER, category_id=food),
            op("300"),
        ]
        assert views.budget_spent(budget, operations) == Decimal("200")

    def test_spent_ignores_period_and_start_date(self):
        """Test that the whole history counts toward a budget."""
        food = uuid4()
        budget = Budget(category_id=food, limit=Decimal("500"), start_date=date(2026, 6, 1))
        operations = [
            op("100", category_id=food, when=datetime(2020, 1, 1)),
            op("100", category_id=food, when=NOW),
        ]
        assert views.budget_spent(budget, operations) == Decimal("200")

    def test_normal_budget(self):
        food = uuid4()
        view = views.budget_view(Budget(category_id=food, limit=Decimal("500")), [op("200", category_id=food)])
        assert view.spent == Decimal("200")
        assert view.percentage == Decimal("40")
        assert view.is_exceeded is False
        assert view.is_warning is False
        assert view.is_normal is True
        assert view.remaining == Decimal("300")

    def test_warning_then_exceeded(self):
        """Test the 95 -> 105 progression on a budget of 100."""
        food = uuid4()
        budget = Budget(category_id=food, limit=Decimal("100"))
        operations = [op("50", category_id=food), op("45", category_id=food)]

        view = views.budget_view(budget, operations)
        assert view.percentage == Decimal("95")
        assert view.is_warning is True
        assert view.is_exceeded is False

        view = views.budget_view(budget, operations + [op("10", category_id=food)])
        assert view.spent == Decimal("105")
        assert view.percentage == Decimal("100")
        assert view.remaining == Decimal("-5")
        assert view.is_exceeded is True
        assert view.is_warning is False

    def test_exactly_at_limit_is_warning_not_exceeded(self):
        food = uuid4()
        view = views.budget_view(Budget(category_id=food, limit=Decimal("100")), [op("100", category_id=food)])
        assert view.percentage == Decimal("100")
        assert view.is_warning is True
        assert view.is_exceeded is False

    def test_warning_threshold_boundary(self):
        food = uuid4()
        budget = Budget(category_id=food, limit=Decimal("100"))
        assert views.budget_view(budget, [op("80", category_id=food)]).is_warning is True
        assert views.budget_view(budget, [op("79.99", category_id=food)]).is_warning is False

    def test_custom_warning_threshold(self):
        food = uuid4()
        budget = Budget(category_id=food, limit=Decimal("100"))
        view = views.budget_view(budget, [op("60", category_id=food)], warning_threshold=Decimal("50"))
        assert view.is_warning is True

    def test_zero_limit_gives_zero_percentage(self):
        """Test the percentage guard for a limit that slipped past validation."""
        food = uuid4()
        budget = Budget.model_construct(category_id=food, limit=Decimal("0"))
        assert views.budget_view(budget, [op("10", category_id=food)]).percentage == Decimal("0")

    @pytest.mark.parametrize("spent", ["0", "1", "79", "80", "99.99", "100", "100.01", "5000"])
    def test_states_are_exclusive_and_percentage_bounded(self, spent):
        food = uuid4()
        budget = Budget(category_id=food, limit=Decimal("100"))
        operations = [op(spent, category_id=food)] if Decimal(spent) > 0 else []
        view = views.budget_view(budget, operations)
        assert Decimal("0") <= view.percentage <= Decimal("100")
        assert not (view.is_warning and view.is_exceeded)

    def test_buckets_partition_budgets(self):
        food, fun, rent = uuid4(), uuid4(), uuid4()
        budgets = [
            Budget(category_id=food, limit=Decimal("100")),
            Budget(category_id=fun, limit=Decimal("100")),
            Budget(category_id=rent, limit=Decimal("100")),
        ]
        operations = [op("150", category_id=food), op("85", category_id=fun), op("10", category_id=rent)]

        buckets = views.budget_buckets(budgets, operations)

        assert [v.budget.category_id for v in buckets.exceeded] == [food]
        assert [v.budget.category_id for v in buckets.warning] == [fun]
        assert [v.budget.category_id for v in buckets.normal] == [rent]
        assert buckets.total == 3

    def test_views_do_not_touch_stored_spent(self):
        food = uuid4()
        budget = Budget(category_id=food, limit=Decimal("100"))
        views.budget_view(budget, [op("60", category_id=food)])
        assert budget.spent == Decimal("0")


class TestGoalViews:
    """Tests for goal funding and progress."""

    def make_goal(self, current: str = "0") -> Goal:
        return Goal(
            name="Vacation",
            target_amount=Decimal("1000"),
            current_amount=Decimal(current),
            deadline=date(2026, 7, 15),
            account_id=uuid4(),
        )

    def test_fund_goal_clamps_at_target(self):
        goal = views.fund_goal(self.make_goal(), Decimal("700"))
        assert goal.current_amount == Decimal("700")
        goal = views.fund_goal(goal, Decimal("500"))
        assert goal.current_amount == Decimal("1000")

    def test_fund_goal_returns_copy(self):
        goal = self.make_goal()
        views.fund_goal(goal, Decimal("100"))
        assert goal.current_amount == Decimal("0")

    def test_goal_view(self):
        view = views.goal_view(self.make_goal("700"), today=date(2026, 6, 15))
        assert view.percentage == Decimal("70")
        assert view.days_remaining == 30
        assert view.is_completed is False

    def test_goal_view_past_deadline(self):
        view = views.goal_view(self.make_goal("1000"), today=date(2026, 8, 1))
        assert view.days_remaining == 0
        assert view.percentage == Decimal("100")
        assert view.is_completed is True


class TestMonthlyStats:
    """Tests for the last-month aggregation."""

    def test_window_totals(self):
        operations = [
            op("100", when=datetime(2026, 6, 10)),
            op("50", when=datetime(2026, 5, 15, 12, 0)),
            op("999", when=datetime(2026, 5, 15, 11, 59)),
            op("300", OperationType.INCOME, when=datetime(2026, 6, 1)),
            op("40", OperationType.TRANSFER, when=datetime(2026, 6, 1)),
        ]
        stats = views.monthly_stats(operations, [], NOW)
        assert stats.window_start == datetime(2026, 5, 15, 12, 0)
        assert stats.monthly_expenses == Decimal("150")
        assert stats.monthly_income == Decimal("300")
        assert stats.net == Decimal("150")

    def test_unknown_category_label(self):
        food = Category(name="Food")
        operations = [op("100", category_id=food.id), op("30")]
        stats = views.monthly_stats(operations, [food], NOW)
        assert stats.expenses_by_category == {"Food": Decimal("100"), "Unknown": Decimal("30")}

    def test_top_categories_sorted_and_capped(self):
        categories = [Category(name=f"C{i}") for i in range(7)]
        operations = [op(str(10 * (i + 1)), category_id=c.id) for i, c in enumerate(categories)]

        stats = views.monthly_stats(operations, categories, NOW)

        assert len(stats.top_categories) == 5
        assert [t.name for t in stats.top_categories] == ["C6", "C5", "C4", "C3", "C2"]
        amounts = [t.amount for t in stats.top_categories]
        assert amounts == sorted(amounts, reverse=True)

    def test_top_categories_ties_keep_operation_order(self):
        first, second = Category(name="First"), Category(name="Second")
        operations = [op("50", category_id=first.id), op("50", category_id=second.id)]
        stats = views.monthly_stats(operations, [second, first], NOW)
        assert [t.name for t in stats.top_categories] == ["First", "Second"]

    def test_same_name_categories_merge(self):
        """Test that totals are keyed by display name."""
        a, b = Category(name="Food"), Category(name="Food")
        stats = views.monthly_stats([op("10", category_id=a.id), op("5", category_id=b.id)], [a, b], NOW)
        assert stats.expenses_by_category == {"Food": Decimal("15")}

    def test_idempotent(self):
        food = Category(name="Food")
        operations = [op("100", category_id=food.id)]
        assert views.monthly_stats(operations, [food], NOW) == views.monthly_stats(operations, [food], NOW)


class TestExpenseTrend:
    """Tests for the twelve-month expense trend."""

    def test_buckets_by_elapsed_months(self):
        operations = [
            op("10", when=datetime(2026, 6, 1)),
            op("20", when=datetime(2026, 5, 20)),
            op("30", when=datetime(2026, 5, 10)),
            op("40", when=datetime(2025, 7, 15, 12, 0)),
            op("99", when=datetime(2025, 6, 15, 12, 0)),
            op("77", OperationType.INCOME, when=datetime(2026, 6, 1)),
        ]
        trend = views.expense_trend(operations, NOW)

        assert len(trend) == 12
        assert trend[11] == Decimal("30")
        assert trend[10] == Decimal("30")
        assert trend[0] == Decimal("40")
        assert sum(trend) == Decimal("100")

    def test_operation_less_than_a_month_ahead_counts_as_current(self):
        trend = views.expense_trend([op("10", when=datetime(2026, 7, 1))], NOW)
        assert trend[11] == Decimal("10")
        assert sum(trend) == Decimal("10")

    def test_operations_a_month_or_more_ahead_dropped(self):
        operations = [
            op("10", when=datetime(2026, 7, 15, 12, 0)),
            op("20", when=datetime(2026, 8, 1)),
        ]
        assert views.expense_trend(operations, NOW) == [Decimal("0")] * 12

    def test_custom_length(self):
        assert len(views.expense_trend([], NOW, months=6)) == 6


class TestDashboardSummary:

    def test_summary(self):
        accounts = [Account(name="A", balance=Decimal("800")), Account(name="B", balance=Decimal("-50"))]
        operations = [
            op(str(i + 1), when=datetime(2026, 6, 15 - i, 9, 0)) for i in range(6)
        ] + [op("500", OperationType.INCOME, when=datetime(2026, 6, 1))]

        summary = views.dashboard_summary(accounts, operations, NOW)

        assert summary.total_balance == Decimal("750")
        assert summary.window_expenses == Decimal("21")
        assert summary.window_income == Decimal("0")
        assert len(summary.recent_operations) == 5
        assert summary.recent_operations[0].amount == Decimal("1")


class TestResolveName:

    def test_resolves_or_unknown(self):
        food = Category(name="Food")
        assert views.resolve_name([food], food.id) == "Food"
        assert views.resolve_name([food], uuid4()) == "Unknown"
        assert views.resolve_name([food], None) == "Unknown"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
