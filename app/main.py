"""
Streamlit Frontend for FinanceFlow

This is the screen layer people use to track their money day to day.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every number on screen comes from the ledger engine
3. Clear error messages in simple language
4. Visual feedback for all operations
5. No hidden actions

The UI never computes balances, budget states or totals itself.
It renders what the engine returns and sends user input through
the validator before anything is saved.
"""

from datetime import date, datetime
from decimal import Decimal

import streamlit as st

from financeflow.config import validate_all_settings
from financeflow.ledger import LedgerEngine
from financeflow.models import (
    AccountDraft,
    AccountType,
    BudgetDraft,
    BudgetPeriod,
    CategoryDraft,
    GoalDraft,
    OperationDraft,
    OperationFilter,
    OperationType,
)
from financeflow.orchestrator import create_app_components
from financeflow.queries import OperationQueryExecutor
from financeflow.validation import LedgerValidationError


# Page configuration
st.set_page_config(
    page_title="FinanceFlow",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_components() -> tuple[LedgerEngine, OperationQueryExecutor]:
    """Get or create application components (cached across sessions)."""
    return create_app_components()


def money(amount: Decimal, currency: str = "") -> str:
    text = f"{amount:,.2f}"
    return f"{text} {currency}".strip()


def show_result(saved: bool, what: str) -> None:
    if saved:
        # shown by show_flash after the rerun
        st.session_state["flash"] = f"✅ {what} saved"
        st.rerun()
    else:
        st.error(f"❌ Could not save {what.lower()}. Please try again.")


def show_flash() -> None:
    message = st.session_state.pop("flash", None)
    if message:
        st.success(message)


def main():
    """Main application entry point."""
    engine, query_executor = get_components()
    show_flash()

    st.sidebar.title("💰 FinanceFlow")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Dashboard", "💸 Operations", "📊 Budgets", "🎯 Goals", "📈 Analytics", "⚙️ Settings"],
        index=0,
    )

    if page == "🏠 Dashboard":
        render_dashboard_page(engine)
    elif page == "💸 Operations":
        render_operations_page(engine, query_executor)
    elif page == "📊 Budgets":
        render_budgets_page(engine)
    elif page == "🎯 Goals":
        render_goals_page(engine)
    elif page == "📈 Analytics":
        render_analytics_page(engine)
    elif page == "⚙️ Settings":
        render_settings_page(engine)


def render_dashboard_page(engine: LedgerEngine):
    """Total balance, the last week and the latest operations."""
    st.title("🏠 Dashboard")
    summary = engine.dashboard()

    st.markdown("**Total balance**")
    st.markdown(f'<div class="big-number">{money(summary.total_balance)}</div>', unsafe_allow_html=True)

    col1, col2 = st.columns(2)
    col1.metric("Expenses, last 7 days", money(summary.window_expenses))
    col2.metric("Income, last 7 days", money(summary.window_income))

    st.markdown("### Accounts")
    if not engine.accounts:
        st.info("No accounts yet. Add one on the Settings page.")
    for account in engine.accounts:
        st.markdown(
            f"**{account.name}** ({account.account_type.display_name}): "
            f"{money(account.balance, account.currency)}"
        )

    st.markdown("### Recent operations")
    render_operation_list(engine, summary.recent_operations)


def render_operation_list(engine: LedgerEngine, operations) -> None:
    if not operations:
        st.info("📋 Operations will appear here once you add them.")
        return
    for op in operations:
        sign = "+" if op.operation_type == OperationType.INCOME else "-"
        st.markdown(
            f"{op.date.strftime('%d %b %Y')} · **{engine.category_name(op.category_id)}** · "
            f"{engine.account_name(op.account_id)} · {sign}{money(op.amount, op.currency)}"
            + (f" · _{op.description}_" if op.description else "")
        )


def render_operations_page(engine: LedgerEngine, query_executor: OperationQueryExecutor):
    """Add operations and browse them with filters."""
    st.title("💸 Operations")

    with st.expander("➕ Add operation", expanded=True):
        operation_type = st.selectbox(
            "Type *",
            options=list(OperationType),
            format_func=lambda x: x.display_name,
        )
        categories = [c for c in engine.categories if c.category_type == operation_type] or engine.categories
        col1, col2 = st.columns(2)
        with col1:
            amount = st.text_input("Amount *", placeholder="e.g. 1500.50")
            category = st.selectbox(
                "Category *",
                options=[None] + categories,
                format_func=lambda c: "Select a category" if c is None else f"{c.icon} {c.name}",
            )
        with col2:
            account = st.selectbox(
                "Account *",
                options=[None] + engine.accounts,
                format_func=lambda a: "Select an account" if a is None else a.name,
            )
            op_date = st.date_input("Date *", value=date.today())
        description = st.text_input("Description (optional)")

        if st.button("💾 Save operation", type="primary"):
            draft = OperationDraft(
                operation_type=operation_type,
                amount=amount,
                currency=account.currency if account else None,
                category_id=category.id if category else None,
                account_id=account.id if account else None,
                date=datetime.combine(op_date, datetime.now().time()),
                description=description,
            )
            result, operation = engine.validator.validate_operation(draft, engine.categories)
            if operation is None:
                st.markdown(f"""
                <div class="error-box">
                    <p>{engine.validator.get_user_friendly_summary(result).replace(chr(10), '<br>')}</p>
                </div>
                """, unsafe_allow_html=True)
            else:
                if result.warnings:
                    st.warning(engine.validator.get_user_friendly_summary(result))
                show_result(engine.record_operation(operation), "Operation")

    st.markdown("---")
    col1, col2, col3 = st.columns(3)
    with col1:
        type_filter = st.selectbox(
            "Filter by type",
            options=[None] + list(OperationType),
            format_func=lambda x: "All types" if x is None else x.display_name,
        )
    with col2:
        category_filter = st.selectbox(
            "Filter by category",
            options=[None] + engine.categories,
            format_func=lambda c: "All categories" if c is None else f"{c.icon} {c.name}",
        )
    with col3:
        search_text = st.text_input("Search description")

    result = query_executor.execute(OperationFilter(
        operation_type=type_filter,
        category_id=category_filter.id if category_filter else None,
        search_text=search_text,
    ))
    if not result.success:
        st.error(f"Error: {result.error_message}")
        return

    st.caption(f"{result.query_description} · {result.result_count} found")
    if not result.data_found:
        st.info("No operations match the filter.")
    for row in result.rows:
        op = row.operation
        col1, col2 = st.columns([5, 1])
        col1.markdown(
            f"{op.date.strftime('%d %b %Y')} · **{row.category_name}** · {row.account_name} · "
            f"{op.operation_type.display_name} {money(op.amount, op.currency)}"
            + (f" · _{op.description}_" if op.description else "")
        )
        if col2.button("🗑️", key=f"delete-op-{op.id}"):
            show_result(engine.delete_operation(op.id), "Change")


def render_budgets_page(engine: LedgerEngine):
    """Budgets grouped by state, and a form to add one."""
    st.title("📊 Budgets")
    buckets = engine.budget_buckets()

    sections = [
        ("🔴 Exceeded", buckets.exceeded, "error-box"),
        ("🟡 Close to the limit", buckets.warning, "warning-box"),
        ("🟢 On track", buckets.normal, "success-box"),
    ]
    if buckets.total == 0:
        st.info("No budgets yet.")
    for title, budget_views, css in sections:
        if not budget_views:
            continue
        st.markdown(f"### {title}")
        for view in budget_views:
            budget = view.budget
            left = "Left" if view.remaining >= 0 else "Over by"
            st.markdown(f"""
            <div class="{css}">
                <strong>{engine.category_name(budget.category_id)}</strong>
                ({budget.period.display_name})<br>
                {money(view.spent)} of {money(budget.limit, budget.currency)}
                · {view.percentage:.0f}%<br>
                {left}: {money(abs(view.remaining), budget.currency)}
            </div>
            """, unsafe_allow_html=True)
            st.progress(float(view.percentage) / 100)
            if st.button("🗑️ Delete budget", key=f"delete-budget-{budget.id}"):
                show_result(engine.delete_budget(budget.id), "Change")

    st.markdown("---")
    with st.expander("➕ Add budget"):
        expense_categories = [c for c in engine.categories if c.category_type == OperationType.EXPENSE]
        category = st.selectbox(
            "Category *",
            options=[None] + expense_categories,
            format_func=lambda c: "Select a category" if c is None else f"{c.icon} {c.name}",
        )
        limit = st.text_input("Limit *", placeholder="e.g. 50000")
        period = st.selectbox("Period", options=list(BudgetPeriod), format_func=lambda p: p.display_name)
        if st.button("💾 Save budget", type="primary"):
            try:
                budget = engine.validator.budget_from_draft(BudgetDraft(
                    category_id=category.id if category else None,
                    limit=limit,
                    period=period,
                ))
            except LedgerValidationError as e:
                st.error(engine.validator.get_user_friendly_summary(e.result))
            else:
                show_result(engine.add_budget(budget), "Budget")


def render_goals_page(engine: LedgerEngine):
    """Savings goals with progress and top-ups."""
    st.title("🎯 Goals")

    views = engine.goal_views()
    if not views:
        st.info("No goals yet.")
    for view in views:
        goal = view.goal
        status = "✅ Completed" if view.is_completed else f"⏳ {view.days_remaining} days left"
        st.markdown(
            f"### {goal.name}\n"
            f"{money(goal.current_amount)} of {money(goal.target_amount, goal.currency)} · "
            f"{view.percentage:.0f}% · {status} · {engine.account_name(goal.account_id)}"
        )
        st.progress(float(view.percentage) / 100)
        col1, col2, col3 = st.columns([3, 1, 1])
        top_up = col1.text_input("Top up", key=f"top-up-{goal.id}", label_visibility="collapsed")
        if col2.button("➕ Add", key=f"fund-{goal.id}"):
            try:
                engine.add_funds(goal, top_up)
                st.rerun()
            except LedgerValidationError as e:
                st.error(str(e))
        if col3.button("🗑️", key=f"delete-goal-{goal.id}"):
            show_result(engine.delete_goal(goal.id), "Change")

    st.markdown("---")
    with st.expander("➕ Add goal"):
        name = st.text_input("Name *")
        target = st.text_input("Target amount *")
        account = st.selectbox(
            "Account *",
            options=[None] + engine.accounts,
            format_func=lambda a: "Select an account" if a is None else a.name,
        )
        deadline = st.date_input("Deadline *", value=date.today())
        if st.button("💾 Save goal", type="primary"):
            result, goal = engine.validator.validate_goal(GoalDraft(
                name=name,
                target_amount=target,
                deadline=deadline,
                currency=account.currency if account else None,
                account_id=account.id if account else None,
            ))
            if goal is None:
                st.error(engine.validator.get_user_friendly_summary(result))
            else:
                show_result(engine.add_goal(goal), "Goal")


def render_analytics_page(engine: LedgerEngine):
    """Last month in numbers and the yearly expense trend."""
    st.title("📈 Analytics")
    stats = engine.monthly_stats()

    col1, col2, col3 = st.columns(3)
    col1.metric("Expenses, last month", money(stats.monthly_expenses))
    col2.metric("Income, last month", money(stats.monthly_income))
    col3.metric("Net", money(stats.net))

    st.markdown("### Top categories")
    if not stats.top_categories:
        st.info("No expenses in the last month.")
    for rank, item in enumerate(stats.top_categories, start=1):
        st.markdown(f"{rank}. **{item.name}**: {money(item.amount)}")

    st.markdown("### Expense trend")
    trend = engine.expense_trend()
    st.bar_chart({"Expenses": [float(value) for value in trend]})


def render_settings_page(engine: LedgerEngine):
    """Accounts, categories and configuration status."""
    st.title("⚙️ Settings")

    st.markdown("### Accounts")
    for account in engine.accounts:
        col1, col2 = st.columns([5, 1])
        col1.markdown(f"**{account.name}** · {money(account.balance, account.currency)}")
        if col2.button("🗑️", key=f"delete-account-{account.id}"):
            show_result(engine.delete_account(account.id), "Change")

    with st.expander("➕ Add account"):
        account_type = st.selectbox(
            "Type", options=list(AccountType), format_func=lambda t: t.display_name,
        )
        name = st.text_input("Name", placeholder=account_type.display_name)
        balance = st.text_input("Opening balance", placeholder="0")
        currency = st.text_input("Currency", value=engine.settings.default_currency)
        if st.button("💾 Save account", type="primary"):
            try:
                account = engine.validator.account_from_draft(AccountDraft(
                    name=name, balance=balance, currency=currency, account_type=account_type,
                ))
            except LedgerValidationError as e:
                st.error(str(e))
            else:
                show_result(engine.add_account(account), "Account")

    st.markdown("### Categories")
    for category in engine.categories:
        col1, col2 = st.columns([5, 1])
        col1.markdown(f"{category.icon} **{category.name}** · {category.category_type.display_name}")
        if category.is_custom and col2.button("🗑️", key=f"delete-category-{category.id}"):
            show_result(engine.delete_category(category.id), "Change")

    with st.expander("➕ Add category"):
        name = st.text_input("Category name *")
        icon = st.text_input("Icon", value="📌")
        color = st.color_picker("Color", value="#CCCCCC")
        category_type = st.selectbox(
            "Used for", options=list(OperationType), format_func=lambda t: t.display_name,
        )
        if st.button("💾 Save category", type="primary"):
            try:
                category = engine.validator.category_from_draft(CategoryDraft(
                    name=name, icon=icon, color=color, category_type=category_type,
                ))
            except LedgerValidationError as e:
                st.error(str(e))
            else:
                show_result(engine.add_category(category), "Category")

    st.markdown("---")
    st.markdown("### Configuration Status")

    status = validate_all_settings()
    sections = [
        ("Storage", "storage"),
        ("Ledger", "ledger"),
        ("Application", "app"),
    ]
    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} settings - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} settings - {error}")

    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
