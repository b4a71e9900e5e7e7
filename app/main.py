"""
Streamlit Frontend for Personal Finance Tracker

Pages:
1. Dashboard - balance, income, expenses, charts, recent transactions
2. Transactions - add, search, edit and delete transactions
3. Categories - manage categories
4. Budget - monthly budgets and budget vs. actual
5. Settings - configuration status

Every failure is shown as a notification; nothing here is allowed to
stop the session with an unhandled exception.
"""

import asyncio
from datetime import date

import plotly.graph_objects as go
import streamlit as st
from pydantic import ValidationError

from finance_tracker.aggregation import (
    daily_expenses,
    expenses_by_category,
    recent_transactions,
    search_transactions,
)
from finance_tracker.models.finance import (
    Budget,
    BudgetDraft,
    BudgetStatus,
    Category,
    CategoryDraft,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from finance_tracker.orchestrator import FinanceSession, RuleViolationError, create_session
from finance_tracker.utils.dates import (
    current_month,
    format_currency,
    format_date,
    format_month_year,
)


# Page configuration
st.set_page_config(
    page_title="Personal Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

STATUS_LABELS = {
    BudgetStatus.OVER: "over budget",
    BudgetStatus.ON_TRACK: "on budget",
    BudgetStatus.UNDER: "under budget",
}


def run_async(coro):
    """Run a coroutine on this browser session's event loop."""
    if "event_loop" not in st.session_state:
        st.session_state.event_loop = asyncio.new_event_loop()
    return st.session_state.event_loop.run_until_complete(coro)


def get_session() -> FinanceSession:
    """Get or create the finance session for this browser session."""
    if "finance_session" not in st.session_state:
        session = create_session()
        with st.spinner("Loading your data..."):
            try:
                run_async(session.load())
            except Exception as e:
                st.error(f"Unable to load data: {e}")
        st.session_state.finance_session = session
    return st.session_state.finance_session


def perform(action, success_message: str) -> bool:
    """
    Run a session operation and report the outcome as a notification.

    Returns True if the operation succeeded.
    """
    try:
        run_async(action)
    except RuleViolationError as e:
        st.error(str(e))
        return False
    except Exception as e:
        st.error(f"Something went wrong: {e}")
        return False
    st.toast(success_message)
    return True


def show_validation_errors(error: ValidationError) -> None:
    for issue in error.errors():
        field = ".".join(str(part) for part in issue["loc"])
        st.error(f"{field}: {issue['msg']}")


def main():
    """Main application entry point."""
    session = get_session()

    st.sidebar.title("💰 Finance Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💳 Transactions", "🏷️ Categories", "🎯 Budget", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    with st.sidebar.expander("Recent activity"):
        for event in session.activity.recent_events(limit=5):
            st.caption(f"{event.timestamp:%H:%M:%S} · {event.description}")

    if page == "📊 Dashboard":
        render_dashboard_page(session)
    elif page == "💳 Transactions":
        render_transactions_page(session)
    elif page == "🏷️ Categories":
        render_categories_page(session)
    elif page == "🎯 Budget":
        render_budget_page(session)
    elif page == "⚙️ Settings":
        render_settings_page(session)


def render_dashboard_page(session: FinanceSession):
    """Render the dashboard."""
    currency = session.settings.currency
    summary = session.summary
    month = current_month()

    st.title("📊 Dashboard")
    st.caption(format_month_year(month))

    income_count = sum(1 for t in session.transactions if t.type == TransactionType.INCOME)
    expense_count = len(session.transactions) - income_count

    col1, col2, col3 = st.columns(3)
    col1.metric(
        "Total Balance",
        format_currency(summary.balance, currency),
        help="You're doing great!" if summary.balance >= 0 else "You're spending more than you earn",
    )
    col2.metric("Income", format_currency(summary.total_income, currency))
    col2.caption(f"{income_count} income transactions")
    col3.metric("Expenses", format_currency(summary.total_expense, currency))
    col3.caption(f"{expense_count} expense transactions")

    chart_col1, chart_col2 = st.columns(2)

    with chart_col1:
        st.subheader("Monthly Expenses")
        days = daily_expenses(session.transactions, month)
        figure = go.Figure(
            go.Bar(
                x=[d.date.isoformat() for d in days],
                y=[d.expense for d in days],
                marker_color="#f87171",
            )
        )
        figure.update_layout(height=300, margin=dict(t=10, b=10, l=10, r=10))
        st.plotly_chart(figure, use_container_width=True)

    with chart_col2:
        st.subheader("Expenses by Category")
        breakdown = expenses_by_category(session.transactions, session.categories)
        if breakdown:
            figure = go.Figure(
                go.Pie(
                    labels=[item.category_name for item in breakdown],
                    values=[item.amount for item in breakdown],
                    marker=dict(colors=[item.color for item in breakdown]),
                    hole=0.4,
                )
            )
            figure.update_layout(height=300, margin=dict(t=10, b=10, l=10, r=10))
            st.plotly_chart(figure, use_container_width=True)
        else:
            st.info("No expense data to display")

    st.subheader("Recent Transactions")
    recent = recent_transactions(session.transactions, limit=session.settings.recent_transactions_limit)
    if not recent:
        st.info("No transactions yet. Add your first one on the Transactions page.")
    for transaction in recent:
        sign = "+" if transaction.type == TransactionType.INCOME else "-"
        left, right = st.columns([4, 1])
        left.markdown(f"**{transaction.description}**  \n{format_date(transaction.date)}")
        right.markdown(f"{sign}{format_currency(transaction.amount, currency)}")


def transaction_form(session: FinanceSession, key: str, existing: Transaction = None):
    """Shared add/edit form. Returns a validated draft or None."""
    category_ids = [c.id for c in session.categories]
    if not category_ids:
        st.warning("Create a category first.")
        return None

    with st.form(key, clear_on_submit=existing is None):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input(
                "Amount *",
                min_value=0.0,
                step=0.01,
                format="%.2f",
                value=existing.amount if existing else 0.0,
            )
            tx_date = st.date_input("Date *", value=existing.date if existing else date.today())
            tx_type = st.radio(
                "Type *",
                options=list(TransactionType),
                index=list(TransactionType).index(existing.type) if existing else 1,
                format_func=lambda t: t.value.title(),
                horizontal=True,
            )
        with col2:
            description = st.text_input("Description *", value=existing.description if existing else "")
            category = st.selectbox(
                "Category *",
                options=category_ids,
                index=category_ids.index(existing.category) if existing and existing.category in category_ids else 0,
                format_func=session.category_name,
            )
        submitted = st.form_submit_button("Save" if existing else "Add Transaction", type="primary")

    if not submitted:
        return None
    try:
        return TransactionDraft(
            amount=amount,
            date=tx_date,
            description=description,
            category=category,
            type=tx_type,
        )
    except ValidationError as e:
        show_validation_errors(e)
        return None


def render_transactions_page(session: FinanceSession):
    """Render the transactions page."""
    currency = session.settings.currency
    st.title("💳 Transactions")

    with st.expander("➕ Add Transaction"):
        draft = transaction_form(session, "add_transaction")
        if draft and perform(session.add_transaction(draft), "Transaction added successfully"):
            st.rerun()

    search = st.text_input("🔍 Search transactions", placeholder="Description, category, date or amount")
    matches = search_transactions(session.transactions, session.categories, search, currency=currency)

    if not matches:
        st.info("No transactions found for your search" if search else "No transactions yet")
        return

    for transaction in sorted(matches, key=lambda t: t.date, reverse=True):
        sign = "+" if transaction.type == TransactionType.INCOME else "-"
        col1, col2, col3, col4, col5 = st.columns([2, 3, 2, 2, 1])
        col1.write(format_date(transaction.date))
        col2.write(transaction.description)
        col3.write(session.category_name(transaction.category))
        col4.write(f"{sign}{format_currency(transaction.amount, currency)}")
        if col5.button("🗑️", key=f"delete_tx_{transaction.id}"):
            if perform(session.delete_transaction(transaction.id), "Transaction deleted successfully"):
                st.rerun()

    st.markdown("---")
    st.subheader("✏️ Edit Transaction")
    selected = st.selectbox(
        "Transaction",
        options=[t.id for t in matches],
        format_func=lambda tx_id: next(
            f"{format_date(t.date)} · {t.description}" for t in matches if t.id == tx_id
        ),
    )
    existing = next(t for t in matches if t.id == selected)
    draft = transaction_form(session, f"edit_transaction_{existing.id}", existing=existing)
    if draft:
        updated = Transaction(id=existing.id, **draft.model_dump())
        if perform(session.update_transaction(updated), "Transaction updated successfully"):
            st.rerun()


def render_categories_page(session: FinanceSession):
    """Render the categories page."""
    st.title("🏷️ Categories")

    with st.form("add_category", clear_on_submit=True):
        col1, col2, col3 = st.columns([3, 1, 2])
        name = col1.text_input("Name *")
        color = col2.color_picker("Color *", value="#9b87f5")
        icon = col3.text_input("Icon (optional)")
        submitted = st.form_submit_button("Add Category", type="primary")

    if submitted:
        try:
            draft = CategoryDraft(name=name, color=color, icon=icon or None)
        except ValidationError as e:
            show_validation_errors(e)
        else:
            if perform(session.add_category(draft), "Category added successfully"):
                st.rerun()

    if not session.categories:
        st.info("No categories yet")
        return

    for category in session.categories:
        col1, col2, col3, col4 = st.columns([1, 3, 3, 1])
        col1.color_picker("Color", value=category.color, key=f"swatch_{category.id}", disabled=True, label_visibility="collapsed")
        col2.write(f"{category.icon or ''} {category.name}".strip())
        new_name = col3.text_input(
            "Rename",
            value=category.name,
            key=f"rename_{category.id}",
            label_visibility="collapsed",
        )
        if new_name != category.name:
            try:
                draft = CategoryDraft(name=new_name, color=category.color, icon=category.icon)
            except ValidationError as e:
                show_validation_errors(e)
            else:
                updated = Category(id=category.id, **draft.model_dump())
                if perform(session.update_category(updated), "Category updated successfully"):
                    st.rerun()
        if col4.button("🗑️", key=f"delete_cat_{category.id}"):
            if perform(session.delete_category(category.id), "Category deleted successfully"):
                st.rerun()


def render_budget_page(session: FinanceSession):
    """Render the budget page."""
    currency = session.settings.currency
    month = current_month()
    st.title("🎯 Budget")

    with st.expander("➕ Add Budget"):
        category_ids = [c.id for c in session.categories]
        if not category_ids:
            st.warning("Create a category first.")
        else:
            with st.form("add_budget", clear_on_submit=True):
                col1, col2, col3 = st.columns(3)
                category_id = col1.selectbox("Category *", options=category_ids, format_func=session.category_name)
                amount = col2.number_input("Amount *", min_value=0.0, step=0.01, format="%.2f")
                budget_month = col3.text_input("Month (YYYY-MM) *", value=month)
                submitted = st.form_submit_button("Add Budget", type="primary")
            if submitted:
                try:
                    draft = BudgetDraft(category_id=category_id, amount=amount, month=budget_month)
                except ValidationError as e:
                    show_validation_errors(e)
                else:
                    if perform(session.add_budget(draft), "Budget added successfully"):
                        st.rerun()

    st.subheader(f"Budget vs. Actual Spending for {format_month_year(month)}")
    comparisons = session.budget_comparisons(month)
    if comparisons:
        figure = go.Figure()
        figure.add_trace(go.Bar(
            y=[c.category_name for c in comparisons],
            x=[c.budget for c in comparisons],
            name="Budget",
            orientation="h",
            marker_color="rgba(155, 135, 245, 0.3)",
        ))
        figure.add_trace(go.Bar(
            y=[c.category_name for c in comparisons],
            x=[c.actual for c in comparisons],
            name="Actual",
            orientation="h",
            marker_color=["#f87171" if c.status == BudgetStatus.OVER else "#9b87f5" for c in comparisons],
            text=[f"{c.percentage:.0f}%" for c in comparisons],
            textposition="outside",
        ))
        figure.update_layout(barmode="overlay", height=400)
        st.plotly_chart(figure, use_container_width=True)
    else:
        st.info(f"No budget data available for {format_month_year(month)}")

    st.subheader("Budgets")
    current_only = st.toggle("Show current month only", value=True)
    overview = session.budget_overview(month if current_only else None)
    if not overview:
        st.info("No budgets yet")
    for comparison in overview:
        col1, col2, col3 = st.columns([4, 2, 1])
        with col1:
            st.markdown(f"**{comparison.category_name}** · {format_month_year(comparison.month)}")
            st.progress(comparison.progress / 100)
        col2.write(
            f"{format_currency(comparison.actual, currency)} of {format_currency(comparison.budget, currency)} "
            f"({STATUS_LABELS[comparison.status]})"
        )
        if col3.button("🗑️", key=f"delete_budget_{comparison.budget_id}"):
            if perform(session.delete_budget(comparison.budget_id), "Budget deleted successfully"):
                st.rerun()

    if overview:
        st.markdown("---")
        st.subheader("✏️ Edit Budget Amount")
        budget_ids = [c.budget_id for c in overview]
        selected = st.selectbox(
            "Budget",
            options=budget_ids,
            format_func=lambda budget_id: next(
                f"{c.category_name} · {format_month_year(c.month)}" for c in overview if c.budget_id == budget_id
            ),
        )
        existing = next(b for b in session.budgets if b.id == selected)
        with st.form(f"edit_budget_{existing.id}"):
            new_amount = st.number_input("Amount *", min_value=0.0, step=0.01, format="%.2f", value=existing.amount)
            submitted = st.form_submit_button("Save")
        if submitted:
            try:
                BudgetDraft(category_id=existing.category_id, amount=new_amount, month=existing.month)
            except ValidationError as e:
                show_validation_errors(e)
            else:
                updated = Budget(id=existing.id, category_id=existing.category_id, amount=new_amount, month=existing.month)
                if perform(session.update_budget(updated), "Budget updated successfully"):
                    st.rerun()


def render_settings_page(session: FinanceSession):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    from finance_tracker.config import get_settings, validate_all_settings

    status = validate_all_settings()

    groups = [
        ("REST service", "api"),
        ("Local fallback store", "local_store"),
        ("Server", "server"),
        ("Application", "app"),
    ]

    for name, key in groups:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    settings = get_settings()
    st.markdown(f"**API URL:** `{settings.api.url}`")
    st.markdown(f"**Local data directory:** `{settings.local_store.data_dir}`")

    if st.button("🔄 Reload data"):
        with st.spinner("Reloading..."):
            perform(session.load(), "Data reloaded")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
