"""
Aggregation Engine

Pure, synchronous functions that derive every summary the UI shows from
the current in-memory record sets. Nothing here is stored and nothing is
updated incrementally: each call recomputes from the lists it is given.

Missing references never raise. A transaction or budget pointing at an
unknown category gets a fallback name and a neutral colour.
"""

from collections import defaultdict
from typing import Iterable, Optional, Sequence

from finance_tracker.models.finance import (
    Budget,
    BudgetComparison,
    BudgetStatus,
    Category,
    CategorySummaryItem,
    DailyExpense,
    FinanceSummary,
    Transaction,
    TransactionType,
)
from finance_tracker.utils.dates import days_in_month, format_currency, format_date


UNCATEGORIZED_NAME = "Uncategorized"
UNKNOWN_CATEGORY_NAME = "Unknown"
NEUTRAL_COLOR = "#999999"
DEFAULT_ON_TRACK_TOLERANCE = 0.005


def _category_index(categories: Iterable[Category]) -> dict[str, Category]:
    index: dict[str, Category] = {}
    for category in categories:
        # First one wins, as a linear find() would
        index.setdefault(category.id, category)
    return index


def _expenses(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.type == TransactionType.EXPENSE]


# =============================================================================
# SUMMARY
# =============================================================================

def compute_summary(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
) -> FinanceSummary:
    """
    Totals over the whole transaction set.

    category_summary follows the order of `categories` and leaves out
    categories without any expense.
    """
    total_income = sum(t.amount for t in transactions if t.type == TransactionType.INCOME)
    total_expense = sum(t.amount for t in transactions if t.type == TransactionType.EXPENSE)

    spent: dict[str, float] = defaultdict(float)
    for transaction in _expenses(transactions):
        spent[transaction.category] += transaction.amount

    category_summary = [
        CategorySummaryItem(
            category_id=category.id,
            category_name=category.name,
            amount=spent.get(category.id, 0.0),
            color=category.color,
        )
        for category in categories
    ]

    return FinanceSummary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        category_summary=[item for item in category_summary if item.amount > 0],
    )


def expenses_by_category(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
) -> list[CategorySummaryItem]:
    """
    Expense totals per category id, largest first.

    Unlike compute_summary this starts from the transactions, so ids that
    match no category show up as 'Uncategorized'.
    """
    index = _category_index(categories)
    spent: dict[str, float] = {}
    for transaction in _expenses(transactions):
        spent[transaction.category] = spent.get(transaction.category, 0.0) + transaction.amount

    items = []
    for category_id, amount in spent.items():
        category = index.get(category_id)
        items.append(
            CategorySummaryItem(
                category_id=category_id,
                category_name=category.name if category else UNCATEGORIZED_NAME,
                amount=amount,
                color=category.color if category else NEUTRAL_COLOR,
            )
        )
    return sorted(items, key=lambda item: item.amount, reverse=True)


# =============================================================================
# BUDGETS
# =============================================================================

def budget_status(
    actual: float,
    amount: float,
    tolerance: float = DEFAULT_ON_TRACK_TOLERANCE,
) -> BudgetStatus:
    """
    Classify spending against a budget amount.

    Within `tolerance` of the amount is on-track; a tolerance of 0 means
    exact equality.
    """
    if abs(actual - amount) <= tolerance:
        return BudgetStatus.ON_TRACK
    if actual > amount:
        return BudgetStatus.OVER
    return BudgetStatus.UNDER


def budget_percentage(actual: float, amount: float) -> float:
    """actual / amount * 100, or 0 for a zero (or negative) budget."""
    if amount <= 0:
        return 0.0
    return actual / amount * 100


def actual_spending(
    transactions: Sequence[Transaction],
    category_id: str,
    month: str,
) -> float:
    """Expenses in one category during one YYYY-MM month."""
    return sum(
        t.amount
        for t in _expenses(transactions)
        if t.category == category_id and t.month == month
    )


def _compare(
    budget: Budget,
    actual: float,
    category: Optional[Category],
    tolerance: float,
) -> BudgetComparison:
    return BudgetComparison(
        budget_id=budget.id,
        category_id=budget.category_id,
        category_name=category.name if category else UNKNOWN_CATEGORY_NAME,
        color=category.color if category else NEUTRAL_COLOR,
        month=budget.month,
        budget=budget.amount,
        actual=actual,
        percentage=budget_percentage(actual, budget.amount),
        status=budget_status(actual, budget.amount, tolerance),
    )


def _spending_by_category_and_month(transactions: Sequence[Transaction]) -> dict[tuple[str, str], float]:
    spent: dict[tuple[str, str], float] = defaultdict(float)
    for transaction in _expenses(transactions):
        spent[(transaction.category, transaction.month)] += transaction.amount
    return spent


def compare_budgets(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    budgets: Sequence[Budget],
    month: str,
    tolerance: float = DEFAULT_ON_TRACK_TOLERANCE,
) -> list[BudgetComparison]:
    """
    Budget vs. actual for every budget of one month.

    Sorted by percentage, highest first.
    """
    index = _category_index(categories)
    spent = _spending_by_category_and_month(transactions)

    comparisons = [
        _compare(budget, spent.get((budget.category_id, month), 0.0), index.get(budget.category_id), tolerance)
        for budget in budgets
        if budget.month == month
    ]
    return sorted(comparisons, key=lambda c: c.percentage, reverse=True)


def budget_overview(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    budgets: Sequence[Budget],
    month: Optional[str] = None,
    tolerance: float = DEFAULT_ON_TRACK_TOLERANCE,
) -> list[BudgetComparison]:
    """
    Budget vs. actual for all budgets, or only those of `month`.

    Sorted by month (most recent first), then by percentage (highest first).
    """
    index = _category_index(categories)
    spent = _spending_by_category_and_month(transactions)

    comparisons = [
        _compare(
            budget,
            spent.get((budget.category_id, budget.month), 0.0),
            index.get(budget.category_id),
            tolerance,
        )
        for budget in budgets
        if month is None or budget.month == month
    ]
    return sorted(comparisons, key=lambda c: (c.month, c.percentage), reverse=True)


# =============================================================================
# TRANSACTION VIEWS
# =============================================================================

def daily_expenses(transactions: Sequence[Transaction], month: str) -> list[DailyExpense]:
    """One entry per day of `month`, zero-filled."""
    spent: dict = defaultdict(float)
    for transaction in _expenses(transactions):
        if transaction.month == month:
            spent[transaction.date] += transaction.amount

    return [DailyExpense(date=day, expense=spent.get(day, 0.0)) for day in days_in_month(month)]


def recent_transactions(transactions: Sequence[Transaction], limit: int = 5) -> list[Transaction]:
    """Newest first by date; ties keep their stored order."""
    return sorted(transactions, key=lambda t: t.date, reverse=True)[:limit]


def search_transactions(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    term: str,
    currency: str = "USD",
) -> list[Transaction]:
    """
    Case-insensitive match on description, category name,
    formatted date or formatted amount. An empty term matches everything.
    """
    needle = term.strip().lower()
    if not needle:
        return list(transactions)

    index = _category_index(categories)

    def matches(transaction: Transaction) -> bool:
        category = index.get(transaction.category)
        haystack = (
            transaction.description,
            category.name if category else UNCATEGORIZED_NAME,
            format_date(transaction.date),
            format_currency(transaction.amount, currency),
        )
        return any(needle in field.lower() for field in haystack)

    return [t for t in transactions if matches(t)]
