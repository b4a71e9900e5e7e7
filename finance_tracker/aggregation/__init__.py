"""Aggregation engine package."""

from finance_tracker.aggregation.engine import (
    NEUTRAL_COLOR,
    UNCATEGORIZED_NAME,
    UNKNOWN_CATEGORY_NAME,
    actual_spending,
    budget_overview,
    budget_percentage,
    budget_status,
    compare_budgets,
    compute_summary,
    daily_expenses,
    expenses_by_category,
    recent_transactions,
    search_transactions,
)

__all__ = [
    "NEUTRAL_COLOR",
    "UNCATEGORIZED_NAME",
    "UNKNOWN_CATEGORY_NAME",
    "actual_spending",
    "budget_overview",
    "budget_percentage",
    "budget_status",
    "compare_budgets",
    "compute_summary",
    "daily_expenses",
    "expenses_by_category",
    "recent_transactions",
    "search_transactions",
]
