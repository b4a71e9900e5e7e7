"""
Data Models Package

This package contains all Pydantic models used in the Personal Finance Tracker.
Everything the gateways persist or the engine derives conforms to these schemas.
"""

from finance_tracker.models.finance import (
    Budget,
    BudgetComparison,
    BudgetDraft,
    BudgetStatus,
    Category,
    CategoryDraft,
    CategorySummaryItem,
    DailyExpense,
    EntityKind,
    FinanceSummary,
    Transaction,
    TransactionDraft,
    TransactionType,
    entity_from_draft,
)
from finance_tracker.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Finance models
    "Budget",
    "BudgetComparison",
    "BudgetDraft",
    "BudgetStatus",
    "Category",
    "CategoryDraft",
    "CategorySummaryItem",
    "DailyExpense",
    "EntityKind",
    "FinanceSummary",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "entity_from_draft",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
