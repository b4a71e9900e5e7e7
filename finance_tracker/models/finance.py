"""
Core Data Models for Personal Finance Tracker

These models define the schemas for every record flowing between the
session, the resource gateways and both stores. They are designed to:
1. Validate user input before it reaches any store
2. Serialize to the camelCase wire format shared by the REST service
   and the local fallback slots
3. Keep derived figures (summaries, budget comparisons) out of storage

DESIGN DECISION: Drafts (user input, no id yet) are strict; stored
entities are lenient about amounts and free text. A record persisted by
another client with a zero amount or a short description must not drop
out of loading; the aggregation engine guards every division instead.
Budget months stay strict because they are grouping keys.
"""

import datetime as dt
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class _FinanceModel(BaseModel):
    """Shared config: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Convert to the JSON document shape used by the REST service and local slots."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class BudgetStatus(str, Enum):
    """Where actual spending stands against a monthly budget."""
    UNDER = "under"
    ON_TRACK = "on-track"
    OVER = "over"


# =============================================================================
# PRIMARY ENTITIES
# =============================================================================

class TransactionDraft(_FinanceModel):
    """A transaction as entered by the user, before an id is assigned."""

    amount: float = Field(
        ...,
        gt=0,
        description="Amount (always positive, direction comes from type)"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date, serialized as YYYY-MM-DD"
    )
    description: str = Field(
        ...,
        min_length=3,
        max_length=200,
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Id of the category this transaction belongs to"
    )
    type: TransactionType


class Transaction(TransactionDraft):
    """A persisted transaction. Updates replace every field except id."""

    id: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    description: str

    @property
    def month(self) -> str:
        """Month key (YYYY-MM) of the transaction date."""
        return self.date.strftime("%Y-%m")


class CategoryDraft(_FinanceModel):
    """A category as entered by the user."""

    name: str = Field(
        ...,
        min_length=2,
        max_length=50,
    )
    color: str = Field(
        ...,
        min_length=4,
        max_length=32,
        description="Display colour, e.g. '#9b87f5'"
    )
    icon: Optional[str] = Field(
        default=None,
        max_length=50,
    )


class Category(CategoryDraft):
    """A persisted category."""

    id: str = Field(..., min_length=1)
    name: str
    color: str
    icon: Optional[str] = None


class BudgetDraft(_FinanceModel):
    """A monthly budget for one category, before an id is assigned."""

    category_id: str = Field(
        ...,
        min_length=1,
    )
    amount: float = Field(
        ...,
        gt=0,
    )
    month: str = Field(
        ...,
        pattern=MONTH_PATTERN,
        description="Month key, YYYY-MM"
    )


class Budget(BudgetDraft):
    """A persisted budget. At most one per (category_id, month)."""

    id: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)


# =============================================================================
# DERIVED MODELS (never stored)
# =============================================================================

class CategorySummaryItem(_FinanceModel):
    """Expense total for one category."""

    category_id: str
    category_name: str
    amount: float
    color: str


class FinanceSummary(_FinanceModel):
    """Totals over the whole transaction set."""

    total_income: float = 0.0
    total_expense: float = 0.0
    balance: float = 0.0
    category_summary: list[CategorySummaryItem] = Field(default_factory=list)


class BudgetComparison(_FinanceModel):
    """Budget vs. actual spending for one budget."""

    budget_id: str
    category_id: str
    category_name: str
    color: str
    month: str
    budget: float
    actual: float
    percentage: float
    status: BudgetStatus

    @property
    def progress(self) -> float:
        """Percentage capped at 100, for progress bars."""
        return min(100.0, self.percentage)

    @property
    def remaining(self) -> float:
        """Budget left to spend (negative when over)."""
        return self.budget - self.actual


class DailyExpense(_FinanceModel):
    """Total expenses on one day."""

    date: dt.date
    expense: float = 0.0


# =============================================================================
# ENTITY KINDS
# =============================================================================

class EntityKind(str, Enum):
    """
    The three record sets.

    Each kind knows its REST path segment, its local slot key
    and the models used to parse it.
    """
    TRANSACTIONS = "transactions"
    CATEGORIES = "categories"
    BUDGETS = "budgets"

    @property
    def path(self) -> str:
        return f"/{self.value}"

    @property
    def slot_key(self) -> str:
        return f"finance_{self.value}"

    @property
    def model(self) -> type[_FinanceModel]:
        return _ENTITY_MODELS[self][0]

    @property
    def draft_model(self) -> type[_FinanceModel]:
        return _ENTITY_MODELS[self][1]

    @property
    def label(self) -> str:
        """Singular, human readable name."""
        return {
            EntityKind.TRANSACTIONS: "transaction",
            EntityKind.CATEGORIES: "category",
            EntityKind.BUDGETS: "budget",
        }[self]


_ENTITY_MODELS: dict[EntityKind, tuple[type[_FinanceModel], type[_FinanceModel]]] = {
    EntityKind.TRANSACTIONS: (Transaction, TransactionDraft),
    EntityKind.CATEGORIES: (Category, CategoryDraft),
    EntityKind.BUDGETS: (Budget, BudgetDraft),
}


def entity_from_draft(kind: EntityKind, draft: BaseModel, entity_id: str) -> Any:
    """Build a full entity of the given kind from a draft and a new id."""
    return kind.model.model_validate({**draft.model_dump(), "id": entity_id})
