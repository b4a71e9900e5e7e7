"""
Finance Session

This module owns the application state for one running client:
the transaction, category and budget collections, the gateways that
persist them and the activity log.

DESIGN DECISION: The in-memory collections are the source of truth
while the session runs; both stores are durable mirrors.
- Collections are immutable tuples, replaced wholesale after a gateway
  call resolves; nothing mutates them in place
- Business rules are checked against these collections before any
  storage call, so a rejected operation leaves everything unchanged
- The summary is recomputed whenever the transaction or category
  collection is replaced
"""

import asyncio
from typing import Optional

from finance_tracker.aggregation import (
    UNCATEGORIZED_NAME,
    budget_overview,
    compare_budgets,
    compute_summary,
)
from finance_tracker.audit import ActivityLogger, configure_logging
from finance_tracker.config import ApiSettings, AppSettings, LocalStoreSettings
from finance_tracker.models.activity import ActivityEventBuilder
from finance_tracker.models.finance import (
    Budget,
    BudgetComparison,
    BudgetDraft,
    Category,
    CategoryDraft,
    EntityKind,
    FinanceSummary,
    Transaction,
    TransactionDraft,
)
from finance_tracker.services.gateway import FinanceGateways, create_gateways
from finance_tracker.utils.dates import current_month


class RuleViolationError(Exception):
    """A business rule rejected the operation before any storage call."""

    def __init__(self, message: str, kind: EntityKind):
        super().__init__(message)
        self.kind = kind


class CategoryInUseError(RuleViolationError):
    """The category is referenced by a transaction or a budget."""

    def __init__(self, category_id: str, transaction_count: int, budget_count: int):
        if transaction_count:
            message = "Cannot delete category that is in use by transactions"
        else:
            message = "Cannot delete category that is in use by budgets"
        super().__init__(message, EntityKind.CATEGORIES)
        self.category_id = category_id
        self.transaction_count = transaction_count
        self.budget_count = budget_count


class DuplicateBudgetError(RuleViolationError):
    """A budget already exists for this category and month."""

    def __init__(self, category_id: str, month: str):
        super().__init__("Budget already exists for this category and month", EntityKind.BUDGETS)
        self.category_id = category_id
        self.month = month


class FinanceSession:
    """
    Application state for one client session.

    Usage:
        session = create_session()
        await session.load()
        await session.add_transaction(draft)
        session.summary.balance
    """

    def __init__(
        self,
        gateways: FinanceGateways,
        activity_logger: Optional[ActivityLogger] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._gateways = gateways
        self._activity_logger = activity_logger or ActivityLogger()
        self._settings = app_settings or AppSettings()

        self._transactions: tuple[Transaction, ...] = ()
        self._categories: tuple[Category, ...] = ()
        self._budgets: tuple[Budget, ...] = ()

        self._summary: Optional[FinanceSummary] = None
        self._summary_inputs: Optional[tuple] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._transactions

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._categories

    @property
    def budgets(self) -> tuple[Budget, ...]:
        return self._budgets

    @property
    def activity(self) -> ActivityLogger:
        return self._activity_logger

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def summary(self) -> FinanceSummary:
        """Recomputed only when the transaction or category collection was replaced."""
        if (
            self._summary is None
            or self._summary_inputs[0] is not self._transactions
            or self._summary_inputs[1] is not self._categories
        ):
            self._summary = compute_summary(self._transactions, self._categories)
            self._summary_inputs = (self._transactions, self._categories)
        return self._summary

    def budget_comparisons(self, month: Optional[str] = None) -> list[BudgetComparison]:
        """Budget vs. actual for one month (current month by default)."""
        return compare_budgets(
            self._transactions,
            self._categories,
            self._budgets,
            month or current_month(),
            tolerance=self._settings.budget_on_track_tolerance,
        )

    def budget_overview(self, month: Optional[str] = None) -> list[BudgetComparison]:
        """Budget vs. actual for every budget, or for one month."""
        return budget_overview(
            self._transactions,
            self._categories,
            self._budgets,
            month=month,
            tolerance=self._settings.budget_on_track_tolerance,
        )

    def get_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self._categories if c.id == category_id), None)

    def category_name(self, category_id: str) -> str:
        category = self.get_category(category_id)
        return category.name if category else UNCATEGORIZED_NAME

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load(self) -> None:
        """Fetch all three record sets and replace the collections."""
        transactions, categories, budgets = await asyncio.gather(
            self._gateways.transactions.get_all(),
            self._gateways.categories.get_all(),
            self._gateways.budgets.get_all(),
        )
        self._transactions = tuple(transactions)
        self._categories = tuple(categories)
        self._budgets = tuple(budgets)

        self._activity_logger.log(
            ActivityEventBuilder.data_loaded({
                EntityKind.TRANSACTIONS.value: len(self._transactions),
                EntityKind.CATEGORIES.value: len(self._categories),
                EntityKind.BUDGETS.value: len(self._budgets),
            })
        )

    async def close(self) -> None:
        await self._gateways.aclose()

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def add_transaction(self, draft: TransactionDraft) -> Transaction:
        transaction = await self._gateways.transactions.add(draft)
        self._transactions = (*self._transactions, transaction)
        self._activity_logger.log(ActivityEventBuilder.record_added(EntityKind.TRANSACTIONS, transaction.id))
        return transaction

    async def update_transaction(self, transaction: Transaction) -> Transaction:
        await self._gateways.transactions.update(transaction)
        self._transactions = tuple(
            transaction if t.id == transaction.id else t for t in self._transactions
        )
        self._activity_logger.log(ActivityEventBuilder.record_updated(EntityKind.TRANSACTIONS, transaction.id))
        return transaction

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._gateways.transactions.delete(transaction_id)
        self._transactions = tuple(t for t in self._transactions if t.id != transaction_id)
        self._activity_logger.log(ActivityEventBuilder.record_deleted(EntityKind.TRANSACTIONS, transaction_id))

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def add_category(self, draft: CategoryDraft) -> Category:
        category = await self._gateways.categories.add(draft)
        self._categories = (*self._categories, category)
        self._activity_logger.log(ActivityEventBuilder.record_added(EntityKind.CATEGORIES, category.id))
        return category

    async def update_category(self, category: Category) -> Category:
        await self._gateways.categories.update(category)
        self._categories = tuple(
            category if c.id == category.id else c for c in self._categories
        )
        self._activity_logger.log(ActivityEventBuilder.record_updated(EntityKind.CATEGORIES, category.id))
        return category

    async def delete_category(self, category_id: str) -> None:
        """
        Delete a category nobody references.

        Raises:
            CategoryInUseError: If any transaction or budget uses it
        """
        transaction_count = sum(1 for t in self._transactions if t.category == category_id)
        budget_count = sum(1 for b in self._budgets if b.category_id == category_id)
        if transaction_count or budget_count:
            error = CategoryInUseError(category_id, transaction_count, budget_count)
            self._activity_logger.log(
                ActivityEventBuilder.rule_violation(EntityKind.CATEGORIES, str(error), category_id)
            )
            raise error

        await self._gateways.categories.delete(category_id)
        self._categories = tuple(c for c in self._categories if c.id != category_id)
        self._activity_logger.log(ActivityEventBuilder.record_deleted(EntityKind.CATEGORIES, category_id))

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def add_budget(self, draft: BudgetDraft) -> Budget:
        """
        Add a budget for a (category, month) pair that has none yet.

        Raises:
            DuplicateBudgetError: If that pair already has a budget
        """
        if any(
            b.category_id == draft.category_id and b.month == draft.month
            for b in self._budgets
        ):
            error = DuplicateBudgetError(draft.category_id, draft.month)
            self._activity_logger.log(
                ActivityEventBuilder.rule_violation(EntityKind.BUDGETS, str(error))
            )
            raise error

        budget = await self._gateways.budgets.add(draft)
        self._budgets = (*self._budgets, budget)
        self._activity_logger.log(ActivityEventBuilder.record_added(EntityKind.BUDGETS, budget.id))
        return budget

    async def update_budget(self, budget: Budget) -> Budget:
        await self._gateways.budgets.update(budget)
        self._budgets = tuple(budget if b.id == budget.id else b for b in self._budgets)
        self._activity_logger.log(ActivityEventBuilder.record_updated(EntityKind.BUDGETS, budget.id))
        return budget

    async def delete_budget(self, budget_id: str) -> None:
        await self._gateways.budgets.delete(budget_id)
        self._budgets = tuple(b for b in self._budgets if b.id != budget_id)
        self._activity_logger.log(ActivityEventBuilder.record_deleted(EntityKind.BUDGETS, budget_id))


def create_session(
    api_settings: Optional[ApiSettings] = None,
    local_settings: Optional[LocalStoreSettings] = None,
    app_settings: Optional[AppSettings] = None,
    transport=None,
) -> FinanceSession:
    """
    Factory function to create a session with its gateways.

    Args:
        api_settings: Remote REST service settings (env by default)
        local_settings: Local fallback store settings (env by default)
        app_settings: Application settings (env by default)
        transport: Optional httpx transport for the remote store

    Returns:
        An unloaded FinanceSession; call load() before reading state
    """
    app_settings = app_settings or AppSettings()
    configure_logging(app_settings.log_level)

    activity_logger = ActivityLogger()
    gateways = create_gateways(
        api_settings=api_settings,
        local_settings=local_settings,
        activity_logger=activity_logger,
        transport=transport,
    )
    return FinanceSession(gateways, activity_logger=activity_logger, app_settings=app_settings)
