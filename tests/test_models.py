"""
Tests for Personal Finance Tracker

Test strategy:
1. Unit tests for individual components (models, engine, stores)
2. Integration tests for flows (remote store mocked or served in-process)
3. No real network calls in tests
"""

import pytest
from datetime import date

from pydantic import ValidationError

from finance_tracker.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)
from finance_tracker.models.finance import (
    Budget,
    BudgetComparison,
    BudgetDraft,
    BudgetStatus,
    Category,
    CategoryDraft,
    EntityKind,
    Transaction,
    TransactionDraft,
    TransactionType,
    entity_from_draft,
)


class TestFinanceModels:
    """Tests for transaction, category and budget models."""

    def test_transaction_draft_creation(self):
        """Test TransactionDraft model creation."""
        draft = TransactionDraft(
            amount=12.5,
            date=date(2024, 1, 5),
            description="Coffee beans",
            category="c1",
            type=TransactionType.EXPENSE,
        )
        assert draft.amount == 12.5
        assert draft.type == TransactionType.EXPENSE

    def test_draft_strips_whitespace(self):
        """Test that whitespace is stripped from descriptions."""
        draft = TransactionDraft(
            amount=1, date=date(2024, 1, 5), description="  Lunch  ", category="c1", type="expense",
        )
        assert draft.description == "Lunch"

    def test_draft_rejects_non_positive_amount(self):
        """Test that drafts need a positive amount."""
        with pytest.raises(ValidationError):
            TransactionDraft(amount=0, date=date(2024, 1, 5), description="Lunch", category="c1", type="expense")
        with pytest.raises(ValidationError):
            BudgetDraft(category_id="c1", amount=-5, month="2024-01")

    def test_draft_rejects_short_description(self):
        """Test description length bounds."""
        with pytest.raises(ValidationError):
            TransactionDraft(amount=1, date=date(2024, 1, 5), description="ab", category="c1", type="expense")

    def test_stored_transaction_accepts_zero_amount(self):
        """Test that persisted records with a zero amount still load."""
        transaction = Transaction(
            id="t1", amount=0, date=date(2024, 1, 5), description="Refund", category="c1", type="income",
        )
        assert transaction.amount == 0

    def test_stored_entities_relax_text_limits(self):
        """Test that persisted records don't need to meet the form's text limits."""
        transaction = Transaction(
            id="t1", amount=5, date=date(2024, 1, 5), description="ok", category="c1", type="expense",
        )
        category = Category(id="c1", name="X", color="red")
        assert transaction.description == "ok"
        assert category.name == "X"

        with pytest.raises(ValidationError):
            TransactionDraft(amount=5, date=date(2024, 1, 5), description="ok", category="c1", type="expense")
        with pytest.raises(ValidationError):
            CategoryDraft(name="X", color="red")

    def test_transaction_parses_wire_format(self):
        """Test parsing the camelCase JSON document shape."""
        transaction = Transaction.model_validate({
            "id": "t1",
            "amount": 40,
            "date": "2024-01-10",
            "description": "Groceries",
            "category": "c1",
            "type": "expense",
        })
        assert transaction.date == date(2024, 1, 10)
        assert transaction.month == "2024-01"

    def test_budget_wire_format_uses_camel_case(self):
        """Test that budgets serialize categoryId, not category_id."""
        budget = Budget(id="b1", category_id="c1", amount=100, month="2024-01")
        wire = budget.to_wire()
        assert wire == {"id": "b1", "categoryId": "c1", "amount": 100.0, "month": "2024-01"}
        assert Budget.model_validate(wire) == budget

    def test_budget_rejects_invalid_month(self):
        """Test that months must be YYYY-MM."""
        for month in ("2024-13", "2024-1", "Jan 2024", "2024-01-01"):
            with pytest.raises(ValidationError):
                BudgetDraft(category_id="c1", amount=10, month=month)

    def test_category_icon_is_optional(self):
        """Test that a missing icon is left out of the wire format."""
        category = Category(id="c1", name="Food", color="#ff0000")
        assert "icon" not in category.to_wire()

    def test_category_name_bounds(self):
        """Test category name length bounds."""
        with pytest.raises(ValidationError):
            CategoryDraft(name="F", color="#ff0000")
        with pytest.raises(ValidationError):
            CategoryDraft(name="F" * 51, color="#ff0000")

    def test_entity_from_draft(self):
        """Test building an entity from a draft and an id."""
        draft = CategoryDraft(name="Food", color="#ff0000")
        category = entity_from_draft(EntityKind.CATEGORIES, draft, "abc")
        assert isinstance(category, Category)
        assert category.id == "abc"
        assert category.name == "Food"

    def test_budget_comparison_progress_is_capped(self):
        """Test that progress never exceeds 100 while percentage does."""
        comparison = BudgetComparison(
            budget_id="b1", category_id="c1", category_name="Food", color="#fff",
            month="2024-01", budget=100, actual=150, percentage=150, status=BudgetStatus.OVER,
        )
        assert comparison.progress == 100
        assert comparison.remaining == -50


class TestEntityKind:
    """Tests for the entity kind registry."""

    def test_paths_and_slots(self):
        """Test REST paths and local slot keys."""
        assert EntityKind.TRANSACTIONS.path == "/transactions"
        assert EntityKind.CATEGORIES.slot_key == "finance_categories"
        assert EntityKind.BUDGETS.slot_key == "finance_budgets"

    def test_models(self):
        """Test that each kind maps to its entity and draft models."""
        assert EntityKind.TRANSACTIONS.model is Transaction
        assert EntityKind.TRANSACTIONS.draft_model is TransactionDraft
        assert EntityKind.BUDGETS.model is Budget
        assert EntityKind.CATEGORIES.label == "category"


class TestActivityModels:
    """Tests for activity-related models."""

    def test_activity_event_creation(self):
        """Test ActivityEvent model creation."""
        event = ActivityEvent(
            event_type=ActivityEventType.RECORD_ADDED,
            entity_kind=EntityKind.TRANSACTIONS,
            entity_id="t1",
            description="Transaction added successfully",
        )
        assert event.severity == ActivitySeverity.INFO
        assert event.event_id is not None

    def test_to_log_dict(self):
        """Test conversion to a structured log dict."""
        event = ActivityEventBuilder.record_deleted(EntityKind.BUDGETS, "b1")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "record_deleted"
        assert log_dict["entity_kind"] == "budgets"
        assert log_dict["entity_id"] == "b1"
        assert log_dict["description"] == "Budget deleted successfully"

    def test_rule_violation_is_a_warning(self):
        """Test that rule violations are logged as warnings."""
        event = ActivityEventBuilder.rule_violation(
            EntityKind.CATEGORIES, "Cannot delete category that is in use by transactions", "c1",
        )
        assert event.severity == ActivitySeverity.WARNING
        assert event.entity_id == "c1"

    def test_remote_fallback_details(self):
        """Test that fallbacks record the operation and the error."""
        event = ActivityEventBuilder.remote_fallback(EntityKind.TRANSACTIONS, "list_all", "connection refused")
        assert event.event_type == ActivityEventType.REMOTE_FALLBACK
        assert event.details == {"operation": "list_all", "error": "connection refused"}

    def test_storage_failure_is_an_error(self):
        """Test that unreadable stores are logged as errors."""
        event = ActivityEventBuilder.storage_failure(EntityKind.BUDGETS, "list_all", "Not a directory")
        assert event.event_type == ActivityEventType.STORAGE_FAILURE
        assert event.severity == ActivitySeverity.ERROR
        assert event.description == "Could not list all budgets, showing no records"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
