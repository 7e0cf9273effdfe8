"""
Tests for Expense Notes models

Test strategy:
1. Unit tests for individual components (models, store, adapters)
2. Integration tests for flows (with in-memory storage and mocked HTTP)
3. No real network calls in tests
"""

import pytest

from expense_notes.models.expense import (
    Expense,
    ExpenseQuery,
    ImportItem,
    PaidStatus,
    SortOrder,
)
from expense_notes.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestExpenseModel:
    """Tests for the Expense record model."""

    def test_expense_creation(self):
        """Test Expense model creation."""
        expense = Expense(
            id=1,
            title="Cà phê",
            amount=30000,
            category="Ăn uống",
            created_at=1_700_000_000_000,
        )
        assert expense.title == "Cà phê"
        assert expense.paid is PaidStatus.PAID
        assert expense.is_paid is True

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from the title."""
        expense = Expense(id=1, title="  Cà phê  ", amount=1, created_at=0)
        assert expense.title == "Cà phê"

    def test_expense_blank_category_is_none(self):
        expense = Expense(id=1, title="A", amount=1, category="", created_at=0)
        assert expense.category is None

    def test_expense_rejects_empty_title(self):
        with pytest.raises(ValueError):
            Expense(id=1, title="", amount=1, created_at=0)

    def test_expense_rejects_non_positive_amount(self):
        """Amounts must be strictly positive."""
        with pytest.raises(ValueError):
            Expense(id=1, title="A", amount=0, created_at=0)
        with pytest.raises(ValueError):
            Expense(id=1, title="A", amount=-10, created_at=0)

    @pytest.mark.parametrize("amount", [float("inf"), float("nan")])
    def test_expense_rejects_non_finite_amount(self, amount):
        """inf/nan would serialize as non-standard JSON."""
        with pytest.raises(ValueError):
            Expense(id=1, title="A", amount=amount, created_at=0)

    def test_expense_rejects_non_binary_paid(self):
        with pytest.raises(ValueError):
            Expense(id=1, title="A", amount=1, paid=2, created_at=0)

    def test_expense_paid_from_int(self):
        expense = Expense.model_validate(
            {"id": 3, "title": "Tiền điện", "amount": 450000, "category": None,
             "paid": 0, "created_at": 5}
        )
        assert expense.paid is PaidStatus.UNPAID

    def test_to_storage_dict(self):
        """Test conversion to the persisted record shape."""
        expense = Expense(id=2, title="Đổ xăng", amount=50000, paid=0, created_at=7)
        assert expense.to_storage_dict() == {
            "id": 2,
            "title": "Đổ xăng",
            "amount": 50000,
            "category": None,
            "paid": 0,
            "created_at": 7,
        }


class TestPaidStatus:
    """Tests for the paid flag enum."""

    def test_values(self):
        assert PaidStatus.PAID.value == 1
        assert PaidStatus.UNPAID.value == 0

    def test_toggled(self):
        assert PaidStatus.PAID.toggled() is PaidStatus.UNPAID
        assert PaidStatus.UNPAID.toggled() is PaidStatus.PAID


class TestImportItem:
    """Tests for remote import items."""

    def test_ignores_extra_fields(self):
        item = ImportItem.model_validate(
            {"id": 1, "title": "iPhone 9", "price": 549, "stock": 94, "category": "smartphones"}
        )
        assert item.title == "iPhone 9"
        assert item.price == 549
        assert item.category == "smartphones"

    def test_category_optional(self):
        assert ImportItem(title="Lamp", price=20).category is None

    def test_requires_price(self):
        with pytest.raises(ValueError):
            ImportItem.model_validate({"title": "Lamp"})

    def test_rejects_infinite_price(self):
        with pytest.raises(ValueError):
            ImportItem(title="Lamp", price=float("inf"))


class TestExpenseQuery:
    """Tests for query model defaults."""

    def test_defaults(self):
        query = ExpenseQuery()
        assert query.sort is SortOrder.NEWEST
        assert query.search is None
        assert query.offset == 0

    def test_blank_filters_are_none(self):
        query = ExpenseQuery(search="  ", category="")
        assert query.search is None
        assert query.category is None

    def test_limit_bounds(self):
        with pytest.raises(ValueError):
            ExpenseQuery(limit=0)


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            description="Expense created",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_created(7, "Cà phê", 30000)
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_created"
        assert log_dict["expense_id"] == 7
        assert log_dict["details"]["title"] == "Cà phê"

    def test_expenses_imported_counts_duplicates(self):
        event = AuditEventBuilder.expenses_imported(received=30, inserted=28)
        assert event.details["skipped_duplicates"] == 2

    def test_storage_error_severity(self):
        event = AuditEventBuilder.storage_error("insert", "disk full")
        assert event.severity is AuditSeverity.ERROR
        assert event.error_message == "disk full"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
