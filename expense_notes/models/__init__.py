"""
Data Models Package

This package contains all Pydantic models used in Expense Notes.
All data flowing through the store must conform to these schemas.
"""

from expense_notes.models.expense import (
    Expense,
    ExpenseQuery,
    ExpenseQueryResult,
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

__all__ = [
    # Expense models
    "Expense",
    "ExpenseQuery",
    "ExpenseQueryResult",
    "ImportItem",
    "PaidStatus",
    "SortOrder",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
