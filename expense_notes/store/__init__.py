"""Expense store package."""

from expense_notes.store.expense_store import (
    ExpenseStore,
    NotInitialized,
    StoreState,
    now_ms,
)
from expense_notes.store.samples import SAMPLE_EXPENSES, SampleExpense

__all__ = [
    "ExpenseStore",
    "NotInitialized",
    "SAMPLE_EXPENSES",
    "SampleExpense",
    "StoreState",
    "now_ms",
]
