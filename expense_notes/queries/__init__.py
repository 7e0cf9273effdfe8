"""Query execution package."""

from expense_notes.queries.executor import (
    ExpenseQueryExecutor,
    matches,
    sort_expenses,
)

__all__ = ["ExpenseQueryExecutor", "matches", "sort_expenses"]
