"""
Query Execution Engine

Browse, search and filter over the expense list.

DESIGN DECISION: Queries run on a list_expenses() snapshot, never on
storage. The store imposes no ordering, so every ordering the UI needs
(newest first by default) is applied here.
"""

from typing import Callable, Optional

from expense_notes.models.expense import (
    Expense,
    ExpenseQuery,
    ExpenseQueryResult,
    PaidStatus,
    SortOrder,
)
from expense_notes.store import ExpenseStore


# (key, reverse) per sort order. Ties keep store order (sorted() is stable).
_SORT_KEYS: dict[SortOrder, tuple[Callable[[Expense], float], bool]] = {
    SortOrder.NEWEST: (lambda e: e.created_at, True),
    SortOrder.OLDEST: (lambda e: e.created_at, False),
    SortOrder.AMOUNT_DESC: (lambda e: e.amount, True),
    SortOrder.AMOUNT_ASC: (lambda e: e.amount, False),
}


def matches(expense: Expense, query: ExpenseQuery) -> bool:
    """Check a single expense against the query filters."""
    if query.search and query.search.casefold() not in expense.title.casefold():
        return False
    if query.category is not None and expense.category != query.category:
        return False
    if query.paid is not None and expense.paid is not query.paid:
        return False
    return True


def sort_expenses(
    expenses: list[Expense],
    order: SortOrder = SortOrder.NEWEST,
) -> list[Expense]:
    """Return a sorted copy of the list."""
    key, reverse = _SORT_KEYS[order]
    return sorted(expenses, key=key, reverse=reverse)


class ExpenseQueryExecutor:
    """
    Executes ExpenseQuery against an ExpenseStore.

    GUARANTEES:
    - Only returns records that exist in the store
    - Totals cover every match, not just the returned page
    """

    def __init__(self, store: ExpenseStore):
        self._store = store

    def execute(self, query: Optional[ExpenseQuery] = None) -> ExpenseQueryResult:
        """
        Run a query. With no query, lists everything newest first.

        Raises:
            NotInitialized: If the store has not been opened
        """
        query = query or ExpenseQuery()

        matched = [e for e in self._store.list_expenses() if matches(e, query)]
        ordered = sort_expenses(matched, query.sort)

        end = None if query.limit is None else query.offset + query.limit
        page = ordered[query.offset:end]

        paid_total = sum(e.amount for e in matched if e.paid is PaidStatus.PAID)
        unpaid_total = sum(e.amount for e in matched if e.paid is PaidStatus.UNPAID)

        return ExpenseQueryResult(
            expenses=page,
            result_count=len(matched),
            total_amount=paid_total + unpaid_total,
            paid_total=paid_total,
            unpaid_total=unpaid_total,
        )

    def categories(self) -> list[str]:
        """Distinct categories in use, sorted. Uncategorized is omitted."""
        return sorted({
            e.category for e in self._store.list_expenses() if e.category is not None
        })
