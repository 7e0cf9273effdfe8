"""
Expense Store

DESIGN DECISION: The store is the single owner of the expense collection.
It keeps every record in memory and persists the FULL collection as one
JSON value under one key after each mutation. This gives us:
1. Reads that never touch storage (list, get)
2. One write path for every mutation
3. A single-key write, which the adapter makes atomic

TRADEOFFS:
- Every mutation rewrites the whole collection (O(n) per write).
  Fine for a personal expense list.
- One process, one store. There is no cross-process locking.

CONSISTENCY: Mutations are computed on a copy of the collection. The copy
replaces the in-memory collection only after the adapter write succeeds,
so a failed persist leaves memory and storage agreeing on the old state.
All mutations run under one asyncio.Lock, so two concurrent callers
can never lose each other's update.

Lifecycle:
    UNINITIALIZED --open()--> OPEN --(any CRUD)--> OPEN
    OPEN --reset()--> UNINITIALIZED
"""

import asyncio
import json
import time
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Iterator, Optional

import structlog
from pydantic import ValidationError

from expense_notes.audit import AuditLogger
from expense_notes.models.expense import Expense, PaidStatus
from expense_notes.services.importer import (
    MalformedImportSource,
    extract_import_items,
)
from expense_notes.services.storage import (
    KeyValueAdapter,
    StorageUnavailable,
)
from expense_notes.store.samples import SAMPLE_EXPENSES


logger = structlog.get_logger(__name__)

DEFAULT_COLLECTION_KEY = "expenses"
DEFAULT_INITIALIZED_KEY = "expenses_initialized"
INITIALIZED_MARKER = "true"


class NotInitialized(Exception):
    """Store operation attempted before open()."""
    pass


class StoreState(str, Enum):
    """Store lifecycle state."""
    UNINITIALIZED = "uninitialized"
    OPEN = "open"


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class ExpenseStore:
    """
    In-memory expense collection backed by a key-value adapter.

    Construct one per process and pass it to every caller.
    Tests get isolation by building a fresh store per test.

    Missing ids are a silent no-op for update, toggle_paid and delete:
    they never raise. They return True when a record matched and
    False otherwise, so callers that care can tell the cases apart.
    """

    def __init__(
        self,
        adapter: KeyValueAdapter,
        collection_key: str = DEFAULT_COLLECTION_KEY,
        initialized_key: str = DEFAULT_INITIALIZED_KEY,
        clock: Optional[Callable[[], int]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the store (does not touch storage; call open()).

        Args:
            adapter: Persistence substrate
            collection_key: Key holding the serialized collection
            initialized_key: Key holding the device-lifetime marker
            clock: Returns "now" in epoch milliseconds
            audit_logger: Receives one event per mutation
        """
        self._adapter = adapter
        self._collection_key = collection_key
        self._initialized_key = initialized_key
        self._clock = clock or now_ms
        self._audit = audit_logger or AuditLogger()

        self._expenses: list[Expense] = []
        self._state = StoreState.UNINITIALIZED
        self._first_run = False
        self._lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is StoreState.OPEN

    @property
    def first_run(self) -> bool:
        """True if the last open() wrote the initialized marker for the first time."""
        return self._first_run

    def _require_open(self) -> None:
        if self._state is not StoreState.OPEN:
            raise NotInitialized("Expense store is not open. Call open() first.")

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def _encode(self, expenses: list[Expense]) -> str:
        return json.dumps(
            [expense.to_storage_dict() for expense in expenses],
            ensure_ascii=False,
        )

    def _decode(self, raw: Optional[str]) -> list[Expense]:
        """Parse the persisted collection. Absent means empty."""
        if raw is None or not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageUnavailable(f"Persisted expenses are not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise StorageUnavailable(
                f"Persisted expenses must be a JSON array, got {type(data).__name__}"
            )

        try:
            expenses = [Expense.model_validate(item) for item in data]
        except ValidationError as e:
            raise StorageUnavailable(f"Persisted expense record is invalid: {e}") from e

        ids = [expense.id for expense in expenses]
        if len(ids) != len(set(ids)):
            raise StorageUnavailable("Persisted expenses contain duplicate ids")

        return expenses

    # -------------------------------------------------------------------------
    # Storage access
    # -------------------------------------------------------------------------

    @contextmanager
    def _storage_guard(self, operation: str) -> Iterator[None]:
        """Map any adapter failure to StorageUnavailable and audit it."""
        try:
            yield
        except StorageUnavailable as e:
            self._audit.log_storage_error(operation, str(e))
            raise
        except Exception as e:
            self._audit.log_storage_error(operation, str(e))
            raise StorageUnavailable(f"Storage failure during {operation}: {e}") from e

    async def _persist(self, operation: str, expenses: list[Expense]) -> None:
        """
        Write the full collection, then adopt it as the in-memory state.

        Must be called with the lock held.
        """
        payload = self._encode(expenses)
        with self._storage_guard(operation):
            await self._adapter.set(self._collection_key, payload)
        self._expenses = expenses

    def _index_of(self, expense_id: int) -> Optional[int]:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        return None

    @staticmethod
    def _next_id(expenses: list[Expense]) -> int:
        return max((expense.id for expense in expenses), default=0) + 1

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open(self) -> None:
        """
        Load the persisted collection and start serving.

        Idempotent: calls after the first are no-ops until reset().
        The initialized marker is written once per device, not per process.

        Raises:
            StorageUnavailable: Adapter unreachable or data undecodable
        """
        async with self._lock:
            if self._state is StoreState.OPEN:
                return

            with self._storage_guard("open"):
                raw = await self._adapter.get(self._collection_key)
                expenses = self._decode(raw)
                marker = await self._adapter.get(self._initialized_key)
                first_run = marker is None
                if first_run:
                    await self._adapter.set(self._initialized_key, INITIALIZED_MARKER)

            self._expenses = expenses
            self._first_run = first_run
            self._state = StoreState.OPEN

        self._audit.log_store_opened(len(expenses), first_run)

    async def seed(self) -> int:
        """
        Insert the sample expenses if, and only if, the store is empty.

        Never merges: any existing record (manual, imported or seeded)
        turns this into a no-op.

        Returns:
            Number of records inserted (0 when the store was not empty)
        """
        async with self._lock:
            self._require_open()
            if self._expenses:
                return 0

            now = self._clock()
            expenses = [
                Expense(
                    id=expense_id,
                    title=sample.title,
                    amount=sample.amount,
                    category=sample.category,
                    paid=sample.paid,
                    created_at=now,
                )
                for expense_id, sample in enumerate(SAMPLE_EXPENSES, start=1)
            ]
            await self._persist("seed", expenses)

        self._audit.log_store_seeded(len(expenses))
        return len(expenses)

    async def reset(self) -> None:
        """
        Remove the persisted collection and marker, clear memory,
        and return to UNINITIALIZED.

        The next open() + seed() repopulates the sample data.
        """
        async with self._lock:
            with self._storage_guard("reset"):
                await self._adapter.remove_all(
                    [self._collection_key, self._initialized_key]
                )
            self._expenses = []
            self._first_run = False
            self._state = StoreState.UNINITIALIZED

        self._audit.log_store_reset()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_expenses(self) -> list[Expense]:
        """
        Snapshot of all expenses in store order.

        Order is insertion-stable; callers sort for display.
        The returned records are copies.
        """
        self._require_open()
        return [expense.model_copy() for expense in self._expenses]

    def get(self, expense_id: int) -> Optional[Expense]:
        """Copy of one expense, or None if the id is unknown."""
        self._require_open()
        index = self._index_of(expense_id)
        if index is None:
            return None
        return self._expenses[index].model_copy()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def insert(
        self,
        title: str,
        amount: float,
        category: Optional[str] = None,
    ) -> int:
        """
        Create a manually entered expense. It starts PAID.

        Returns:
            The new expense id (max existing id + 1, or 1)

        Raises:
            ValidationError: Empty title or non-positive amount
        """
        async with self._lock:
            self._require_open()
            expenses = list(self._expenses)
            expense = Expense(
                id=self._next_id(expenses),
                title=title,
                amount=amount,
                category=category,
                paid=PaidStatus.PAID,
                created_at=self._clock(),
            )
            expenses.append(expense)
            await self._persist("insert", expenses)

        self._audit.log_expense_created(expense.id, expense.title, expense.amount)
        return expense.id

    async def update(
        self,
        expense_id: int,
        title: str,
        amount: float,
        category: Optional[str] = None,
    ) -> bool:
        """
        Replace title, amount and category. id, paid and created_at are kept.

        Returns:
            True if the expense existed, False for an unknown id (no-op)
        """
        async with self._lock:
            self._require_open()
            index = self._index_of(expense_id)
            if index is None:
                logger.debug("update_unknown_expense", expense_id=expense_id)
                return False

            current = self._expenses[index]
            updated = Expense(
                id=current.id,
                title=title,
                amount=amount,
                category=category,
                paid=current.paid,
                created_at=current.created_at,
            )
            expenses = list(self._expenses)
            expenses[index] = updated
            await self._persist("update", expenses)

        changes: dict[str, Any] = {
            field: getattr(updated, field)
            for field in ("title", "amount", "category")
            if getattr(updated, field) != getattr(current, field)
        }
        self._audit.log_expense_updated(expense_id, changes)
        return True

    async def toggle_paid(self, expense_id: int) -> bool:
        """
        Flip the paid flag between 0 and 1.

        Returns:
            True if the expense existed, False for an unknown id (no-op)
        """
        async with self._lock:
            self._require_open()
            index = self._index_of(expense_id)
            if index is None:
                logger.debug("toggle_unknown_expense", expense_id=expense_id)
                return False

            current = self._expenses[index]
            updated = current.model_copy(update={"paid": current.paid.toggled()})
            expenses = list(self._expenses)
            expenses[index] = updated
            await self._persist("toggle_paid", expenses)

        self._audit.log_expense_paid_toggled(expense_id, updated.paid.value)
        return True

    async def delete(self, expense_id: int) -> bool:
        """
        Remove an expense. Deleting an unknown id is never an error.

        Returns:
            True if an expense was removed, False otherwise
        """
        async with self._lock:
            self._require_open()
            index = self._index_of(expense_id)
            if index is None:
                logger.debug("delete_unknown_expense", expense_id=expense_id)
                return False

            expenses = list(self._expenses)
            del expenses[index]
            await self._persist("delete", expenses)

        self._audit.log_expense_deleted(expense_id)
        return True

    async def import_from_source(self, payload: Any) -> int:
        """
        Bulk-insert expenses from an import payload, skipping duplicates.

        An item is a duplicate when an existing expense has exactly the
        same title (case-sensitive). Items earlier in the same batch count
        as existing. Imported expenses start UNPAID.

        The whole batch is validated before anything changes and
        persisted with a single write.

        Args:
            payload: {"products": [...]}, a bare list of items,
                or a list of ImportItem

        Returns:
            Number of expenses actually inserted

        Raises:
            MalformedImportSource: Payload shape or an item is invalid;
                nothing is inserted
        """
        async with self._lock:
            self._require_open()
            try:
                items = extract_import_items(payload)
            except MalformedImportSource as e:
                self._audit.log_import_rejected(str(e))
                raise

            expenses = list(self._expenses)
            titles = {expense.title for expense in expenses}
            next_id = self._next_id(expenses)
            now = self._clock()

            inserted = 0
            for item in items:
                if item.title in titles:
                    continue
                expenses.append(
                    Expense(
                        id=next_id,
                        title=item.title,
                        amount=item.price,
                        category=item.category,
                        paid=PaidStatus.UNPAID,
                        created_at=now,
                    )
                )
                titles.add(item.title)
                next_id += 1
                inserted += 1

            if inserted:
                await self._persist("import", expenses)

        self._audit.log_expenses_imported(len(items), inserted)
        return inserted
