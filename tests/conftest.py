"""Shared fixtures for Expense Notes tests."""

import asyncio
from typing import Iterable, Optional

import pytest
import pytest_asyncio

from expense_notes.audit import AuditLogger
from expense_notes.models.audit import AuditEvent
from expense_notes.services.storage import InMemoryKeyValueAdapter
from expense_notes.store import ExpenseStore


class FakeClock:
    """Epoch-ms clock that moves forward one second per call."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


class FlakyAdapter(InMemoryKeyValueAdapter):
    """In-memory adapter whose reads or writes can be switched off."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    async def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("device storage unreachable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        # Yield to the loop so concurrent callers can interleave
        await asyncio.sleep(0)
        self.writes += 1
        await super().set(key, value)

    async def remove_all(self, keys: Iterable[str]) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        await super().remove_all(keys)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def adapter() -> FlakyAdapter:
    return FlakyAdapter()


@pytest.fixture
def audit_events() -> list[AuditEvent]:
    return []


@pytest.fixture
def make_store(adapter, clock, audit_events):
    """Build a fresh (unopened) store on the shared adapter."""
    def _make() -> ExpenseStore:
        return ExpenseStore(
            adapter,
            clock=clock,
            audit_logger=AuditLogger(sink=audit_events),
        )
    return _make


@pytest_asyncio.fixture
async def store(make_store) -> ExpenseStore:
    """An opened, empty store."""
    store = make_store()
    await store.open()
    return store
