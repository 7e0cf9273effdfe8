"""
Main Orchestrator for Expense Notes

This module ties the components together and defines the flows the
UI layer calls:
1. Start-up (open the store, seed sample data on first use)
2. Import (fetch remote payload -> deduplicated import)

DESIGN DECISION: Only the orchestrator reads settings. The store gets
its adapter and keys injected, so tests can build a store directly
from an InMemoryKeyValueAdapter without any configuration.
"""

from typing import Any, Optional, Protocol

import structlog

from expense_notes.audit import AuditLogger
from expense_notes.config import Settings, get_settings
from expense_notes.services.importer import HttpImportSource
from expense_notes.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueAdapter,
    InMemoryKeyValueAdapter,
    JsonFileKeyValueAdapter,
    KeyValueAdapter,
)
from expense_notes.store import ExpenseStore


logger = structlog.get_logger(__name__)


class ImportProvider(Protocol):
    """Anything that can fetch a raw import payload."""

    async def fetch(self) -> Any:
        ...


def create_adapter(settings: Optional[Settings] = None) -> KeyValueAdapter:
    """
    Build the configured persistence adapter.

    Backends: "memory", "file" (default), "google_sheets".
    """
    settings = settings or get_settings()
    storage = settings.storage

    if storage.backend == "memory":
        return InMemoryKeyValueAdapter()
    if storage.backend == "google_sheets":
        return GoogleSheetsKeyValueAdapter(GoogleSheetsClient(settings.google_sheets))
    return JsonFileKeyValueAdapter(storage.file_path)


async def start_store(store: ExpenseStore, seed: bool = True) -> int:
    """
    App start-up sequence: open the store, then seed if it is empty.

    Returns:
        Number of sample expenses inserted
    """
    await store.open()
    if not seed:
        return 0
    return await store.seed()


class ImportFlow:
    """
    Orchestrates a remote import.

    Flow:
    1. Fetch → provider returns the raw payload
    2. Import → store validates, deduplicates and persists in one write

    A fetch failure or a malformed payload leaves the store untouched.
    """

    def __init__(
        self,
        store: ExpenseStore,
        provider: ImportProvider,
    ):
        self._store = store
        self._provider = provider

    async def run(self) -> int:
        """
        Fetch and import.

        Returns:
            Number of expenses inserted

        Raises:
            ImportFetchError: Payload could not be fetched
            MalformedImportSource: Payload shape not recognized
            NotInitialized: Store not opened
        """
        payload = await self._provider.fetch()
        inserted = await self._store.import_from_source(payload)
        logger.info("import_flow_completed", inserted=inserted)
        return inserted


def create_app_components(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[ExpenseStore, ImportFlow]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from (defaults to get_settings())
        audit_logger: Shared audit logger (defaults to a local-only one)

    Returns:
        (store, import_flow). The store is not opened yet; call start_app()
        or start_store().
    """
    settings = settings or get_settings()
    storage = settings.storage
    importer = settings.importer

    store = ExpenseStore(
        adapter=create_adapter(settings),
        collection_key=storage.collection_key,
        initialized_key=storage.initialized_key,
        audit_logger=audit_logger or AuditLogger(),
    )
    provider = HttpImportSource(
        url=importer.url,
        timeout_seconds=importer.timeout_seconds,
    )

    logger.info(
        "app_components_created",
        backend=storage.backend,
        import_url=importer.url,
    )
    return store, ImportFlow(store, provider)


async def start_app(
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[ExpenseStore, ImportFlow]:
    """
    Build the components and run start-up.

    Sample data is only seeded when settings.app.seed_on_start is set.

    Returns:
        (store, import_flow) with the store already open
    """
    settings = settings or get_settings()
    store, import_flow = create_app_components(settings, audit_logger)
    await start_store(store, seed=settings.app.seed_on_start)
    return store, import_flow
