"""Services package."""

from expense_notes.services.importer import (
    HttpImportSource,
    ImportFetchError,
    ImportSourceError,
    MalformedImportSource,
    extract_import_items,
)
from expense_notes.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueAdapter,
    InMemoryKeyValueAdapter,
    JsonFileKeyValueAdapter,
    KeyValueAdapter,
    StorageError,
    StorageUnavailable,
)

__all__ = [
    # Import source
    "HttpImportSource",
    "ImportFetchError",
    "ImportSourceError",
    "MalformedImportSource",
    "extract_import_items",
    # Storage services
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueAdapter",
    "InMemoryKeyValueAdapter",
    "JsonFileKeyValueAdapter",
    "KeyValueAdapter",
    "StorageError",
    "StorageUnavailable",
]
