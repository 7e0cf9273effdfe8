"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
The store only ever talks to KeyValueAdapter, so backends are swappable.
"""

from expense_notes.services.storage.interface import (
    KeyValueAdapter,
    StorageError,
    StorageUnavailable,
)
from expense_notes.services.storage.memory import InMemoryKeyValueAdapter
from expense_notes.services.storage.json_file import JsonFileKeyValueAdapter
from expense_notes.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueAdapter,
)

__all__ = [
    # Interface
    "KeyValueAdapter",
    # Exceptions
    "StorageError",
    "StorageUnavailable",
    # Implementations
    "InMemoryKeyValueAdapter",
    "JsonFileKeyValueAdapter",
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueAdapter",
]
