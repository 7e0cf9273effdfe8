"""Import source package."""

from expense_notes.services.importer.source import (
    HttpImportSource,
    ImportFetchError,
    ImportSourceError,
    MalformedImportSource,
    extract_import_items,
)

__all__ = [
    "HttpImportSource",
    "ImportFetchError",
    "ImportSourceError",
    "MalformedImportSource",
    "extract_import_items",
]
