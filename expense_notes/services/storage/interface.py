"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The store persists through a deliberately tiny
key-value contract rather than a record-level repository. This allows us to:
1. Run on anything that can map a string key to a string value
2. Use in-memory storage for testing
3. Swap a local file for Google Sheets without touching the store

The adapter is assumed crash-atomic per single-key write.
It provides no indexing and no querying; the store does that in memory.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional


class KeyValueAdapter(ABC):
    """
    Abstract interface for the persistence substrate.

    Any storage implementation (memory, file, Google Sheets, ...)
    must implement these methods.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove_all(self, keys: Iterable[str]) -> None:
        """
        Remove every given key. Keys that are absent are ignored.

        Raises:
            StorageError: If the removal fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailable(StorageError):
    """Storage backend unreachable, or its data could not be decoded."""
    pass
