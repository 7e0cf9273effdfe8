"""
In-Memory Storage Implementation

Keeps keys in a plain dict. Used by tests and for throwaway sessions;
nothing survives the process. Sharing one instance between two stores
simulates reopening the app on the same device.
"""

from typing import Iterable, Optional

from expense_notes.services.storage.interface import KeyValueAdapter


class InMemoryKeyValueAdapter(KeyValueAdapter):
    """Dict-backed key-value adapter."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_all(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the raw stored values, for inspection."""
        return dict(self._data)
