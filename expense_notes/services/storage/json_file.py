"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON object file is the on-device backend.
All keys live in one file, so every write rewrites the file. We write
to a temporary file in the same directory and os.replace() it over
the original, which keeps each write all-or-nothing.

TRADEOFFS:
- Every set() rewrites the whole file (fine at personal scale)
- Not safe for several processes writing at once (one app instance only)
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Union

import structlog

from expense_notes.services.storage.interface import (
    KeyValueAdapter,
    StorageError,
    StorageUnavailable,
)


logger = structlog.get_logger(__name__)


class JsonFileKeyValueAdapter(KeyValueAdapter):
    """
    Key-value adapter backed by one JSON file.

    Blocking file I/O runs in a worker thread so callers on the
    event loop are never blocked by the disk.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Load the whole file. A missing file is an empty store."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageUnavailable(f"Cannot read {self._path}: {e}") from e

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageUnavailable(f"Corrupt storage file {self._path}: {e}") from e

        if not isinstance(data, dict) or not all(
            isinstance(v, str) for v in data.values()
        ):
            raise StorageUnavailable(
                f"Corrupt storage file {self._path}: expected an object of strings"
            )
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        """Atomically replace the file with the given mapping."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, ensure_ascii=False)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}") from e

        logger.debug("storage_file_written", path=str(self._path), keys=len(data))

    def _set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _remove_all(self, keys: list[str]) -> None:
        data = self._read_all()
        removed = [k for k in keys if data.pop(k, None) is not None]
        if removed:
            self._write_all(data)

    async def get(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def remove_all(self, keys: Iterable[str]) -> None:
        await asyncio.to_thread(self._remove_all, list(keys))
