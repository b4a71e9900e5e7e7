"""
JSON Slot Store

A persistent key-value store: one JSON file per slot key, each holding
a serialized list of records.

TRADEOFFS:
- Every operation reads and rewrites the whole list (fine at personal scale)
- No indexing, so insertion order is exactly what callers see
- Malformed content reads as an empty list instead of failing
- Calls block (disk I/O, lock waits up to lock_timeout); async callers
  run them in a worker thread

Writes are atomic (temp file + replace) and serialized across processes
with a file lock per slot.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Callable, Union

import structlog
from filelock import FileLock, Timeout

from finance_tracker.services.storage.interface import LocalStoreError


_SLOT_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")

Records = list[dict]


class SlotStore:
    """Whole-list JSON persistence, one file per slot."""

    def __init__(self, directory: Union[str, Path], lock_timeout: float = 5.0):
        self._directory = Path(directory)
        self._lock_timeout = lock_timeout
        self._locks: dict[str, FileLock] = {}
        self._logger = structlog.get_logger(__name__)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        if not _SLOT_KEY.match(key):
            raise ValueError(f"Invalid slot key: {key!r}")
        return self._directory / f"{key}.json"

    def _lock(self, key: str) -> FileLock:
        if key not in self._locks:
            lock_path = self.path_for(key).with_suffix(".json.lock")
            self._locks[key] = FileLock(str(lock_path), timeout=self._lock_timeout)
        return self._locks[key]

    def _ensure(self, key: str) -> Path:
        """Lazily initialize a missing slot to an empty list."""
        path = self.path_for(key)
        if not path.exists():
            self.write(key, [])
        return path

    def read(self, key: str) -> Records:
        """
        Read the full list stored in a slot.

        Invalid JSON, a non-list document or non-object entries
        are treated as absent data and logged.
        """
        path = self._ensure(key)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self._logger.warning("slot_malformed", slot=key, error=str(e))
            return []
        except OSError as e:
            raise LocalStoreError(f"Failed to read slot {key}: {e}") from e

        if not isinstance(data, list):
            self._logger.warning("slot_malformed", slot=key, error=f"expected list, got {type(data).__name__}")
            return []

        records = [item for item in data if isinstance(item, dict)]
        if len(records) != len(data):
            self._logger.warning("slot_entries_skipped", slot=key, skipped=len(data) - len(records))
        return records

    def write(self, key: str, records: Records) -> None:
        """Replace the full list stored in a slot."""
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with self._lock(key):
                fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{key}.", suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as handle:
                        json.dump(records, handle, ensure_ascii=False, indent=2)
                    os.replace(tmp_name, path)
                except BaseException:
                    if os.path.exists(tmp_name):
                        os.unlink(tmp_name)
                    raise
        except Timeout as e:
            raise LocalStoreError(f"Timed out waiting for lock on slot {key}") from e
        except OSError as e:
            raise LocalStoreError(f"Failed to write slot {key}: {e}") from e

    def mutate(self, key: str, change: Callable[[Records], Records]) -> Records:
        """
        Read-modify-write a slot under its lock.

        Returns the list that was written.
        """
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with self._lock(key):
                records = change(self.read(key))
                self.write(key, records)
        except Timeout as e:
            raise LocalStoreError(f"Timed out waiting for lock on slot {key}") from e
        except OSError as e:
            raise LocalStoreError(f"Failed to update slot {key}: {e}") from e
        return records

    def clear(self, key: str) -> None:
        self.write(key, [])
