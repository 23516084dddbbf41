"""JSON-file record store: one file per entity type, read-whole/write-whole."""

import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from stargazers.core.errors import StoreError
from stargazers.store.base import Record, RecordStore

logger = logging.getLogger(__name__)

# Seconds to wait for another process holding the store's lock file.
LOCK_TIMEOUT = 10


class JsonFileStore(RecordStore):
    """
    Records kept as a JSON array in a single file.

    Every operation re-reads the whole file. Read-modify-write cycles run under
    a thread lock plus a lock file next to the data file (``<file>.lock``), so
    concurrent requests in this process and in other processes (server workers,
    the CLIs) cannot both pass a uniqueness check against a stale read. Writes
    go to a temporary file in the same directory and are renamed over the target.

    With auto_increment_id, inserted records without an "id" get max(id) + 1.
    """

    def __init__(
        self,
        path: Path,
        name: str,
        unique_fields: Mapping[str, str],
        auto_increment_id: bool = False,
        lock_timeout: float = LOCK_TIMEOUT,
    ) -> None:
        super().__init__(name, unique_fields)
        self.path = Path(path)
        self.auto_increment_id = auto_increment_id
        self._lock = threading.Lock()
        self._file_lock = FileLock(f"{self.path}.lock", timeout=lock_timeout)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold the thread lock and the lock file for one read or read-modify-write."""
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._file_lock.acquire()
            except (Timeout, OSError) as e:
                logger.exception("Failed to lock %s at %s", self.name, self.path)
                raise StoreError(f"Failed to access {self.name}") from e
            try:
                yield
            finally:
                self._file_lock.release()

    def _read(self) -> list[Record]:
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.exception("Failed to read %s from %s", self.name, self.path)
            raise StoreError(f"Failed to read {self.name}") from e
        if not isinstance(data, list):
            logger.error("Store file %s does not contain a JSON array", self.path)
            raise StoreError(f"Failed to read {self.name}")
        return data

    def _write(self, records: list[Record]) -> None:
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.exception("Failed to write %s to %s", self.name, self.path)
            raise StoreError(f"Failed to save {self.name}") from e

    def _next_id(self, records: list[Record]) -> int:
        ids = [r["id"] for r in records if isinstance(r.get("id"), int)]
        return max(ids) + 1 if ids else 1

    def find_unique(self, field: str, value: Any) -> Record | None:
        with self._locked():
            records = self._read()
        return next((dict(r) for r in records if r.get(field) == value), None)

    def list_all(self) -> list[Record]:
        with self._locked():
            return [dict(r) for r in self._read()]

    def insert_if_absent(self, record: Mapping[str, Any]) -> Record:
        with self._locked():
            records = self._read()
            taken = self.find_conflict(records, record)
            if taken:
                raise self.conflict(taken)
            new_record = dict(record)
            if self.auto_increment_id and new_record.get("id") is None:
                new_record["id"] = self._next_id(records)
            records.append(new_record)
            self._write(records)
        return dict(new_record)

    def update_where(self, field: str, value: Any, patch: Mapping[str, Any]) -> Record | None:
        with self._locked():
            records = self._read()
            index = next((i for i, r in enumerate(records) if r.get(field) == value), None)
            if index is None:
                return None
            current = records[index]
            updated = {**current, **patch}
            taken = self.find_conflict(records, updated, skip=current)
            if taken:
                raise self.conflict(taken)
            records[index] = updated
            self._write(records)
        return dict(updated)

    def delete_where(self, field: str, value: Any) -> Record | None:
        with self._locked():
            records = self._read()
            index = next((i for i, r in enumerate(records) if r.get(field) == value), None)
            if index is None:
                return None
            removed = records.pop(index)
            self._write(records)
        return dict(removed)

    def ping(self) -> bool:
        try:
            with self._locked():
                self._read()
        except StoreError:
            return False
        return True
