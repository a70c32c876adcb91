"""
JSON-file store, the fallback when no database is configured.

Each plugin table gets its own file:
    ./data/plugin_attendance.json
    ./data/plugin_attendance_records.json

Every write rewrites the whole file, so this backend is fine for low
write-concurrency workloads only, and must not be shared by several processes.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections import defaultdict
from typing import Dict, Optional

from .base import StoreAdapter
from .values import JsonValue

logger = logging.getLogger(__name__)


class FileStore(StoreAdapter):
    name = "file"

    def __init__(self, data_dir: str = "data") -> None:
        self._data_dir = os.path.abspath(data_dir)
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)

    @property
    def data_dir(self) -> str:
        return self._data_dir

    def file_path(self, table: str) -> str:
        return os.path.join(self._data_dir, f"{table}.json")

    def _table_lock(self, table: str) -> threading.Lock:
        with self._guard:
            return self._locks[table]

    def _read(self, table: str) -> Dict[str, JsonValue]:
        path = self.file_path(table)
        if not os.path.exists(path):
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Unreadable store file %s, treating as empty: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Store file %s does not hold a JSON object, treating as empty", path)
            return {}
        return data

    def _write(self, table: str, data: Dict[str, JsonValue]) -> None:
        path = self.file_path(table)
        fd, tmp = tempfile.mkstemp(prefix=f".{table}.", suffix=".tmp", dir=self._data_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def open(self) -> None:
        os.makedirs(self._data_dir, exist_ok=True)
        if not os.access(self._data_dir, os.W_OK):
            raise PermissionError(f"Data directory {self._data_dir} is not writable")
        logger.info("Using JSON file store in %s", self._data_dir)

    def ensure_table(self, table: str) -> None:
        # The file is created on first write.
        pass

    def get(self, table: str, key: str) -> Optional[JsonValue]:
        with self._table_lock(table):
            return self._read(table).get(key)

    def set(self, table: str, key: str, value: JsonValue) -> None:
        with self._table_lock(table):
            data = self._read(table)
            data[key] = value
            self._write(table, data)

    def delete(self, table: str, key: str) -> None:
        with self._table_lock(table):
            data = self._read(table)
            if key not in data:
                return
            del data[key]
            self._write(table, data)

    def get_all(self, table: str) -> Dict[str, JsonValue]:
        with self._table_lock(table):
            return self._read(table)

    def ping(self) -> bool:
        return os.path.isdir(self._data_dir) and os.access(self._data_dir, os.W_OK)

    def close(self) -> None:
        pass
