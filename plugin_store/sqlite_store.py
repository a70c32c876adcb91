"""
SQLite store implementation for single-host deployments.

The database file may also be opened by other code in the host process, so
the connection runs in WAL mode, which lets a second connection read and
write alongside this one.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
from typing import Dict, Optional

from .base import StoreAdapter, now_ms
from .values import JsonValue

logger = logging.getLogger(__name__)


def sqlite_path_from_url(url: str) -> str:
    """Accept either a bare path or a sqlite:/// URL."""
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            return url[len(prefix) :] or ":memory:"
    return url


class SQLiteStore(StoreAdapter):
    """
    One sqlite3 connection shared by all plugin tables.

    The connection is used from many threads (check_same_thread=False) and
    every statement runs under one lock.
    """

    name = "sqlite"

    def __init__(self, path: str, *, timeout_ms: int = 5000) -> None:
        self._path = sqlite_path_from_url(path)
        self._timeout = timeout_ms / 1000.0
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def path(self) -> str:
        return self._path

    def open(self) -> None:
        if self._path != ":memory:":
            parent = os.path.dirname(os.path.abspath(self._path))
            os.makedirs(parent, exist_ok=True)
        self._conn = sqlite3.connect(self._path, timeout=self._timeout, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL;")
        logger.info("Opened SQLite database at %s", self._path)

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("sqlite store is not open")
        return self._conn

    def ensure_table(self, table: str) -> None:
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS "{table}"(
                    key   TEXT    NOT NULL PRIMARY KEY,
                    value TEXT,
                    ts    INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.commit()

    def get(self, table: str, key: str) -> Optional[JsonValue]:
        with self._lock:
            row = self._get_conn().execute(f'SELECT value FROM "{table}" WHERE key = ?', (key,)).fetchone()
        if not row or row[0] is None:
            return None
        return json.loads(row[0])

    def set(self, table: str, key: str, value: JsonValue) -> None:
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                f"""
                INSERT INTO "{table}"(key, value, ts)
                VALUES(?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                  value=excluded.value,
                  ts=excluded.ts
                """,
                (key, json.dumps(value), now_ms()),
            )
            conn.commit()

    def delete(self, table: str, key: str) -> None:
        with self._lock:
            conn = self._get_conn()
            conn.execute(f'DELETE FROM "{table}" WHERE key = ?', (key,))
            conn.commit()

    def get_all(self, table: str) -> Dict[str, JsonValue]:
        with self._lock:
            rows = self._get_conn().execute(f'SELECT key, value FROM "{table}"').fetchall()
        return {k: (json.loads(v) if v is not None else None) for k, v in rows}

    def ping(self) -> bool:
        try:
            with self._lock:
                self._get_conn().execute("SELECT 1")
            return True
        except Exception:
            return False

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                self._conn.close()
            except Exception as e:
                logger.error("SQLite close error: %s", e)
            finally:
                self._conn = None
