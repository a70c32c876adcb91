"""
Shared SQLAlchemy plumbing for the networked relational backends.

Every plugin table has the same minimal schema:
    key   primary key   record key ('user:123', 'config', ...)
    value text          JSON-serialised value
    ts    bigint        last-write unix timestamp (ms)
"""

from __future__ import annotations

import json
import logging
from typing import Dict, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.pool import QueuePool

from observability import redact_url

from .base import StoreAdapter, now_ms
from .values import JsonValue

logger = logging.getLogger(__name__)


def _decode(raw: Optional[str]) -> JsonValue:
    if raw is None:
        return None
    return json.loads(raw)


class SqlAlchemyStore(StoreAdapter):
    """
    Base class for relational stores reached through a SQLAlchemy engine.

    Subclasses provide identifier quoting and the dialect-specific DDL and
    upsert statements. Connection pooling uses QueuePool; each operation
    checks out a connection, so writers to different keys never share one.
    """

    def __init__(self, url: str, *, pool_size: int = 5, connect_timeout_ms: int = 5000) -> None:
        self._url = self.normalize_url(url)
        self._pool_size = pool_size
        self._connect_timeout = max(1, connect_timeout_ms // 1000)
        self._engine: Optional[Engine] = None

    @staticmethod
    def normalize_url(url: str) -> str:
        return url

    # Dialect hooks
    def quote(self, identifier: str) -> str:
        raise NotImplementedError

    def create_table_sql(self, table: str) -> str:
        raise NotImplementedError

    def upsert_sql(self, table: str) -> str:
        raise NotImplementedError

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError(f"{self.name} store is not open")
        return self._engine

    def open(self) -> None:
        self._engine = create_engine(
            self._url,
            poolclass=QueuePool,
            pool_size=self._pool_size,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,
            pool_pre_ping=True,
            connect_args={"connect_timeout": self._connect_timeout},
        )
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Connected to %s at %s", self.name, redact_url(self._url))

    def _has_table(self, table: str) -> bool:
        return inspect(self.engine).has_table(table)

    def ensure_table(self, table: str) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text(self.create_table_sql(table)))
                conn.commit()
        except DBAPIError:
            # Two connections racing on CREATE TABLE IF NOT EXISTS can still
            # collide in the catalog; the loser is fine if the table is there.
            if self._has_table(table):
                return
            raise

    def get(self, table: str, key: str) -> Optional[JsonValue]:
        q = self.quote
        with self.engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {q('value')} FROM {q(table)} WHERE {q('key')} = :key"),
                {"key": key},
            ).fetchone()
        return _decode(row[0]) if row else None

    def set(self, table: str, key: str, value: JsonValue) -> None:
        with self.engine.connect() as conn:
            conn.execute(
                text(self.upsert_sql(table)),
                {"key": key, "value": json.dumps(value), "ts": now_ms()},
            )
            conn.commit()

    def delete(self, table: str, key: str) -> None:
        q = self.quote
        with self.engine.connect() as conn:
            conn.execute(text(f"DELETE FROM {q(table)} WHERE {q('key')} = :key"), {"key": key})
            conn.commit()

    def get_all(self, table: str) -> Dict[str, JsonValue]:
        q = self.quote
        with self.engine.connect() as conn:
            rows = conn.execute(text(f"SELECT {q('key')}, {q('value')} FROM {q(table)}")).fetchall()
        return {row[0]: _decode(row[1]) for row in rows}

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                return True
        except Exception:
            return False

    def close(self) -> None:
        if self._engine is None:
            return
        try:
            self._engine.dispose()
        except Exception as e:
            logger.error("%s close error: %s", self.name, e)
        finally:
            self._engine = None
