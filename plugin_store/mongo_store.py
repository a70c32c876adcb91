"""
MongoDB store implementation.

One collection per plugin table; documents look like
    {"_id": <key>, "value": <native JSON document>, "ts": <unix ms>}
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import CollectionInvalid

from observability import redact_url

from .base import StoreAdapter, now_ms
from .values import JsonValue

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "plugin_store"


class MongoStore(StoreAdapter):
    """
    MongoDB-backed plugin tables.

    Values are stored as native documents rather than JSON text. The database
    is the one named in the connection string, else `plugin_store`.

    Requires: pymongo
    """

    name = "mongo"

    def __init__(self, url: str, *, timeout_ms: int = 5000) -> None:
        self._url = url
        self._timeout_ms = timeout_ms
        self._client: Optional[MongoClient] = None
        self._db: Optional[Database] = None

    def open(self) -> None:
        self._client = MongoClient(
            self._url,
            serverSelectionTimeoutMS=self._timeout_ms,
            connectTimeoutMS=self._timeout_ms,
        )
        # MongoClient connects lazily; force a round trip so a bad URL fails here.
        self._client.admin.command("ping")
        self._db = self._client.get_default_database(default=DEFAULT_DATABASE)
        logger.info("Connected to MongoDB at %s (database %s)", redact_url(self._url), self._db.name)

    @property
    def db(self) -> Database:
        if self._db is None:
            raise RuntimeError("mongo store is not open")
        return self._db

    def ensure_table(self, table: str) -> None:
        if self.db.list_collection_names(filter={"name": table}):
            return
        try:
            self.db.create_collection(table)
        except CollectionInvalid:
            # Created concurrently by another handle or process.
            pass

    def get(self, table: str, key: str) -> Optional[JsonValue]:
        doc = self.db[table].find_one({"_id": key}, {"value": 1})
        return doc.get("value") if doc else None

    def set(self, table: str, key: str, value: JsonValue) -> None:
        self.db[table].update_one(
            {"_id": key},
            {"$set": {"value": value, "ts": now_ms()}},
            upsert=True,
        )

    def delete(self, table: str, key: str) -> None:
        self.db[table].delete_one({"_id": key})

    def get_all(self, table: str) -> Dict[str, JsonValue]:
        return {doc["_id"]: doc.get("value") for doc in self.db[table].find({}, {"value": 1})}

    def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            self._client.admin.command("ping")
            return True
        except Exception:
            return False

    def close(self) -> None:
        if self._client is None:
            return
        try:
            self._client.close()
        except Exception as e:
            logger.error("MongoDB close error: %s", e)
        finally:
            self._client = None
            self._db = None
