"""
Backend selection.

Candidates are tried in a fixed priority order and the first one that opens
wins:

    MONGO_URL -> POSTGRES_URL -> MYSQL_URL -> DB_URL -> JSON files

A configured backend that fails to open (driver missing, bad URL, server
down) is closed, logged and skipped. The file store always comes last.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Union

from observability import build_log_context, log_event

from .base import StoreAdapter
from .errors import BackendResolutionError
from .settings import StoreSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MongoConfig:
    url: str
    timeout_ms: int = 5000
    name: str = "mongo"


@dataclass(frozen=True)
class PostgresConfig:
    url: str
    pool_size: int = 5
    timeout_ms: int = 5000
    name: str = "postgres"


@dataclass(frozen=True)
class MySQLConfig:
    url: str
    pool_size: int = 5
    timeout_ms: int = 5000
    name: str = "mysql"


@dataclass(frozen=True)
class SQLiteConfig:
    path: str
    timeout_ms: int = 5000
    name: str = "sqlite"


@dataclass(frozen=True)
class FileConfig:
    data_dir: str = "data"
    name: str = "file"


BackendConfig = Union[MongoConfig, PostgresConfig, MySQLConfig, SQLiteConfig, FileConfig]


def candidate_configs(settings: StoreSettings) -> List[BackendConfig]:
    """Configured backends in priority order, always ending with the file store."""
    timeout = settings.connect_timeout_ms
    candidates: List[BackendConfig] = []
    if settings.mongo_url:
        candidates.append(MongoConfig(settings.mongo_url, timeout_ms=timeout))
    if settings.postgres_url:
        candidates.append(PostgresConfig(settings.postgres_url, pool_size=settings.pool_size, timeout_ms=timeout))
    if settings.mysql_url:
        candidates.append(MySQLConfig(settings.mysql_url, pool_size=settings.pool_size, timeout_ms=timeout))
    if settings.sqlite_path:
        candidates.append(SQLiteConfig(settings.sqlite_path, timeout_ms=timeout))
    candidates.append(FileConfig(settings.data_dir))
    return candidates


def build_adapter(config: BackendConfig) -> StoreAdapter:
    """
    Map a backend config to an unopened adapter.

    Driver modules are imported here so a missing optional driver only
    fails that one candidate.
    """
    if isinstance(config, MongoConfig):
        from .mongo_store import MongoStore

        return MongoStore(config.url, timeout_ms=config.timeout_ms)

    elif isinstance(config, PostgresConfig):
        from .postgres_store import PostgresStore

        return PostgresStore(config.url, pool_size=config.pool_size, connect_timeout_ms=config.timeout_ms)

    elif isinstance(config, MySQLConfig):
        from .mysql_store import MySQLStore

        return MySQLStore(config.url, pool_size=config.pool_size, connect_timeout_ms=config.timeout_ms)

    elif isinstance(config, SQLiteConfig):
        from .sqlite_store import SQLiteStore

        return SQLiteStore(config.path, timeout_ms=config.timeout_ms)

    elif isinstance(config, FileConfig):
        from .file_store import FileStore

        return FileStore(config.data_dir)

    raise TypeError(f"Unknown backend config: {config!r}")


def _discard(adapter: StoreAdapter) -> None:
    try:
        adapter.close()
    except Exception as e:
        logger.warning("Error closing %s adapter after failed open: %s", adapter.name, e)


def resolve_adapter(settings: StoreSettings) -> StoreAdapter:
    """
    Open the first working backend.

    Raises BackendResolutionError only if every candidate, including the
    file store, failed.
    """
    ctx = build_log_context(component="resolver")
    failures: Dict[str, str] = {}
    for config in candidate_configs(settings):
        adapter = None
        try:
            adapter = build_adapter(config)
            adapter.open()
        except Exception as e:
            failures[config.name] = f"{type(e).__name__}: {e}"
            logger.warning("%s backend failed, falling back: %s", config.name, e)
            log_event("store_backend_failed", ctx=ctx, data={"backend": config.name, "error": str(e)}, level=logging.WARNING)
            if adapter is not None:
                _discard(adapter)
            continue
        log_event("store_backend_resolved", ctx=ctx, data={"backend": adapter.name, "skipped": list(failures)})
        return adapter
    raise BackendResolutionError(failures)
