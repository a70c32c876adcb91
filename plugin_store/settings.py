"""
Environment-driven settings for the storage service.

Backend selection variables (checked in this priority order):
- MONGO_URL:    MongoDB connection string
- POSTGRES_URL: PostgreSQL connection string (TLS via its sslmode parameter)
- MYSQL_URL:    MySQL connection string
- DB_URL:       SQLite database file (path or sqlite:/// URL)
With none of them set, records go to one JSON file per table under
PLUGIN_STORE_DATA_DIR.

Tuning:
- PLUGIN_STORE_TABLE_PREFIX (default "plugin_")
- PLUGIN_STORE_CONNECT_TIMEOUT_MS (default 5000)
- PLUGIN_STORE_POOL_SIZE (default 5)
- PLUGIN_STORE_LOG_LEVEL (default: leave logging alone)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from .errors import SettingsValidationError
from .naming import is_valid_identifier

DEFAULT_DATA_DIR = "data"
DEFAULT_TABLE_PREFIX = "plugin_"
DEFAULT_CONNECT_TIMEOUT_MS = 5000
DEFAULT_POOL_SIZE = 5


def _clean(env: Mapping[str, str], name: str) -> Optional[str]:
    raw = env.get(name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def _positive_int(env: Mapping[str, str], name: str, default: int, errors: List[str]) -> int:
    raw = _clean(env, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        errors.append(f"{name} must be an integer (got {raw!r})")
        return default
    if value <= 0:
        errors.append(f"{name} must be positive (got {value})")
        return default
    return value


@dataclass(frozen=True)
class StoreSettings:
    mongo_url: Optional[str] = None
    postgres_url: Optional[str] = None
    mysql_url: Optional[str] = None
    sqlite_path: Optional[str] = None
    data_dir: str = DEFAULT_DATA_DIR
    table_prefix: str = DEFAULT_TABLE_PREFIX
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS
    pool_size: int = DEFAULT_POOL_SIZE
    log_level: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "StoreSettings":
        """
        Read settings from `env` (defaults to os.environ).

        All problems are collected and raised together as one
        SettingsValidationError.
        """
        env = os.environ if env is None else env
        errors: List[str] = []

        # An explicitly empty prefix is allowed, so don't run it through _clean.
        prefix = env.get("PLUGIN_STORE_TABLE_PREFIX")
        if prefix is None:
            prefix = DEFAULT_TABLE_PREFIX
        prefix = prefix.strip()
        if prefix and not is_valid_identifier(prefix):
            errors.append(f"PLUGIN_STORE_TABLE_PREFIX must contain only letters, digits, or underscores (got {prefix!r})")
            prefix = DEFAULT_TABLE_PREFIX

        log_level = _clean(env, "PLUGIN_STORE_LOG_LEVEL")
        if log_level is not None:
            log_level = log_level.upper()
            if not isinstance(logging.getLevelName(log_level), int):
                errors.append(f"PLUGIN_STORE_LOG_LEVEL is not a logging level (got {log_level!r})")
                log_level = None

        settings = cls(
            mongo_url=_clean(env, "MONGO_URL"),
            postgres_url=_clean(env, "POSTGRES_URL"),
            mysql_url=_clean(env, "MYSQL_URL"),
            sqlite_path=_clean(env, "DB_URL"),
            data_dir=_clean(env, "PLUGIN_STORE_DATA_DIR") or DEFAULT_DATA_DIR,
            table_prefix=prefix,
            connect_timeout_ms=_positive_int(env, "PLUGIN_STORE_CONNECT_TIMEOUT_MS", DEFAULT_CONNECT_TIMEOUT_MS, errors),
            pool_size=_positive_int(env, "PLUGIN_STORE_POOL_SIZE", DEFAULT_POOL_SIZE, errors),
            log_level=log_level,
        )
        if errors:
            raise SettingsValidationError(errors)
        return settings
