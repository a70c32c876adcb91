"""
Per-plugin key-value storage on whichever backend the host is configured for.

Backends, picked once per process from the environment (first match wins):
- MONGO_URL    -> MongoDB collection   plugin_<namespace>[_<table>]
- POSTGRES_URL -> PostgreSQL table     plugin_<namespace>[_<table>]
- MYSQL_URL    -> MySQL table          plugin_<namespace>[_<table>]
- DB_URL       -> SQLite table         plugin_<namespace>[_<table>]
- (none)       -> ./data/plugin_<namespace>[_<table>].json
"""

from .base import StoreAdapter
from .errors import (
    BackendResolutionError,
    ConfigurationError,
    InvalidValueError,
    PluginStoreError,
    SettingsValidationError,
)
from .naming import physical_name, sanitize
from .service import StorageService
from .settings import StoreSettings
from .table import PluginStore
from .values import JsonValue

__all__ = [
    "BackendResolutionError",
    "ConfigurationError",
    "InvalidValueError",
    "JsonValue",
    "PluginStore",
    "PluginStoreError",
    "SettingsValidationError",
    "StorageService",
    "StoreAdapter",
    "StoreSettings",
    "physical_name",
    "sanitize",
]
