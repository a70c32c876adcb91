"""
Error taxonomy for the plugin storage service.

Only programmer errors (bad names, non-JSON values, bad settings) and a total
backend failure ever reach callers. Per-operation storage failures are caught
and logged at the table façade instead (see `plugin_store.table`).
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PluginStoreError(Exception):
    """Base class carrying a stable error code and structured data."""

    default_code = "STORE_000"

    def __init__(self, message: str, *, code: Optional[str] = None, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.data = data or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": self.data}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigurationError(PluginStoreError, ValueError):
    """Invalid namespace or table name, or `table()` on a scoped handle."""

    default_code = "STORE_CONFIG_001"


class SettingsValidationError(PluginStoreError, ValueError):
    """One or more environment settings are invalid."""

    default_code = "STORE_CONFIG_002"

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Invalid storage settings: " + "; ".join(errors), data={"errors": list(errors)})
        self.errors = list(errors)


class InvalidValueError(PluginStoreError, TypeError):
    """A value outside the JSON data model was handed to a write."""

    default_code = "STORE_VALUE_001"


class BackendResolutionError(PluginStoreError):
    """Every backend, including the file fallback, failed to open."""

    default_code = "STORE_BACKEND_001"

    def __init__(self, failures: Dict[str, str]) -> None:
        summary = ", ".join(f"{name}: {err}" for name, err in failures.items()) or "no candidates"
        super().__init__(f"No storage backend could be opened ({summary})", data={"failures": dict(failures)})
        self.failures = dict(failures)


def classify_operation_error(exc: BaseException) -> Dict[str, Any]:
    """
    Describe an adapter-level failure for a log record.

    Adapter errors come straight from the driver (sqlalchemy, pymongo, sqlite3,
    OSError, json) so we only record the type and message.
    """
    if isinstance(exc, PluginStoreError):
        return exc.to_dict()
    return {
        "code": "STORE_OP_001",
        "error_type": f"{type(exc).__module__}.{type(exc).__name__}",
        "message": str(exc),
    }
