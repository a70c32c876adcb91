"""
The table façade handed to plugins.

    db = service.create_store("attendance")      # physical table plugin_attendance
    records = db.table("records")                 # physical table plugin_attendance_records

    records.set("user:1", {"streak": 3})
    records.get("user:1")                         # {"streak": 3}
    records.get_or_default("user:2", {})          # {}
    records.patch("user:1", {"date": "2024-05-01"})

Storage is best-effort infrastructure: a failing backend call is logged and
turned into a safe default (None, {}, or a silent no-op) so it never aborts
the calling plugin. Only programmer errors raise: bad table names, a non-JSON
value, or `table()` on a handle that is already scoped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from observability import build_log_context, log_event

from .base import StoreAdapter
from .errors import ConfigurationError, InvalidValueError, classify_operation_error
from .naming import physical_name, validate_identifier
from .values import JsonObject, JsonValue, ensure_json_value

if TYPE_CHECKING:
    from .service import StorageService

logger = logging.getLogger(__name__)


def _check_key(key: object) -> str:
    if not isinstance(key, str):
        raise InvalidValueError(f"record keys must be strings (got {type(key).__name__})", data={"key": repr(key)})
    return key


class PluginStore:
    """
    Key-value handle bound to one physical table.

    The physical table is provisioned on the first operation, once per
    handle (and again only if the service re-resolves its backend).
    """

    def __init__(self, service: "StorageService", namespace: str, table_name: Optional[str] = None) -> None:
        self._service = service
        self._namespace = namespace
        self._table_name = table_name
        self._physical = physical_name(namespace, table_name, prefix=service.settings.table_prefix)
        self._tag = f"[plugin_store:{self._physical}]"
        # Adapter this table was provisioned against; None until first use.
        self._ready_for: Optional[StoreAdapter] = None

    # Read-only metadata
    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def table_name(self) -> Optional[str]:
        return self._table_name

    @property
    def physical_table(self) -> str:
        return self._physical

    @property
    def is_root(self) -> bool:
        return self._table_name is None

    def __repr__(self) -> str:
        return f"<PluginStore {self._physical}>"

    def _adapter(self) -> StoreAdapter:
        adapter = self._service.adapter()
        if self._ready_for is not adapter:
            adapter.ensure_table(self._physical)
            self._ready_for = adapter
            log_event(
                "store_table_ready",
                ctx=build_log_context(component="table"),
                data={"table": self._physical, "backend": adapter.name},
                level=logging.DEBUG,
            )
        return adapter

    def _log_failure(self, operation: str, key: Optional[str], exc: Exception) -> None:
        backend = self._service.backend_name or "unresolved"
        target = f'("{key}")' if key is not None else "()"
        logger.error(
            "%s %s%s failed on %s backend: %s",
            self._tag,
            operation,
            target,
            backend,
            exc,
            extra={
                "physical_table": self._physical,
                "key": key,
                "operation": operation,
                "backend": backend,
                "error": classify_operation_error(exc),
            },
        )

    # Core CRUD
    def get(self, key: str) -> Optional[JsonValue]:
        """Value stored under `key`, or None."""
        _check_key(key)
        try:
            return self._adapter().get(self._physical, key)
        except Exception as e:
            self._log_failure("get", key, e)
            return None

    def set(self, key: str, value: JsonValue) -> None:
        """
        Save a value. Must be JSON-representable; anything else raises
        InvalidValueError before touching the backend.
        """
        _check_key(key)
        ensure_json_value(value)
        try:
            self._adapter().set(self._physical, key, value)
        except Exception as e:
            self._log_failure("set", key, e)

    def delete(self, key: str) -> None:
        """Hard-delete a key. Deleting a missing key is a no-op."""
        _check_key(key)
        try:
            self._adapter().delete(self._physical, key)
        except Exception as e:
            self._log_failure("delete", key, e)

    def get_all(self) -> Dict[str, JsonValue]:
        try:
            return self._adapter().get_all(self._physical)
        except Exception as e:
            self._log_failure("get_all", None, e)
            return {}

    # Convenience helpers
    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def get_or_default(self, key: str, default: Any) -> Any:
        value = self.get(key)
        return default if value is None else value

    def patch(self, key: str, partial: JsonObject) -> None:
        """
        Read, shallow-merge `partial`, write back.

        Not atomic: two concurrent patches of the same key race and the
        last write wins for the whole value. A missing or non-object current
        value is treated as {}.
        """
        if not isinstance(partial, dict):
            raise InvalidValueError(f"patch expects an object (got {type(partial).__name__})")
        ensure_json_value(partial)
        existing = self.get(key)
        if not isinstance(existing, dict):
            existing = {}
        self.set(key, {**existing, **partial})

    # Sub-table factory (root store only)
    def table(self, name: str) -> "PluginStore":
        """
        Return a handle for the namespace's `name` table, stored in its own
        physical table (`<prefix><namespace>_<name>`).
        """
        if not self.is_root:
            raise ConfigurationError(
                f"{self._tag} Cannot call .table() on an already-scoped table. "
                f"Call it on the root store instead: create_store('{self._namespace}').table('{name}')",
                data={"namespace": self._namespace, "table": self._table_name},
            )
        validate_identifier(name, "table name")
        return PluginStore(self._service, self._namespace, name)
