"""
Identifier validation and physical resource naming.

Every adapter receives names produced here, so the same logical table always
maps to the same table, collection or file name:

    physical_name("attendance")                             -> "attendance"
    physical_name("attendance", "records")                  -> "attendance_records"
    physical_name("attendance", "records", prefix="plugin_") -> "plugin_attendance_records"
"""

from __future__ import annotations

import re
from typing import Optional

from .errors import ConfigurationError

_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_]+")
_UNSAFE_RE = re.compile(r"[^a-z0-9_]")


def sanitize(name: str) -> str:
    """Lower-case `name` and replace anything outside [a-z0-9_] with `_`."""
    return _UNSAFE_RE.sub("_", name.lower())


def physical_name(namespace: str, table_name: Optional[str] = None, prefix: str = "") -> str:
    """
    Physical table name for a namespace and optional sub-table.

    `namespace` must be non-empty so the result is never an empty identifier.
    """
    if not namespace:
        raise ConfigurationError("namespace must be a non-empty string", data={"namespace": repr(namespace)})
    base = sanitize(prefix) + sanitize(namespace)
    if table_name:
        return f"{base}_{sanitize(table_name)}"
    return base


def is_valid_identifier(value: object) -> bool:
    return isinstance(value, str) and bool(_IDENTIFIER_RE.fullmatch(value))


def validate_identifier(value: object, what: str = "namespace") -> str:
    """Return `value` unchanged, or raise ConfigurationError."""
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{what} must be a non-empty string (got: {value!r})", data={what: repr(value)})
    if not _IDENTIFIER_RE.fullmatch(value):
        raise ConfigurationError(
            f'{what} "{value}" must contain only letters, digits, or underscores',
            data={what: value},
        )
    return value
