"""
Adapter interface shared by every storage backend.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Dict, Optional

from .values import JsonValue


def now_ms() -> int:
    """Unix time in milliseconds, the `ts` column of every record."""
    return int(time.time() * 1000)


class StoreAdapter(ABC):
    """
    Abstract base class for storage backends.

    One adapter serves every plugin table in the process. `table` is always a
    physical name from `plugin_store.naming`, so it only ever contains
    [a-z0-9_] and is safe to interpolate as an identifier.

    Implementations:
    - raise from `open()` when the backend is misconfigured or unreachable
    - return None from `get()` for a missing key (never raise for that)
    - treat `delete()` of a missing key as a no-op
    - let every other driver error propagate; the table façade logs it
    """

    name: str = "abstract"

    def open(self) -> None:
        """Connect and verify the backend is reachable."""

    @abstractmethod
    def ensure_table(self, table: str) -> None:
        """Create the physical table if absent. Must be idempotent."""
        pass

    @abstractmethod
    def get(self, table: str, key: str) -> Optional[JsonValue]:
        """Get a value by key."""
        pass

    @abstractmethod
    def set(self, table: str, key: str, value: JsonValue) -> None:
        """Insert or replace a value, stamping a fresh ts."""
        pass

    @abstractmethod
    def delete(self, table: str, key: str) -> None:
        """Hard-delete a key."""
        pass

    @abstractmethod
    def get_all(self, table: str) -> Dict[str, JsonValue]:
        """Snapshot of every key/value pair in a table."""
        pass

    # Health check
    @abstractmethod
    def ping(self) -> bool:
        """Check if the backend is healthy."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close connections."""
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
