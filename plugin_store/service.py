"""
The storage service: one per process, shared by every plugin.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from observability import configure_logging

from .base import StoreAdapter
from .naming import validate_identifier
from .resolver import resolve_adapter
from .settings import StoreSettings
from .table import PluginStore

logger = logging.getLogger(__name__)


class StorageService:
    """
    Owns the single backend adapter and mints plugin stores.

    The adapter is resolved on first use, not at construction, so building a
    service and creating stores never performs I/O. Concurrent first callers
    wait on the same resolution and all get the same adapter.
    """

    def __init__(self, settings: Optional[StoreSettings] = None, *, adapter: Optional[StoreAdapter] = None) -> None:
        self._settings = settings or StoreSettings()
        self._lock = threading.Lock()
        self._adapter: Optional[StoreAdapter] = adapter

    @classmethod
    def from_env(cls) -> "StorageService":
        settings = StoreSettings.from_env()
        configure_logging(settings.log_level)
        return cls(settings)

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    @property
    def backend_name(self) -> Optional[str]:
        adapter = self._adapter
        return adapter.name if adapter is not None else None

    def adapter(self) -> StoreAdapter:
        adapter = self._adapter
        if adapter is not None:
            return adapter
        with self._lock:
            if self._adapter is None:
                self._adapter = resolve_adapter(self._settings)
                logger.info("Plugin storage backend: %s", self._adapter.name)
            return self._adapter

    def create_store(self, namespace: str) -> PluginStore:
        """
        Create the root store for a plugin namespace.

        `namespace` must be non-empty and contain only letters, digits and
        underscores; anything else raises ConfigurationError right away.
        """
        validate_identifier(namespace, "namespace")
        return PluginStore(self, namespace)

    def close(self) -> None:
        with self._lock:
            adapter, self._adapter = self._adapter, None
        if adapter is not None:
            adapter.close()

    def __enter__(self) -> "StorageService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
