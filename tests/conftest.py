from __future__ import annotations

import pytest

from plugin_store.base import StoreAdapter
from plugin_store.service import StorageService
from plugin_store.settings import StoreSettings


class BrokenAdapter(StoreAdapter):
    """Adapter whose every operation fails, like a backend that went away."""

    name = "broken"

    def __init__(self):
        self.calls = []

    def _fail(self, op):
        self.calls.append(op)
        raise ConnectionError(f"{op}: connection reset by peer")

    def ensure_table(self, table):
        self.calls.append("ensure_table")

    def get(self, table, key):
        self._fail("get")

    def set(self, table, key, value):
        self._fail("set")

    def delete(self, table, key):
        self._fail("delete")

    def get_all(self, table):
        self._fail("get_all")

    def ping(self):
        return False

    def close(self):
        pass


@pytest.fixture
def file_service(tmp_path):
    service = StorageService(StoreSettings(data_dir=str(tmp_path)))
    yield service
    service.close()


@pytest.fixture
def sqlite_service(tmp_path):
    service = StorageService(StoreSettings(sqlite_path=str(tmp_path / "bot.db"), data_dir=str(tmp_path / "files")))
    yield service
    service.close()


@pytest.fixture(params=["file", "sqlite"])
def service(request, file_service, sqlite_service):
    """A real service on each locally available backend."""
    return file_service if request.param == "file" else sqlite_service


@pytest.fixture
def broken_adapter():
    return BrokenAdapter()
