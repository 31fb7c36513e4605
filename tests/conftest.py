"""
Shared test fixtures for fs-datasource tests.

``FakeFileSystem`` is an in-memory backend that records every fetch, so
tests can assert on cache behaviour (how many times the backend was
actually hit). The process-wide cache is reset around every test.
"""

from __future__ import annotations

import threading
import time

import pytest

from fs_datasource.cache import reset_default_cache
from fs_datasource.config import DatasourceSettings
from fs_datasource.datasource import FileSystemDatasource
from fs_datasource.exceptions import NotFoundError
from fs_datasource.fs.base import DirectoryInfo, FileSystem, Response

# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------
SIMPLE_CSV = "name,value\na,1\nb,2\n"
CHANGES_CSV = "key,x,y\nx,1,10\ny,1,20\nx,2,15\n"
COLUMNAR_JSON = '{"name": ["a", "b"], "value": [1, 2]}'


class FakeFileSystem(FileSystem):
    """In-memory backend: ``files`` maps path -> (payload, content_type)."""

    kind = "fake"

    def __init__(self, files=None, delay: float = 0.0, settings=None) -> None:
        super().__init__(settings or DatasourceSettings(type="fake"))
        self.files = dict(files or {})
        self.delay = delay
        self.fetch_calls: list[tuple[str, bool]] = []
        self.list_calls: list[str] = []
        self._lock = threading.Lock()
        self.list_error: Exception | None = None

    def fetch(self, path: str, binary: bool = False) -> Response:
        with self._lock:
            self.fetch_calls.append((path, binary))
        if self.delay:
            time.sleep(self.delay)
        if path not in self.files:
            raise NotFoundError(f"File not found: {path}")
        payload, content_type = self.files[path]
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        headers = {"Content-Type": content_type} if content_type else {}
        return Response(path=path, content=payload, headers=headers, binary=binary)

    def list(self, path: str = "") -> DirectoryInfo:
        self.list_calls.append(path)
        if self.list_error is not None:
            raise self.list_error
        return DirectoryInfo(path=path, files=sorted(self.files))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _fresh_default_cache():
    reset_default_cache()
    yield
    reset_default_cache()


@pytest.fixture()
def fake_fs() -> FakeFileSystem:
    return FakeFileSystem({
        "simple.csv": (SIMPLE_CSV, "text/csv"),
        "changes.csv": (CHANGES_CSV, "text/csv"),
        "columnar.json": (COLUMNAR_JSON, "application/json"),
    })


@pytest.fixture()
def make_fs():
    """The FakeFileSystem class, for tests that build their own backend."""
    return FakeFileSystem


@pytest.fixture()
def make_datasource():
    """Factory: build a datasource around a given backend and settings."""

    def _make(fs: FileSystem, cache=None, **settings) -> FileSystemDatasource:
        cfg = DatasourceSettings(type="fake", **settings)
        return FileSystemDatasource(cfg, cache=cache, filesystem=fs)

    return _make


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs against files in tmp_path)",
    )
