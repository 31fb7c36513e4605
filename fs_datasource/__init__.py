"""
fs-datasource: read tabular files from pluggable storage backends.

Public API surface:

- ``open_datasource(settings, ...)`` -- **recommended entry point**.
  Polymorphic: accepts a ``DatasourceSettings``, a plain dict, or a
  path to a settings YAML file, and returns a ``FileSystemDatasource``.

- ``FileSystemDatasource.query(...)`` -- fetch (or reuse from cache),
  parse, and optionally reshape each target into named series.

- ``FileSystemDatasource.test_datasource()`` -- connectivity check that
  reports a status object instead of raising.

Supported backends (``type`` setting): ``local``, ``nginx``, ``s3``.
Supported formats: CSV/TSV, JSON, Parquet, Arrow IPC, Avro.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fs_datasource.cache import TableCache, default_cache, reset_default_cache
from fs_datasource.config import (
    DatasourceSettings,
    QueryOptions,
    QueryTarget,
    load_settings,
    save_settings,
)
from fs_datasource.datasource import FileSystemDatasource, QueryResponse, TestResult
from fs_datasource.table import SeriesEntry, SeriesInfo, Table, process_changes

__all__ = [
    "open_datasource",
    "FileSystemDatasource",
    "DatasourceSettings",
    "QueryOptions",
    "QueryTarget",
    "QueryResponse",
    "TestResult",
    "Table",
    "SeriesInfo",
    "SeriesEntry",
    "TableCache",
    "process_changes",
    "default_cache",
    "reset_default_cache",
    "load_settings",
    "save_settings",
]

logger = logging.getLogger(__name__)


def open_datasource(
    settings: DatasourceSettings | dict[str, Any] | str | Path,
    cache: TableCache | None = None,
) -> FileSystemDatasource:
    """Single entry point: build a datasource from settings in any form.

    Args:
        settings: A ``DatasourceSettings``, a dict validating as one, or a
            path to a settings YAML file (``.yaml`` / ``.yml``).
        cache: Optional cache to use instead of the process-wide one.

    Returns:
        A ``FileSystemDatasource``.

    Raises:
        FileNotFoundError: If a settings path does not exist.
        ConfigValidationError: If a settings file is empty.
        pydantic.ValidationError: If the settings fail validation.

    Examples::

        ds = fs_datasource.open_datasource({"type": "local", "path": "data/"})
        resp = ds.query({"targets": [{"path": "prices.csv"}]})

        ds = fs_datasource.open_datasource("settings/nginx.yaml")
        print(ds.test_datasource().message)
    """
    if isinstance(settings, (str, Path)):
        logger.info("open_datasource() -- loading settings from %s", settings)
        settings = load_settings(settings)
    elif isinstance(settings, dict):
        settings = DatasourceSettings.model_validate(settings)
    return FileSystemDatasource(settings, cache=cache)
