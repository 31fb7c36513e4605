"""
Query orchestration for fs-datasource.

``FileSystemDatasource`` ties the pieces together:

    targets -> template resolution -> cache or fetch -> format detection
            -> parse -> (optional) changes transform -> flattened response

Targets are resolved concurrently on a thread pool; the shared
``TableCache`` provides locking and per-path single-flight, so two
targets (or two queries) naming the same uncached path trigger one
upstream fetch. Results are reassembled in target order, then series
order within a target, regardless of completion order.

Failure semantics are controlled by ``DatasourceSettings.fail_fast``:
- True (default): the first failing target, in target order, fails the
  whole query. No partial results.
- False: failing targets are reported in ``QueryResponse.errors`` and
  the successful ones are still returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from string import Template
from typing import Any

from fs_datasource.cache import TableCache, default_cache
from fs_datasource.config import DatasourceSettings, QueryOptions, QueryTarget
from fs_datasource.detect import detect_format, extension_of, is_binary
from fs_datasource.exceptions import FetchError, FsDatasourceError
from fs_datasource.format_registry import FormatRule, load_all_formats
from fs_datasource.fs.base import FileSystem
from fs_datasource.fs.registry import create_filesystem
from fs_datasource.parsers import AvroParser, ColumnarParser, DelimitedTextParser, JSONParser
from fs_datasource.parsers.base import BaseParser
from fs_datasource.table import SeriesEntry, Table, process_changes

logger = logging.getLogger(__name__)

TemplateResolver = Callable[[str, dict[str, Any]], str]

# Placeholder values for the ad-hoc filter endpoints
_PLACEHOLDER_TAGS = ["aaa", "bbb", "ccc"]


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class TargetError:
    """A target that failed in a partial-failure query."""
    path: str
    error_type: str
    message: str
    ref_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "refId": self.ref_id,
            "path": self.path,
            "error": self.error_type,
            "message": self.message,
        }


@dataclass
class QueryResponse:
    """Flattened query output.

    Attributes:
        data: Tables (targets without ``changes``) and series entries
            (targets with ``changes``), in target order.
        errors: Failed targets; only populated when ``fail_fast`` is off.
    """
    data: list[Table | SeriesEntry] = field(default_factory=list)
    errors: list[TargetError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"data": [item.to_dict() for item in self.data]}
        if self.errors:
            result["errors"] = [e.to_dict() for e in self.errors]
        return result


@dataclass
class TestResult:
    """Outcome of ``FileSystemDatasource.test_datasource()``."""
    __test__ = False  # not a pytest test class

    status: str
    message: str


# ---------------------------------------------------------------------------
# Template resolution
# ---------------------------------------------------------------------------

def _variable_value(value: Any) -> str:
    # Scoped variables arrive either bare or wrapped as {"text": ..., "value": ...}
    if isinstance(value, dict) and "value" in value:
        value = value["value"]
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def replace_variables(path: str, scoped_vars: dict[str, Any]) -> str:
    """Substitute ``$name`` / ``${name}`` references in *path*.

    Unknown variables are left as written.
    """
    values = {name: _variable_value(v) for name, v in scoped_vars.items()}
    return Template(path).safe_substitute(values)


# ---------------------------------------------------------------------------
# Datasource
# ---------------------------------------------------------------------------

class FileSystemDatasource:
    """Reads tables from a storage backend, with caching.

    Created from ``DatasourceSettings`` (see ``fs_datasource.open_datasource``).
    The backend is chosen once, from ``settings.type``; an unknown type
    yields a backend that fails on use rather than an exception here.

    Attributes:
        settings: The validated settings.
        fs: The storage backend.
        cache: The table cache. Datasources share the process-wide cache
            unless one is injected or the settings define a cache policy.
        parsers: Parser instances keyed by ``FormatRule.parser``.
    """

    def __init__(
        self,
        settings: DatasourceSettings,
        cache: TableCache | None = None,
        template_resolver: TemplateResolver | None = None,
        formats: list[FormatRule] | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        self.settings = settings
        self.interval = settings.time_interval
        self.fs = filesystem if filesystem is not None else create_filesystem(settings)
        self.formats = load_all_formats() if formats is None else formats
        self.template_resolver = template_resolver or replace_variables

        if cache is not None:
            self.cache = cache
        elif settings.cache_max_entries is not None or settings.cache_ttl_seconds is not None:
            self.cache = TableCache(
                max_entries=settings.cache_max_entries,
                ttl_seconds=settings.cache_ttl_seconds,
            )
        else:
            self.cache = default_cache()

        self.parsers: dict[str, BaseParser] = {
            "delimited": DelimitedTextParser(
                delimiter=settings.delimiter,
                coerce_numbers=settings.coerce_numbers,
            ),
            "json": JSONParser(),
            "columnar": ColumnarParser(),
            "avro": AvroParser(),
        }

    def __repr__(self) -> str:
        return f"FileSystemDatasource(type={self.settings.type!r}, fs={self.fs!r})"

    def get_file_system(self) -> FileSystem:
        return self.fs

    # -- Query --------------------------------------------------------------

    def get_time_filter(self, options: QueryOptions | None = None) -> str:
        """Value bound to the built-in ``$range`` template variable."""
        return "YYYYMMDD"

    def query(self, options: QueryOptions | dict[str, Any]) -> QueryResponse:
        """Resolve every target and flatten the results.

        Orchestration:
          1. Drop targets without a path; return early if none remain.
          2. Substitute template variables in each path.
          3. Resolve all targets concurrently (cache or fetch + parse,
             then the changes transform where requested).
          4. Flatten in target order.

        Args:
            options: A ``QueryOptions`` or a dict validating as one.

        Returns:
            A ``QueryResponse``.

        Raises:
            FsDatasourceError: With ``fail_fast`` on, the error of the first
                failing target (in target order).
        """
        if not isinstance(options, QueryOptions):
            options = QueryOptions.model_validate(options)

        targets = [t for t in options.targets if t.path]
        if not targets:
            logger.debug("query(): no targets with a path, nothing to fetch")
            return QueryResponse()

        scoped_vars = dict(options.scoped_vars)
        scoped_vars["range"] = {"value": self.get_time_filter(options)}
        resolved = [(t, self.template_resolver(t.path, scoped_vars)) for t in targets]

        logger.info(
            "query(): %d target(s): %s", len(resolved), [path for _, path in resolved]
        )

        workers = min(self.settings.max_workers, len(resolved))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._resolve_target, t, path) for t, path in resolved]

        response = QueryResponse()
        for (target, path), future in zip(resolved, futures):
            try:
                items = future.result()
            except FsDatasourceError as e:
                if self.settings.fail_fast:
                    raise
                logger.warning("Target %s failed: %s", path, e)
                response.errors.append(
                    TargetError(
                        path=path,
                        error_type=type(e).__name__,
                        message=str(e),
                        ref_id=target.ref_id,
                    )
                )
                continue
            response.data.extend(items)
        return response

    def _resolve_target(self, target: QueryTarget, path: str) -> list[Table | SeriesEntry]:
        table = self.fetch_or_use_cached(path)
        if not target.changes:
            return [table]
        info = process_changes(table)
        return [
            SeriesEntry(target=name, alias=name, datapoints=info.series[name])
            for name in info.order
        ]

    def fetch_or_use_cached(self, path: str) -> Table:
        """Parsed table for *path*, from the cache when present."""
        return self.cache.get_or_load(path, lambda: self._fetch_and_parse(path))

    def _fetch_and_parse(self, path: str) -> Table:
        extension = extension_of(path)
        binary = is_binary(path, self.formats)

        res = self.fs.fetch(path, binary)
        content_type = res.header("content-type")
        rule = detect_format(content_type, extension, self.formats)
        parser = self.parsers[rule.parser]

        logger.info(
            "Parsing %s as %s (content-type=%s, binary=%s)",
            path, rule.format_name, content_type, binary,
        )
        if isinstance(parser, DelimitedTextParser) and rule.delimiter:
            return parser.parse(res, content_type, delimiter=rule.delimiter)
        return parser.parse(res, content_type)

    # -- Connectivity check -------------------------------------------------

    def test_datasource(self) -> TestResult:
        """List the backend root and report the outcome as a status object.

        Failures are never raised: they come back as ``status="error"``.
        A request that got no response at all gets a generic message,
        since the underlying exception carries no useful detail for users.
        """
        try:
            info = self.fs.list("")
        except FsDatasourceError as e:
            logger.warning("Error testing filesystem %r: %s", self.fs, e)
            if isinstance(e, FetchError) and e.request_failed:
                return TestResult(
                    status="error",
                    message="Error making HTTP request. Check the logs for more information",
                )
            return TestResult(status="error", message=f"Error: {e}")
        return TestResult(status="success", message=f"Root Contains {info.count} Files")

    # -- Placeholder endpoints ----------------------------------------------

    def get_tag_keys(self, options: dict[str, Any] | None = None) -> list[str]:
        logger.debug("get_tag_keys(%s)", options)
        return list(_PLACEHOLDER_TAGS)

    def get_tag_values(self, options: dict[str, Any] | None = None) -> list[str]:
        logger.debug("get_tag_values(%s)", options)
        return list(_PLACEHOLDER_TAGS)

    def metric_find_query(self, query: str, options: dict[str, Any] | None = None) -> list[Any]:
        logger.debug("metric_find_query(%r, %s)", query, options)
        return []
