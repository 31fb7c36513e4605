"""
Demo script: check connectivity and run a query via the public API.

Usage:
    uv run python scripts/run_query.py SETTINGS.yaml PATH [PATH ...]
    uv run python scripts/run_query.py SETTINGS.yaml --changes PATH

Prints the connectivity check, then each returned table (shape and
first rows) or series (name and datapoint count). Pass --changes to
reshape every target into series. Running the same query twice shows
the second pass served from the cache.
"""

from __future__ import annotations

import logging
import sys

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_query")

PREVIEW_ROWS = 5


def _print_response(response) -> None:
    from fs_datasource import SeriesEntry

    for item in response.data:
        if isinstance(item, SeriesEntry):
            log.info("  Series '%s': %d datapoints", item.target, len(item.datapoints))
            continue
        log.info("  Table: %d rows x %d cols  %s", len(item.rows), len(item.columns), item.columns)
        for row in item.rows[:PREVIEW_ROWS]:
            log.info("    %s", row)
    for err in response.errors:
        log.warning("  FAILED %s: %s", err.path, err.message)


def main() -> None:
    import fs_datasource

    args = sys.argv[1:]
    if len(args) < 2:
        print(__doc__)
        sys.exit(2)

    changes = "--changes" in args
    args = [a for a in args if a != "--changes"]
    settings_path, paths = args[0], args[1:]

    ds = fs_datasource.open_datasource(settings_path)
    result = ds.test_datasource()
    log.info("Connectivity: %s (%s)", result.status, result.message)

    options = {"targets": [{"path": p, "changes": changes} for p in paths]}
    for attempt in (1, 2):
        log.info("=" * 70)
        log.info("Query pass %d", attempt)
        _print_response(ds.query(options))
        log.info("Cache: %d entries, %d hits, %d misses", len(ds.cache), ds.cache.hits, ds.cache.misses)


if __name__ == "__main__":
    main()
