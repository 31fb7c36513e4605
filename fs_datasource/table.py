"""
Table model for fs-datasource.

Every parser produces a ``Table``: an ordered list of unique column names
plus an ordered list of rows, each row holding exactly one value per
column. The model is deliberately plain (lists, not DataFrames) so cached
entries are cheap to hand out and easy to serialise into a query
response; ``from_dataframe`` / ``to_dataframe`` bridge to pandas where
the parsers and callers need it.

The "changes" transform (``process_changes``) reshapes a table of change
events into named series and lives here because ``SeriesInfo`` is part
of the same model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from fs_datasource.exceptions import FormatError, TransformError
from fs_datasource.transforms.numbers import coerce_value

logger = logging.getLogger(__name__)


@dataclass
class Table:
    """Uniform row/column dataset.

    Attributes:
        columns: Column names, unique, in display order.
        rows: Rows aligned to ``columns``. Zero rows is valid.
    """

    columns: list[str] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.columns = list(self.columns)
        self.rows = [list(r) for r in self.rows]

        if len(set(self.columns)) != len(self.columns):
            duplicates = sorted({c for c in self.columns if self.columns.count(c) > 1})
            raise FormatError(f"Duplicate column names: {duplicates}")

        width = len(self.columns)
        for i, row in enumerate(self.rows):
            if len(row) != width:
                raise FormatError(
                    f"Row {i} has {len(row)} values, expected {width} "
                    f"(columns: {self.columns[:10]})"
                )

    def __len__(self) -> int:
        return len(self.rows)

    def column_index(self, name: str) -> int:
        """Position of column *name*; raises ``KeyError`` if absent."""
        try:
            return self.columns.index(name)
        except ValueError:
            raise KeyError(name) from None

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> Table:
        """Build a Table from a DataFrame; NaN/NA cells become ``None``."""
        columns = [str(c) for c in df.columns]
        values = df.astype(object).where(df.notna(), None)
        return cls(columns=columns, rows=values.values.tolist())

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=self.columns)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "table", "columns": list(self.columns), "rows": [list(r) for r in self.rows]}


@dataclass
class CachedTable:
    """A parsed table captured for one source path.

    Attributes:
        path: Source path (cache key).
        table: The parsed table.
        timestamp: Wall-clock capture time in milliseconds.
    """

    path: str
    table: Table
    timestamp: int


@dataclass
class SeriesInfo:
    """Named series derived from a change-events table.

    ``order`` lists each series name once, in first-seen order; ``series``
    maps the same names to their ``[x, y]`` datapoints.
    """

    order: list[str] = field(default_factory=list)
    series: dict[str, list[list[Any]]] = field(default_factory=dict)


@dataclass
class SeriesEntry:
    """One series in a query response."""

    target: str
    alias: str
    datapoints: list[list[Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "alias": self.alias,
            "datapoints": [list(p) for p in self.datapoints],
        }


def _resolve_column(table: Table, name: str | None, default_pos: int, role: str) -> int:
    if name is None:
        if default_pos >= len(table.columns):
            raise TransformError(
                f"Changes transform needs at least 3 columns (key, x, y); "
                f"table has {len(table.columns)}: {table.columns}"
            )
        return default_pos
    try:
        return table.column_index(name)
    except KeyError:
        raise TransformError(
            f"{role} column '{name}' not found. Columns: {table.columns}"
        ) from None


def process_changes(
    table: Table,
    key_column: str | None = None,
    x_column: str | None = None,
    y_column: str | None = None,
) -> SeriesInfo:
    """Group change-event rows into named ``[x, y]`` series.

    Each row contributes one datapoint to the series named by its key
    cell. Series appear in ``order`` in the order their key is first
    seen, so the result is stable for a given row order.

    Args:
        table: Change events, one per row.
        key_column: Column naming the series. Defaults to the first column.
        x_column: Column supplying x values. Defaults to the second column.
        y_column: Column supplying y values. Defaults to the third column.

    Returns:
        SeriesInfo with x/y values numerically coerced where possible.

    Raises:
        TransformError: If a named column is absent, or the table has
            fewer than three columns when defaults are used.
    """
    key_idx = _resolve_column(table, key_column, 0, "Key")
    x_idx = _resolve_column(table, x_column, 1, "X")
    y_idx = _resolve_column(table, y_column, 2, "Y")

    info = SeriesInfo()
    for row in table.rows:
        name = "" if row[key_idx] is None else str(row[key_idx])
        points = info.series.get(name)
        if points is None:
            points = []
            info.series[name] = points
            info.order.append(name)
        points.append([coerce_value(row[x_idx]), coerce_value(row[y_idx])])

    logger.debug(
        "process_changes: %d rows -> %d series", len(table.rows), len(info.order)
    )
    return info
