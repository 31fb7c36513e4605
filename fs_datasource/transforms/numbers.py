"""
Number parsing transform for fs-datasource.

Delimited-text payloads arrive as all-string cells. When numeric values
are needed (series datapoints, or the ``coerce_numbers`` setting), cells
are converted here.

Columns go through ``pd.to_numeric(errors='coerce')``; cells it cannot turn
into a finite number (un-parseable text, empty cells, "nan", "inf") keep
their original strings, so a single bad cell never loses data or fails the
parse. ``coerce_value`` is the single-cell equivalent used for series
datapoints.
"""

from __future__ import annotations

import math
from typing import Any

import pandas as pd


def coerce_value(value: Any) -> Any:
    """Convert a single cell to ``int`` or ``float`` when it looks numeric.

    Non-string values are returned unchanged. Strings are stripped of
    surrounding whitespace first; empty strings and non-finite values
    ("nan", "inf") are returned as the original string.
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if not text:
        return value
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return value
    if not math.isfinite(number):
        return value
    return number


def parse_numbers(df: pd.DataFrame, key_columns: list[str] | None = None) -> pd.DataFrame:
    """Coerce numeric-looking cells in every non-key column.

    Args:
        df: Input DataFrame, typically all-string from a text parser.
        key_columns: Column names to leave untouched (identifiers).

    Returns:
        A copy of *df* with numeric cells converted. Columns keep
        ``object`` dtype when they mix numbers and strings.
    """
    df = df.copy()
    key_set = set(key_columns or [])
    value_cols = [c for c in df.columns if c not in key_set]

    for col in value_cols:
        series = df[col]
        cleaned = series.astype(str).str.strip()
        numeric = pd.to_numeric(cleaned, errors="coerce")
        parsed = numeric.notna() & (numeric.abs() != float("inf"))

        result = series.astype(object)
        if parsed.any():
            # Re-parse only the numeric cells so an all-integer subset stays int
            result[parsed] = pd.to_numeric(cleaned[parsed]).astype(object)
        df[col] = result

    return df
