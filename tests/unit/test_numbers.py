"""
Unit tests for number parsing transform (fs_datasource.transforms.numbers).

Tests per-cell coercion and the DataFrame-wide helper using small
synthetic DataFrames.
"""

from __future__ import annotations

import pandas as pd
import pytest

from fs_datasource.transforms.numbers import coerce_value, parse_numbers


class TestCoerceValue:
    """Tests for coerce_value()."""

    def test_integer(self):
        assert coerce_value("42") == 42
        assert isinstance(coerce_value("42"), int)

    def test_negative_integer(self):
        assert coerce_value("-1234") == -1234

    def test_decimal(self):
        assert coerce_value("0.62") == pytest.approx(0.62)

    def test_whitespace_stripped(self):
        assert coerce_value("  25  ") == 25

    def test_non_numeric_passes_through(self):
        assert coerce_value("N/A") == "N/A"

    def test_empty_string_passes_through(self):
        assert coerce_value("") == ""

    def test_non_finite_passes_through(self):
        assert coerce_value("nan") == "nan"
        assert coerce_value("inf") == "inf"

    def test_non_string_unchanged(self):
        assert coerce_value(3.5) == 3.5
        assert coerce_value(None) is None


class TestParseNumbers:
    """Tests for parse_numbers()."""

    def _make_df(self, data: dict[str, list[str]]) -> pd.DataFrame:
        """Helper: build a DataFrame with all-string columns."""
        return pd.DataFrame(data).astype(str)

    def test_numeric_column(self):
        df = self._make_df({"name": ["a", "b"], "value": ["1", "2"]})
        result = parse_numbers(df)
        assert result["value"].tolist() == [1, 2]

    def test_mixed_column_keeps_bad_cells(self):
        """Un-parseable cells stay as strings instead of becoming NaN."""
        df = self._make_df({"value": ["1", "oops", "2.5"]})
        result = parse_numbers(df)
        assert result["value"].tolist() == [1, "oops", 2.5]

    def test_integer_cells_stay_int_beside_text(self):
        df = self._make_df({"value": ["1", "n/a", "3"]})
        result = parse_numbers(df)
        assert result["value"].tolist() == [1, "n/a", 3]
        assert isinstance(result["value"].iloc[0], int)

    def test_empty_and_non_finite_keep_text(self):
        df = self._make_df({"value": ["", "inf", "nan", " 7 "]})
        result = parse_numbers(df)
        assert result["value"].tolist() == ["", "inf", "nan", 7]

    def test_key_columns_untouched(self):
        df = self._make_df({"code": ["001", "002"], "value": ["1", "2"]})
        result = parse_numbers(df, key_columns=["code"])
        assert result["code"].tolist() == ["001", "002"]

    def test_does_not_mutate_input(self):
        df = self._make_df({"value": ["1"]})
        parse_numbers(df)
        assert df["value"].iloc[0] == "1"

    def test_empty_dataframe(self):
        df = pd.DataFrame({"value": pd.Series([], dtype=str)})
        result = parse_numbers(df)
        assert len(result) == 0
