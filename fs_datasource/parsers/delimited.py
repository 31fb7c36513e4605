"""
Delimited-text parser (CSV, TSV).

The first line is the header; every cell is kept as a string unless
``coerce_numbers`` is enabled, in which case numeric-looking cells are
converted and everything else passes through untouched.
"""

from __future__ import annotations

import io
import logging

import pandas as pd

from fs_datasource.exceptions import FormatError
from fs_datasource.fs.base import Response
from fs_datasource.parsers.base import BaseParser
from fs_datasource.table import Table
from fs_datasource.transforms.numbers import parse_numbers

logger = logging.getLogger(__name__)


class DelimitedTextParser(BaseParser):
    name = "delimited"

    def __init__(self, delimiter: str = ",", coerce_numbers: bool = False) -> None:
        self.delimiter = delimiter
        self.coerce_numbers = coerce_numbers

    def parse(
        self,
        response: Response,
        content_type: str | None = None,
        delimiter: str | None = None,
    ) -> Table:
        sep = delimiter or self.delimiter
        text = response.text
        if not text.strip():
            raise FormatError(f"Empty delimited-text payload: {response.path}")

        try:
            df = pd.read_csv(
                io.StringIO(text),
                sep=sep,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
            raise FormatError(f"Cannot parse delimited text from {response.path}: {e}") from e

        df.columns = [str(c).strip() for c in df.columns]
        # Short rows leave NaN behind even with keep_default_na=False
        df = df.fillna("")
        if self.coerce_numbers:
            df = parse_numbers(df)

        logger.info(
            "Parsed delimited text %s: %d rows x %d columns",
            response.path, len(df), len(df.columns),
        )
        return Table.from_dataframe(df)
