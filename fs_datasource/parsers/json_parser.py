"""
JSON parser.

Accepted document shapes:

- Array of row objects: ``[{"name": "a", "value": 1}, ...]``. Column
  names are the union of object keys in first-seen order; a key missing
  from a row yields ``None`` in that cell.
- Columnar object: ``{"name": ["a", "b"], "value": [1, 2]}``. Every
  value must be an array and all arrays the same length.
- Table document: ``{"columns": [...], "rows": [[...], ...]}``, as
  produced by ``Table.to_dict()``. ``"data"`` is accepted in place of
  ``"rows"``, and an ``"index"`` key is ignored, so pandas
  ``to_json(orient="split")`` output reads as a table.

Values keep their JSON types.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fs_datasource.exceptions import FormatError
from fs_datasource.fs.base import Response
from fs_datasource.parsers.base import BaseParser
from fs_datasource.table import Table

logger = logging.getLogger(__name__)


def _from_records(records: list[Any], path: str) -> Table:
    columns: list[str] = []
    known: set[str] = set()
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise FormatError(
                f"JSON array element {i} in {path} is {type(record).__name__}, expected an object"
            )
        for key in record:
            if key not in known:
                known.add(key)
                columns.append(key)
    rows = [[record.get(c) for c in columns] for record in records]
    return Table(columns=columns, rows=rows)


def _from_columns(doc: dict[str, Any], path: str) -> Table:
    lengths = set()
    for name, values in doc.items():
        if not isinstance(values, list):
            raise FormatError(
                f"Column '{name}' in {path} is {type(values).__name__}, expected an array"
            )
        lengths.add(len(values))
    if len(lengths) > 1:
        raise FormatError(f"Columns in {path} have different lengths: {sorted(lengths)}")
    columns = list(doc.keys())
    rows = [list(r) for r in zip(*doc.values())]
    return Table(columns=columns, rows=rows)


def _table_document_rows(doc: dict[str, Any]) -> str | None:
    """Key holding the rows if *doc* is a table document, else None."""
    keys = set(doc) - {"type", "index"}
    for rows_key in ("rows", "data"):
        if keys == {"columns", rows_key}:
            rows = doc[rows_key]
            if (
                isinstance(doc["columns"], list)
                and isinstance(rows, list)
                and all(isinstance(r, list) for r in rows)
            ):
                return rows_key
    return None


class JSONParser(BaseParser):
    name = "json"

    def parse(self, response: Response, content_type: str | None = None) -> Table:
        try:
            doc = json.loads(response.text)
        except ValueError as e:
            raise FormatError(f"Malformed JSON in {response.path}: {e}") from e

        if isinstance(doc, list):
            table = _from_records(doc, response.path)
        elif isinstance(doc, dict):
            rows_key = _table_document_rows(doc)
            if rows_key is not None:
                table = Table(columns=doc["columns"], rows=doc[rows_key])
            else:
                table = _from_columns(doc, response.path)
        else:
            raise FormatError(
                f"Unrecognised JSON shape in {response.path}: top level is "
                f"{type(doc).__name__}, expected an array of objects or an object of arrays"
            )

        logger.info(
            "Parsed JSON %s: %d rows x %d columns",
            response.path, len(table.rows), len(table.columns),
        )
        return table
