"""
Avro parser.

Reads Avro object container files with ``fastavro``. The schema travels
in the file header; the writer schema's record fields give the column
order, and a field absent from a decoded record yields ``None``.

A container whose schema is not a record (e.g. a file of plain
strings) is read as a single ``value`` column.
"""

from __future__ import annotations

import io
import logging
from typing import Any

import fastavro
from fastavro.schema import SchemaParseException

from fs_datasource.exceptions import FormatError
from fs_datasource.fs.base import Response
from fs_datasource.parsers.base import BaseParser
from fs_datasource.table import Table

logger = logging.getLogger(__name__)


def _record_fields(schema: Any) -> list[str] | None:
    if isinstance(schema, dict) and schema.get("type") == "record":
        return [f["name"] for f in schema.get("fields", [])]
    return None


class AvroParser(BaseParser):
    name = "avro"

    def parse(self, response: Response, content_type: str | None = None) -> Table:
        content = response.content
        if not content:
            raise FormatError(f"Empty Avro payload: {response.path}")
        try:
            reader = fastavro.reader(io.BytesIO(content))
            fields = _record_fields(reader.writer_schema)
            records = list(reader)
        except (ValueError, EOFError, SchemaParseException) as e:
            raise FormatError(f"Cannot decode Avro data from {response.path}: {e}") from e

        if fields is None:
            table = Table(columns=["value"], rows=[[r] for r in records])
        else:
            table = Table(columns=fields, rows=[[r.get(f) for f in fields] for r in records])

        logger.info(
            "Parsed Avro %s: %d rows x %d columns",
            response.path, len(table.rows), len(table.columns),
        )
        return table
