"""
Binary columnar parser (Parquet, Arrow IPC).

The container is recognised from its magic bytes rather than the
content-type, since object stores often serve both as
``application/octet-stream``:

- ``PAR1``   -> Parquet (``pyarrow.parquet``)
- ``ARROW1`` -> Arrow IPC file / Feather v2 (``pyarrow.ipc.open_file``)
- otherwise  -> Arrow IPC stream (``pyarrow.ipc.open_stream``)

Schema field order becomes column order.
"""

from __future__ import annotations

import logging

import pyarrow as pa
import pyarrow.ipc as ipc
import pyarrow.parquet as pq

from fs_datasource.exceptions import FormatError
from fs_datasource.fs.base import Response
from fs_datasource.parsers.base import BaseParser
from fs_datasource.table import Table

logger = logging.getLogger(__name__)

_PARQUET_MAGIC = b"PAR1"
_ARROW_FILE_MAGIC = b"ARROW1"


def _read_arrow_table(content: bytes) -> pa.Table:
    buf = pa.BufferReader(content)
    if content.startswith(_PARQUET_MAGIC):
        return pq.read_table(buf)
    if content.startswith(_ARROW_FILE_MAGIC):
        return ipc.open_file(buf).read_all()
    return ipc.open_stream(buf).read_all()


class ColumnarParser(BaseParser):
    name = "columnar"

    def parse(self, response: Response, content_type: str | None = None) -> Table:
        content = response.content
        if not content:
            raise FormatError(f"Empty columnar payload: {response.path}")
        try:
            arrow_table = _read_arrow_table(content)
        except (pa.ArrowException, OSError) as e:
            raise FormatError(f"Cannot decode columnar data from {response.path}: {e}") from e

        columns = list(arrow_table.column_names)
        values = [col.to_pylist() for col in arrow_table.columns]
        rows = [list(r) for r in zip(*values)]

        logger.info(
            "Parsed columnar %s: %d rows x %d columns",
            response.path, arrow_table.num_rows, len(columns),
        )
        return Table(columns=columns, rows=rows)
