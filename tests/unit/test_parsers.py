"""
Unit tests for the format parsers (fs_datasource.parsers).

Payloads are built inline: text for the delimited and JSON parsers, and
in-memory Parquet / Arrow buffers (written with pyarrow) for the
columnar parser, and Avro containers (written with fastavro) for the
Avro parser.
"""

from __future__ import annotations

import io

import fastavro
import pandas as pd
import pyarrow as pa
import pyarrow.ipc as ipc
import pyarrow.parquet as pq
import pytest

from fs_datasource.exceptions import FormatError
from fs_datasource.fs.base import Response
from fs_datasource.parsers import AvroParser, ColumnarParser, DelimitedTextParser, JSONParser
from fs_datasource.table import Table


def _text_response(text: str, path: str = "data.csv") -> Response:
    return Response(path=path, content=text.encode("utf-8"))


def _arrow_sample() -> pa.Table:
    return pa.table({"name": ["a", "b"], "value": [1, 2]})


def _parquet_bytes(table: pa.Table) -> bytes:
    sink = io.BytesIO()
    pq.write_table(table, sink)
    return sink.getvalue()


def _ipc_file_bytes(table: pa.Table) -> bytes:
    sink = pa.BufferOutputStream()
    with ipc.new_file(sink, table.schema) as writer:
        writer.write_table(table)
    return sink.getvalue().to_pybytes()


def _ipc_stream_bytes(table: pa.Table) -> bytes:
    sink = pa.BufferOutputStream()
    with ipc.new_stream(sink, table.schema) as writer:
        writer.write_table(table)
    return sink.getvalue().to_pybytes()


EVENT_SCHEMA = {
    "type": "record",
    "name": "Event",
    "fields": [
        {"name": "name", "type": "string"},
        {"name": "value", "type": "long"},
        {"name": "note", "type": ["null", "string"], "default": None},
    ],
}


def _avro_bytes(schema, records) -> bytes:
    sink = io.BytesIO()
    fastavro.writer(sink, fastavro.parse_schema(schema), records)
    return sink.getvalue()


# ---------------------------------------------------------------------------
# Delimited text
# ---------------------------------------------------------------------------

class TestDelimitedTextParser:
    """Tests for DelimitedTextParser."""

    def test_simple_csv(self):
        table = DelimitedTextParser().parse(_text_response("name,value\na,1\nb,2\n"))
        assert table == Table(columns=["name", "value"], rows=[["a", "1"], ["b", "2"]])

    def test_header_only_gives_zero_rows(self):
        table = DelimitedTextParser().parse(_text_response("name,value\n"))
        assert table.columns == ["name", "value"]
        assert table.rows == []

    def test_empty_payload_raises(self):
        with pytest.raises(FormatError, match="Empty"):
            DelimitedTextParser().parse(_text_response("  \n"))

    def test_values_stay_strings(self):
        table = DelimitedTextParser().parse(_text_response("code,value\n007,1.50\n"))
        assert table.rows == [["007", "1.50"]]

    def test_short_rows_padded_with_empty_string(self):
        table = DelimitedTextParser().parse(_text_response("a,b,c\n1,2\n"))
        assert table.rows == [["1", "2", ""]]

    def test_header_whitespace_stripped(self):
        table = DelimitedTextParser().parse(_text_response(" a , b \n1,2\n"))
        assert table.columns == ["a", "b"]

    def test_bom_is_ignored(self):
        response = Response(path="bom.csv", content="\ufeffname,value\na,1\n".encode("utf-8"))
        table = DelimitedTextParser().parse(response)
        assert table.columns == ["name", "value"]

    def test_custom_delimiter(self):
        table = DelimitedTextParser(delimiter=";").parse(_text_response("a;b\n1;2\n"))
        assert table.rows == [["1", "2"]]

    def test_delimiter_override_per_call(self):
        table = DelimitedTextParser().parse(_text_response("a\tb\n1\t2\n"), delimiter="\t")
        assert table.columns == ["a", "b"]

    def test_coerce_numbers(self):
        parser = DelimitedTextParser(coerce_numbers=True)
        table = parser.parse(_text_response("name,value\na,1\nb,oops\nc,2.5\n"))
        assert table.rows == [["a", 1], ["b", "oops"], ["c", 2.5]]

    def test_too_many_fields_raises(self):
        with pytest.raises(FormatError, match="Cannot parse"):
            DelimitedTextParser().parse(_text_response("a,b\n1,2\n3,4,5,6\n"))


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

class TestJSONParser:
    """Tests for JSONParser."""

    def test_columnar_object(self):
        table = JSONParser().parse(_text_response('{"name":["a","b"],"value":[1,2]}', "d.json"))
        assert table == Table(columns=["name", "value"], rows=[["a", 1], ["b", 2]])

    def test_row_objects(self):
        doc = '[{"name": "a", "value": 1}, {"name": "b", "value": 2}]'
        table = JSONParser().parse(_text_response(doc, "d.json"))
        assert table.columns == ["name", "value"]
        assert table.rows == [["a", 1], ["b", 2]]

    def test_row_objects_union_of_keys(self):
        doc = '[{"a": 1}, {"b": 2, "a": 3}, {"c": 4}]'
        table = JSONParser().parse(_text_response(doc, "d.json"))
        assert table.columns == ["a", "b", "c"]
        assert table.rows == [[1, None, None], [3, 2, None], [None, None, 4]]

    def test_table_document(self):
        doc = '{"type": "table", "columns": ["a", "b"], "rows": [[1, 2]]}'
        table = JSONParser().parse(_text_response(doc, "d.json"))
        assert table == Table(columns=["a", "b"], rows=[[1, 2]])

    def test_split_document_with_data_key(self):
        doc = '{"columns": ["name", "value"], "data": [["a", 1], ["b", 2]]}'
        table = JSONParser().parse(_text_response(doc, "d.json"))
        assert table == Table(columns=["name", "value"], rows=[["a", 1], ["b", 2]])

    def test_pandas_split_orient(self):
        """pandas to_json(orient="split") adds an index, which is dropped."""
        df = pd.DataFrame({"name": ["a", "b"], "value": [1, 2]})
        table = JSONParser().parse(_text_response(df.to_json(orient="split"), "d.json"))
        assert table.columns == ["name", "value"]
        assert table.rows == [["a", 1], ["b", 2]]

    def test_empty_array(self):
        table = JSONParser().parse(_text_response("[]", "d.json"))
        assert table.columns == []
        assert table.rows == []

    def test_columnar_with_empty_arrays(self):
        table = JSONParser().parse(_text_response('{"a": [], "b": []}', "d.json"))
        assert table.columns == ["a", "b"]
        assert table.rows == []

    def test_malformed_json_raises(self):
        with pytest.raises(FormatError, match="Malformed JSON"):
            JSONParser().parse(_text_response('{"a": [1,', "d.json"))

    def test_scalar_document_raises(self):
        with pytest.raises(FormatError, match="Unrecognised JSON shape"):
            JSONParser().parse(_text_response("42", "d.json"))

    def test_array_of_scalars_raises(self):
        with pytest.raises(FormatError, match="expected an object"):
            JSONParser().parse(_text_response("[1, 2]", "d.json"))

    def test_column_not_array_raises(self):
        with pytest.raises(FormatError, match="expected an array"):
            JSONParser().parse(_text_response('{"a": [1], "b": 2}', "d.json"))

    def test_unequal_column_lengths_raise(self):
        with pytest.raises(FormatError, match="different lengths"):
            JSONParser().parse(_text_response('{"a": [1, 2], "b": [3]}', "d.json"))


# ---------------------------------------------------------------------------
# Columnar (Parquet / Arrow)
# ---------------------------------------------------------------------------

class TestColumnarParser:
    """Tests for ColumnarParser."""

    def _parse(self, content: bytes, path: str = "d.parquet") -> Table:
        return ColumnarParser().parse(Response(path=path, content=content, binary=True))

    def test_parquet(self):
        table = self._parse(_parquet_bytes(_arrow_sample()))
        assert table == Table(columns=["name", "value"], rows=[["a", 1], ["b", 2]])

    def test_arrow_file(self):
        table = self._parse(_ipc_file_bytes(_arrow_sample()), "d.arrow")
        assert table.columns == ["name", "value"]
        assert table.rows == [["a", 1], ["b", 2]]

    def test_arrow_stream(self):
        table = self._parse(_ipc_stream_bytes(_arrow_sample()), "d.arrows")
        assert table.rows == [["a", 1], ["b", 2]]

    def test_schema_order_is_column_order(self):
        sample = pa.table({"z": [1], "a": [2], "m": [3]})
        table = self._parse(_parquet_bytes(sample))
        assert table.columns == ["z", "a", "m"]

    def test_zero_rows(self):
        empty = pa.table({"name": pa.array([], pa.string()), "value": pa.array([], pa.int64())})
        table = self._parse(_parquet_bytes(empty))
        assert table.columns == ["name", "value"]
        assert table.rows == []

    def test_nulls_become_none(self):
        sample = pa.table({"v": pa.array([1, None], pa.int64())})
        table = self._parse(_parquet_bytes(sample))
        assert table.rows == [[1], [None]]

    def test_corrupt_parquet_raises(self):
        content = _parquet_bytes(_arrow_sample())
        with pytest.raises(FormatError, match="Cannot decode"):
            self._parse(content[:20])

    def test_garbage_raises(self):
        with pytest.raises(FormatError, match="Cannot decode"):
            self._parse(b"this is not a columnar container")

    def test_empty_payload_raises(self):
        with pytest.raises(FormatError, match="Empty"):
            self._parse(b"")


# ---------------------------------------------------------------------------
# Avro
# ---------------------------------------------------------------------------

class TestAvroParser:
    """Tests for AvroParser."""

    def _parse(self, content: bytes, path: str = "events.avro") -> Table:
        return AvroParser().parse(Response(path=path, content=content, binary=True))

    def test_records(self):
        records = [
            {"name": "a", "value": 1, "note": None},
            {"name": "b", "value": 2, "note": "second"},
        ]
        table = self._parse(_avro_bytes(EVENT_SCHEMA, records))
        assert table == Table(
            columns=["name", "value", "note"],
            rows=[["a", 1, None], ["b", 2, "second"]],
        )

    def test_writer_schema_order_is_column_order(self):
        schema = {
            "type": "record",
            "name": "Point",
            "fields": [{"name": "z", "type": "int"}, {"name": "a", "type": "int"}],
        }
        table = self._parse(_avro_bytes(schema, [{"a": 1, "z": 2}]))
        assert table.columns == ["z", "a"]
        assert table.rows == [[2, 1]]

    def test_zero_rows(self):
        table = self._parse(_avro_bytes(EVENT_SCHEMA, []))
        assert table.columns == ["name", "value", "note"]
        assert table.rows == []

    def test_non_record_schema(self):
        table = self._parse(_avro_bytes("string", ["x", "y"]))
        assert table.columns == ["value"]
        assert table.rows == [["x"], ["y"]]

    def test_garbage_raises(self):
        with pytest.raises(FormatError, match="Cannot decode Avro"):
            self._parse(b"this is not an avro container")

    def test_empty_payload_raises(self):
        with pytest.raises(FormatError, match="Empty"):
            self._parse(b"")
