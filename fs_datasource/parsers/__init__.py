"""
Parsers sub-package for fs-datasource.

Contains format-specific parsers that turn a backend ``Response`` into
a uniform ``Table``.

Design: Strategy Pattern
- base.py defines the BaseParser ABC (protocol).
- delimited.py implements DelimitedTextParser (CSV/TSV).
- json_parser.py implements JSONParser (row objects or columnar object).
- columnar.py implements ColumnarParser (Parquet and Arrow IPC via pyarrow).
- avro_parser.py implements AvroParser (Avro container files via fastavro).

The detector (detect.py) picks a FormatRule from the content-type and
extension; the rule's ``parser`` field names which of these runs.
"""

from fs_datasource.parsers.avro_parser import AvroParser
from fs_datasource.parsers.base import BaseParser
from fs_datasource.parsers.columnar import ColumnarParser
from fs_datasource.parsers.delimited import DelimitedTextParser
from fs_datasource.parsers.json_parser import JSONParser

__all__ = ["AvroParser", "BaseParser", "ColumnarParser", "DelimitedTextParser", "JSONParser"]
