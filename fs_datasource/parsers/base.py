"""
Base parser protocol / ABC for fs-datasource.

All format-specific parsers implement this interface. The contract is:
parse() takes a backend Response and its content-type hint, and returns
a Table whose rows all match its column count. A source with a header
but no data rows yields a Table with columns and zero rows.

Why an ABC:
- Enforces a consistent interface across parsers.
- Makes it easy to add a format without touching the query layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fs_datasource.fs.base import Response
from fs_datasource.table import Table


class BaseParser(ABC):
    """Abstract base class for payload parsers."""

    name: str = ""

    @abstractmethod
    def parse(self, response: Response, content_type: str | None = None) -> Table:
        """Decode *response* into a Table.

        Args:
            response: Raw content returned by a backend.
            content_type: The response's content-type header, if any.

        Returns:
            The decoded Table.

        Raises:
            FormatError: If the payload is not valid for this format.
        """
