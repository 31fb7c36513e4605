"""
FileSystem backend contract for fs-datasource.

A backend is anything that can ``fetch`` the raw content at a path and
``list`` the entries under a path. The query layer only ever talks to
this interface; concrete backends (local disk, NGINX JSON listings,
S3-compatible object storage) live in sibling modules and are chosen by
``fs_datasource.fs.registry``.

Contract:
- fetch(path, binary) -> Response. With ``binary=True`` the payload is
  never text-decoded (Parquet/Arrow need the exact bytes).
- Raises NotFoundError for a missing path, FetchError for any other
  IO/network failure.
- list(path) -> DirectoryInfo (used for connectivity checks).
"""

from __future__ import annotations

import codecs
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field

from fs_datasource.config import DatasourceSettings


def charset_of(content_type: str | None, default: str = "utf-8") -> str:
    """Charset named by a Content-Type header, or *default*.

    Only an explicit ``charset=`` parameter counts; a bare ``text/*`` type
    does not imply ISO-8859-1 here. Unknown codec names fall back to
    *default*.
    """
    if content_type:
        for param in content_type.split(";")[1:]:
            key, _, value = param.strip().partition("=")
            if key.strip().lower() == "charset" and value:
                charset = value.strip().strip("\"'")
                try:
                    return codecs.lookup(charset).name
                except LookupError:
                    break
    return default


class _Headers(Mapping):
    """Read-only, case-insensitive header mapping."""

    def __init__(self, raw: Mapping[str, str] | None = None) -> None:
        self._data = {k.lower(): v for k, v in (raw or {}).items()}

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._data


class Response:
    """Raw content returned by a backend.

    Attributes:
        path: The path that was fetched.
        content: Raw payload bytes.
        binary: Whether the caller asked for an untranscoded payload.
    """

    def __init__(
        self,
        path: str,
        content: bytes,
        headers: Mapping[str, str] | None = None,
        binary: bool = False,
        encoding: str = "utf-8",
    ) -> None:
        self.path = path
        self.content = content
        self.binary = binary
        self.encoding = encoding
        self._headers = _Headers(headers)

    def headers(self) -> Mapping[str, str]:
        return self._headers

    def header(self, name: str) -> str | None:
        return self._headers.get(name)

    @property
    def text(self) -> str:
        """Payload decoded as text (a leading BOM is dropped)."""
        return self.content.decode(self.encoding, errors="replace").lstrip("\ufeff")

    def __repr__(self) -> str:
        return (
            f"Response(path={self.path!r}, bytes={len(self.content)}, "
            f"content_type={self.header('content-type')!r})"
        )


@dataclass
class DirectoryInfo:
    """Entries directly under a listed path."""

    path: str
    files: list[str] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.files)


class FileSystem(ABC):
    """Abstract base class for storage backends.

    Subclasses receive the full ``DatasourceSettings`` and read the
    connection fields they need once, at construction.
    """

    kind: str = ""

    def __init__(self, settings: DatasourceSettings) -> None:
        self.settings = settings

    @abstractmethod
    def fetch(self, path: str, binary: bool = False) -> Response:
        """Retrieve the raw content at *path*.

        Raises:
            NotFoundError: If *path* does not exist.
            FetchError: On any other IO or network failure.
        """

    @abstractmethod
    def list(self, path: str = "") -> DirectoryInfo:
        """List the entries directly under *path*."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r})"
