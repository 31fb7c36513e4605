"""Placeholder backend for an unrecognised ``type`` setting."""

from __future__ import annotations

from fs_datasource.config import DatasourceSettings
from fs_datasource.exceptions import UnsupportedBackendError
from fs_datasource.fs.base import DirectoryInfo, FileSystem, Response


class UnknownFileSystem(FileSystem):
    """Constructs without error; every operation raises UnsupportedBackendError.

    This keeps a misconfigured datasource usable enough to report its
    problem through ``test_datasource()`` instead of failing at startup.
    """

    kind = "unknown"

    def __init__(self, settings: DatasourceSettings) -> None:
        super().__init__(settings)
        self.requested_kind = settings.type

    def _fail(self) -> UnsupportedBackendError:
        return UnsupportedBackendError(
            f"Unsupported backend type: {self.requested_kind!r}"
        )

    def fetch(self, path: str, binary: bool = False) -> Response:
        raise self._fail()

    def list(self, path: str = "") -> DirectoryInfo:
        raise self._fail()
