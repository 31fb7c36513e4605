"""Local (host) disk backend."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

from fs_datasource.config import DatasourceSettings
from fs_datasource.exceptions import FetchError, NotFoundError
from fs_datasource.fs.base import DirectoryInfo, FileSystem, Response

logger = logging.getLogger(__name__)


class LocalFileSystem(FileSystem):
    """Serves files below a base directory on the host.

    Paths are interpreted relative to ``settings.path``; anything that
    resolves outside that directory is reported as not found.
    """

    kind = "local"

    def __init__(self, settings: DatasourceSettings) -> None:
        super().__init__(settings)
        self.root = Path(settings.path or ".").expanduser().resolve()

    def _resolve(self, path: str) -> Path:
        # Query strings and fragments have no meaning on disk
        clean = path.split("?", 1)[0].split("#", 1)[0].lstrip("/")
        target = (self.root / clean).resolve()
        if target != self.root and self.root not in target.parents:
            raise NotFoundError(f"Path escapes the base directory: {path}")
        return target

    def fetch(self, path: str, binary: bool = False) -> Response:
        target = self._resolve(path)
        if not target.is_file():
            raise NotFoundError(f"File not found: {target}")
        try:
            content = target.read_bytes()
        except OSError as e:
            raise FetchError(f"Cannot read {target}: {e}") from e

        headers: dict[str, str] = {"content-length": str(len(content))}
        content_type, _ = mimetypes.guess_type(target.name)
        if content_type:
            headers["content-type"] = content_type
        logger.info("Read %s (%d bytes)", target, len(content))
        return Response(path=path, content=content, headers=headers, binary=binary)

    def list(self, path: str = "") -> DirectoryInfo:
        target = self._resolve(path)
        if not target.is_dir():
            raise NotFoundError(f"Directory not found: {target}")
        try:
            entries = sorted(target.iterdir())
        except OSError as e:
            raise FetchError(f"Cannot list {target}: {e}") from e
        return DirectoryInfo(
            path=path,
            files=[p.name for p in entries if p.is_file()],
            directories=[p.name for p in entries if p.is_dir()],
        )
