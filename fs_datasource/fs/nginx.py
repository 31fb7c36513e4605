"""
NGINX backend.

Reads files over HTTP from a server whose directories are exposed with
``autoindex on; autoindex_format json;``. A listing is a JSON array of
entries such as::

    [{"name": "data.csv", "type": "file", "mtime": "...", "size": 123},
     {"name": "archive", "type": "directory", "mtime": "..."}]
"""

from __future__ import annotations

import json
import logging

from fs_datasource.config import DatasourceSettings
from fs_datasource.exceptions import FetchError
from fs_datasource.fs.base import DirectoryInfo
from fs_datasource.fs.http import HttpFileSystem

logger = logging.getLogger(__name__)


class NginxFileSystem(HttpFileSystem):
    kind = "nginx"

    def __init__(self, settings: DatasourceSettings) -> None:
        super().__init__(settings, base_url=settings.url or "")

    def list(self, path: str = "") -> DirectoryInfo:
        url = self.url_for(path)
        if not url.endswith("/"):
            url += "/"
        resp = self._get(url)
        try:
            entries = json.loads(resp.content)
        except ValueError as e:
            raise FetchError(
                f"Directory listing at {url} is not JSON; "
                "is 'autoindex_format json' enabled?"
            ) from e
        if not isinstance(entries, list):
            raise FetchError(f"Unexpected directory listing shape at {url}")

        info = DirectoryInfo(path=path)
        for entry in entries:
            if not isinstance(entry, dict) or "name" not in entry:
                continue
            if entry.get("type") == "directory":
                info.directories.append(entry["name"])
            else:
                info.files.append(entry["name"])
        logger.debug("Listed %s: %d files, %d dirs", url, info.count, len(info.directories))
        return info
