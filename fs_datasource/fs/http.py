"""
Shared HTTP plumbing for backends reached over plain HTTP (nginx).

A subclass only decides how a directory listing is decoded. Error
mapping is centralised here so every HTTP backend reports failures the
same way:

- 404                          -> NotFoundError
- any other 4xx/5xx status     -> FetchError
- no response (connect/timeout) -> FetchError(request_failed=True)
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from fs_datasource.config import DatasourceSettings
from fs_datasource.exceptions import FetchError, NotFoundError
from fs_datasource.fs.base import FileSystem, Response, charset_of

logger = logging.getLogger(__name__)


class HttpFileSystem(FileSystem):
    """Base class for backends reached over HTTP."""

    def __init__(self, settings: DatasourceSettings, base_url: str) -> None:
        super().__init__(settings)
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = settings.timeout
        self.session = requests.Session()

    def url_for(self, path: str) -> str:
        """Absolute URL of *path* below the base URL (query string kept)."""
        path = path.lstrip("/")
        path, sep, query = path.partition("?")
        return self.base_url + quote(path, safe="/%#") + sep + query

    def _get(self, url: str, params: dict[str, str] | None = None) -> requests.Response:
        logger.debug("GET %s params=%s", url, params)
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise FetchError(f"Request to {url} failed: {e}", request_failed=True) from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}") from e

        if resp.status_code == 404:
            raise NotFoundError(f"Not found: {url}")
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise FetchError(
                f"HTTP {resp.status_code} from {url}: {resp.text[:200]}"
            ) from e
        return resp

    def fetch(self, path: str, binary: bool = False) -> Response:
        url = self.url_for(path)
        resp = self._get(url)
        logger.info("Fetched %s (%d bytes)", url, len(resp.content))
        return Response(
            path=path,
            content=resp.content,
            headers=dict(resp.headers),
            binary=binary,
            encoding=charset_of(resp.headers.get("Content-Type")),
        )
