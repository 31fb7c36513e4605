"""
S3 backend.

Reads objects through a boto3 S3 client: ``get_object`` for fetches and
the ``list_objects_v2`` paginator (``Delimiter="/"``) for listings. The
default client sends unsigned requests, so the bucket (or the
S3-compatible ``endpoint``) must allow anonymous reads. A preconfigured
client can be passed in instead, e.g. one with credentials.

Error mapping:
- NoSuchKey / NoSuchBucket / 404      -> NotFoundError
- any other ClientError or SDK error  -> FetchError
- endpoint unreachable / timed out    -> FetchError(request_failed=True)
"""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from fs_datasource.config import DatasourceSettings
from fs_datasource.exceptions import FetchError, NotFoundError
from fs_datasource.fs.base import DirectoryInfo, FileSystem, Response, charset_of

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "NotFound", "404"}


def make_client(settings: DatasourceSettings) -> Any:
    """Anonymous S3 client for *settings* (region, endpoint, timeout)."""
    config = Config(
        signature_version=UNSIGNED,
        connect_timeout=settings.timeout,
        read_timeout=settings.timeout,
    )
    return boto3.client(
        "s3",
        region_name=settings.region,
        endpoint_url=settings.endpoint,
        config=config,
    )


def _object_key(path: str) -> str:
    return path.lstrip("/").partition("?")[0].partition("#")[0]


class S3FileSystem(FileSystem):
    kind = "s3"

    def __init__(self, settings: DatasourceSettings, client: Any = None) -> None:
        super().__init__(settings)
        self.bucket = settings.bucket or ""
        self.client = client if client is not None else make_client(settings)

    def __repr__(self) -> str:
        return f"S3FileSystem(bucket={self.bucket!r})"

    def _translate(self, e: Exception, what: str) -> FetchError:
        if isinstance(e, (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)):
            return FetchError(f"Request for {what} failed: {e}", request_failed=True)
        if isinstance(e, ClientError):
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                return NotFoundError(f"Not found: {what}")
            return FetchError(f"S3 error {code} for {what}: {e}")
        return FetchError(f"S3 request for {what} failed: {e}")

    def fetch(self, path: str, binary: bool = False) -> Response:
        key = _object_key(path)
        what = f"s3://{self.bucket}/{key}"
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=key)
            content = obj["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, what) from e

        content_type = obj.get("ContentType")
        headers = {"content-length": str(len(content))}
        if content_type:
            headers["content-type"] = content_type
        logger.info("Fetched %s (%d bytes)", what, len(content))
        return Response(
            path=path,
            content=content,
            headers=headers,
            binary=binary,
            encoding=charset_of(content_type),
        )

    def list(self, path: str = "") -> DirectoryInfo:
        """Keys and common prefixes directly under *path*, relative to it."""
        prefix = _object_key(path)
        if prefix and not prefix.endswith("/"):
            prefix += "/"

        info = DirectoryInfo(path=path)
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix, Delimiter="/"):
                for obj in page.get("Contents", []):
                    name = obj["Key"][len(prefix):]
                    if name:
                        info.files.append(name)
                for common in page.get("CommonPrefixes", []):
                    info.directories.append(common["Prefix"][len(prefix):].rstrip("/"))
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, f"s3://{self.bucket}/{prefix}") from e

        logger.debug("Listed s3 prefix '%s': %d objects", prefix, info.count)
        return info
