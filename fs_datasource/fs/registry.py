"""
Backend registry for fs-datasource.

Maps a backend kind tag (the ``type`` setting) to a display name and a
factory returning a ``FileSystem``. Built-in kinds:

    local  -> LocalFileSystem   "Local (host)"
    nginx  -> NginxFileSystem   "NGINX (json)"
    s3     -> S3FileSystem      "Amazon S3"

Any other tag resolves to ``UnknownFileSystem``, which constructs
cleanly and fails every operation with ``UnsupportedBackendError``.
Additional kinds can be added at runtime with ``register_backend()``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from fs_datasource.config import DatasourceSettings
from fs_datasource.fs.base import FileSystem
from fs_datasource.fs.unknown import UnknownFileSystem

logger = logging.getLogger(__name__)

BackendFactory = Callable[[DatasourceSettings], FileSystem]


@dataclass(frozen=True)
class BackendSpec:
    """A registered backend kind."""
    kind: str
    name: str
    factory: BackendFactory


_REGISTRY: dict[str, BackendSpec] = {}


def _ensure_builtins() -> None:
    """Lazily register the built-in backends (keeps requests and boto3 off the import path)."""
    if _REGISTRY:
        return
    from fs_datasource.fs.local import LocalFileSystem
    from fs_datasource.fs.nginx import NginxFileSystem
    from fs_datasource.fs.s3 import S3FileSystem

    _REGISTRY["local"] = BackendSpec("local", "Local (host)", LocalFileSystem)
    _REGISTRY["nginx"] = BackendSpec("nginx", "NGINX (json)", NginxFileSystem)
    _REGISTRY["s3"] = BackendSpec("s3", "Amazon S3", S3FileSystem)


def register_backend(kind: str, name: str, factory: BackendFactory) -> None:
    """Register (or replace) the factory for backend *kind*."""
    _ensure_builtins()
    if kind in _REGISTRY:
        logger.warning("Replacing registered backend '%s'", kind)
    _REGISTRY[kind] = BackendSpec(kind, name, factory)


def backend_kinds() -> dict[str, str]:
    """Registered kinds mapped to their display names."""
    _ensure_builtins()
    return {kind: entry.name for kind, entry in _REGISTRY.items()}


def create_filesystem(settings: DatasourceSettings) -> FileSystem:
    """Build the backend selected by ``settings.type``.

    Never raises for an unknown kind: an ``UnknownFileSystem`` is
    returned instead.
    """
    _ensure_builtins()
    entry = _REGISTRY.get(settings.type)
    if entry is None:
        logger.warning(
            "Unknown backend type %r; known types: %s",
            settings.type, sorted(_REGISTRY),
        )
        return UnknownFileSystem(settings)
    logger.info("Using %s backend", entry.name)
    return entry.factory(settings)
