"""
Configuration models and YAML I/O for fs-datasource.

This module defines the Pydantic models for datasource settings and
query input, plus helpers for loading and saving settings files.

Key models:
- DatasourceSettings: Backend discriminator, connection settings, and
  parsing/caching/query toggles. Read once at datasource construction.
- QueryTarget: One requested path plus the ``changes`` flag.
- QueryOptions: The targets of a query plus scoped template variables.

Key functions:
- load_settings(path) -> DatasourceSettings: Load and validate from YAML.
- save_settings(settings, path): Serialize to YAML.

Why Pydantic + YAML:
- Pydantic gives strict validation and clear error messages for
  backend-specific requirements (an nginx backend without a URL fails
  at load time, not on the first query).
- YAML is human-editable for hand-written datasource definitions.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from fs_datasource.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

# Settings each known backend kind cannot work without
_REQUIRED_BY_KIND: dict[str, tuple[str, ...]] = {
    "local": ("path",),
    "nginx": ("url",),
    "s3": ("bucket",),
}


class DatasourceSettings(BaseModel):
    """Settings for one datasource instance.

    ``type`` is a free-form discriminator: unknown kinds are accepted here
    and resolved to a backend that fails on use, so a misconfigured
    datasource can still be constructed and reported on.
    """

    type: str = Field("", description="Backend kind: 'local', 'nginx', 's3', ...")
    path: str | None = Field(None, description="Base directory for the local backend")
    url: str | None = Field(None, description="Base URL for the nginx backend")
    bucket: str | None = Field(None, description="Bucket name for the s3 backend")
    region: str = Field("us-east-1", description="Bucket region for the s3 backend")
    endpoint: str | None = Field(
        None, description="S3-compatible endpoint override (e.g. http://minio:9000)"
    )
    timeout: float = Field(30.0, gt=0, description="HTTP request timeout in seconds")
    time_interval: str | None = Field(None, description="Minimum query interval hint")

    # Parsing
    delimiter: str = Field(",", description="Field delimiter for delimited text")
    coerce_numbers: bool = Field(
        False, description="If True, numeric-looking text cells become numbers"
    )

    # Query behaviour
    fail_fast: bool = Field(
        True, description="If True, one failing target fails the whole query"
    )
    max_workers: int = Field(4, ge=1, description="Concurrent target resolutions")

    # Cache policy (None = unbounded)
    cache_max_entries: int | None = Field(None, ge=1)
    cache_ttl_seconds: float | None = Field(None, gt=0)

    @field_validator("delimiter")
    @classmethod
    def _check_delimiter(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(f"delimiter must be a single character, got {value!r}")
        return value

    @model_validator(mode="after")
    def _check_backend_requirements(self) -> DatasourceSettings:
        """Validate that a known backend kind has its connection setting."""
        for name in _REQUIRED_BY_KIND.get(self.type, ()):
            if not getattr(self, name):
                raise ValueError(
                    f"Backend type '{self.type}' requires the '{name}' setting."
                )
        return self


class QueryTarget(BaseModel):
    """One requested path within a query."""

    path: str | None = None
    changes: bool = False
    ref_id: str | None = None


class QueryOptions(BaseModel):
    """Input of ``FileSystemDatasource.query()``."""

    targets: list[QueryTarget] = Field(default_factory=list)
    scoped_vars: dict[str, Any] = Field(default_factory=dict)


def load_settings(path: str | Path) -> DatasourceSettings:
    """Load and validate a settings YAML file.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ConfigValidationError: If the file is empty or not a mapping.
        pydantic.ValidationError: If the content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Settings file is empty: {path}")
    if not isinstance(raw, dict):
        raise ConfigValidationError(
            f"Settings file must contain a mapping, got {type(raw).__name__}: {path}"
        )
    logger.info("Loaded settings from %s", path)
    return DatasourceSettings.model_validate(raw)


def save_settings(settings: DatasourceSettings, path: str | Path) -> None:
    """Serialize settings to YAML with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump(mode="json", exclude_none=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# fs-datasource settings\n\n")
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    logger.info("Saved settings to %s", path)
