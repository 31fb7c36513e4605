"""
Format rule loader for fs-datasource.

Loads format YAML files from fs_datasource/formats/ and provides
structured access via Pydantic models. Each rule defines:
- format_name: unique identifier (e.g., "csv", "parquet")
- parser: which parser kind decodes it (delimited | json | columnar | avro)
- content_types: substrings matched against the response content-type
- extensions: file extensions (lower-case, no dot)
- binary: whether the payload must be fetched without text decoding
- delimiter: field delimiter override for delimited formats
- priority: lower is checked first

Why YAML instead of hardcoded:
- New extensions or content-types can be added by editing a YAML file.
- Separation of recognition rules (YAML) from decoding logic (Python).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# Directory containing format YAML files (sibling package)
_FORMATS_DIR = Path(__file__).parent / "formats"

ParserKind = Literal["delimited", "json", "columnar", "avro"]


class FormatRule(BaseModel):
    """A complete format definition loaded from YAML."""
    format_name: str
    parser: ParserKind
    description: str = ""
    priority: int = 50
    binary: bool = False
    delimiter: str | None = None
    content_types: list[str] = Field(default_factory=list)
    extensions: list[str] = Field(default_factory=list)

    @field_validator("content_types", "extensions")
    @classmethod
    def _lower(cls, values: list[str]) -> list[str]:
        return [v.strip().lower().lstrip(".") for v in values if v.strip()]

    def matches_content_type(self, content_type: str | None) -> bool:
        if not content_type:
            return False
        content_type = content_type.lower()
        return any(pattern in content_type for pattern in self.content_types)

    def matches_extension(self, extension: str | None) -> bool:
        return bool(extension) and extension.lower() in self.extensions


# Used when no rule matches, and when the csv rule file is missing
DEFAULT_FORMAT = FormatRule(
    format_name="csv",
    parser="delimited",
    description="Comma-separated text with a header row (default format)",
    priority=50,
    content_types=["text/csv"],
    extensions=["csv"],
)


def load_format(path: Path) -> FormatRule:
    """Load a single format YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return FormatRule.model_validate(raw)


def load_all_formats(formats_dir: Path | None = None) -> list[FormatRule]:
    """Load all format YAML files, sorted by priority.

    Args:
        formats_dir: Directory to scan for .yaml files. Defaults to
            the built-in formats/ directory.

    Returns:
        List of FormatRule objects, lowest priority value first.
        Files that fail to load are skipped with a warning.
    """
    formats_dir = formats_dir or _FORMATS_DIR
    rules: list[FormatRule] = []
    for yaml_path in sorted(formats_dir.glob("*.yaml")):
        try:
            rule = load_format(yaml_path)
            rules.append(rule)
            logger.debug("Loaded format: %s from %s", rule.format_name, yaml_path)
        except Exception as e:
            logger.warning("Failed to load format from %s: %s", yaml_path, e)
    rules.sort(key=lambda r: (r.priority, r.format_name))
    logger.debug("Loaded %d format rules", len(rules))
    return rules


def default_rule(rules: list[FormatRule]) -> FormatRule:
    """The csv rule from *rules*, or the built-in default."""
    for rule in rules:
        if rule.format_name == DEFAULT_FORMAT.format_name:
            return rule
    return DEFAULT_FORMAT
