"""
Format detection for fetched payloads.

Selection is a total function of ``(content_type, extension)``:

1. The first rule (by priority) whose content-type pattern occurs in the
   response's content-type wins. A JSON content-type therefore selects
   the JSON parser whatever the file is called. When that rule is
   delimited and the extension names a delimited rule too, the extension
   rule is used instead, so a ``.tsv`` served as ``text/csv`` is still
   split on tabs.
2. Otherwise the first rule listing the path's extension wins.
3. Otherwise the default delimited-text (csv) rule is used.

Whether a payload is binary is decided before fetching, from the
extension alone (``is_binary``), because the fetch itself needs to know.
"""

from __future__ import annotations

import logging

from fs_datasource.format_registry import FormatRule, default_rule, load_all_formats

logger = logging.getLogger(__name__)


def extension_of(path: str) -> str:
    """Lower-case extension of *path*, ignoring any query string or fragment.

    >>> extension_of("data/report.CSV?v=2#top")
    'csv'
    >>> extension_of("README")
    ''
    """
    norm = path
    for sep in ("?", "#"):
        idx = norm.find(sep)
        if idx > 0:
            norm = norm[:idx]
    name = norm.rsplit("/", 1)[-1]
    idx = name.rfind(".")
    if idx > 0:
        return name[idx + 1:].lower()
    return ""


def rule_for_extension(
    extension: str, rules: list[FormatRule] | None = None
) -> FormatRule | None:
    rules = load_all_formats() if rules is None else rules
    for rule in rules:
        if rule.matches_extension(extension):
            return rule
    return None


def is_binary(path: str, rules: list[FormatRule] | None = None) -> bool:
    """Whether *path* should be fetched as raw, untranscoded bytes."""
    rule = rule_for_extension(extension_of(path), rules)
    return rule is not None and rule.binary


def detect_format(
    content_type: str | None,
    extension: str | None,
    rules: list[FormatRule] | None = None,
) -> FormatRule:
    """Pick the format rule for a fetched payload.

    Args:
        content_type: The response's content-type header, if any.
        extension: The source path's extension (see ``extension_of``).
        rules: Pre-loaded rules (optional; loads from disk if None).

    Returns:
        The matching FormatRule; never None.
    """
    rules = load_all_formats() if rules is None else rules
    ext_rule = rule_for_extension(extension or "", rules)

    for rule in rules:
        if rule.matches_content_type(content_type):
            if rule.parser == "delimited" and ext_rule is not None and ext_rule.parser == "delimited":
                rule = ext_rule
            logger.debug("content-type %r -> format '%s'", content_type, rule.format_name)
            return rule

    if ext_rule is not None:
        logger.debug("extension %r -> format '%s'", extension, ext_rule.format_name)
        return ext_rule

    fallback = default_rule(rules)
    logger.debug(
        "No format matched (content-type=%r, extension=%r); using '%s'",
        content_type, extension, fallback.format_name,
    )
    return fallback
