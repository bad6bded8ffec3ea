"""
Text helpers for Deepmetric.
"""

import re


_TAG_PATTERN = re.compile(r"<[^>]*>?")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_html(value: str) -> str:
    """Reduce rich-text HTML to plain text."""
    if not value:
        return ""
    return _WHITESPACE_PATTERN.sub(" ", _TAG_PATTERN.sub(" ", value)).strip()


def normalize_tag(tag: str) -> str:
    """Key used to compare tags for duplicates."""
    return tag.strip().lower()
