"""
Utility helpers for Deepmetric.
"""

from .text import strip_html, normalize_tag

__all__ = [
    "strip_html",
    "normalize_tag"
]
