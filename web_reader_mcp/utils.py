"""Utility helpers for URL normalization and text trimming."""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit


def strip_query_and_fragment(url: str) -> str:
    """Drop the query string and fragment, leaving the URL otherwise intact."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def truncate_text(value: str, max_len: int) -> str:
    """Trim ``value`` to ``max_len`` characters, marking the cut with an ellipsis."""
    if len(value) <= max_len:
        return value
    return value[:max_len] + "..."
