"""
URL helpers for matching captured transfers against page URLs.
"""

from __future__ import annotations

from urllib import parse


def extract_domain(url: str) -> str:
    """Extract the hostname from a URL string."""
    try:
        parsed = parse.urlparse(url)
        return parsed.hostname or "unknown"
    except ValueError:
        return "unknown"


def strip_fragment(url: str) -> str:
    """Return *url* without its ``#fragment`` part."""
    return parse.urldefrag(url).url


def equal_without_fragment(url_a: str, url_b: str) -> bool:
    """Compare two URLs ignoring any fragment.

    Only the fragment is dropped. Query strings, trailing slashes and
    case are compared verbatim.
    """
    return strip_fragment(url_a) == strip_fragment(url_b)
