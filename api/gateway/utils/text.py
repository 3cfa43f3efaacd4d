"""Text and URL cleanup helpers used by the normalizers."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_WHITESPACE_RE = re.compile(r"\s+")


def strip_markup(value: str | None) -> str | None:
    """Return the text content of an HTML fragment with whitespace collapsed."""
    if value is None:
        return None
    if "<" not in value:
        return _WHITESPACE_RE.sub(" ", value).strip()
    text = BeautifulSoup(value, "html.parser").get_text()
    return _WHITESPACE_RE.sub(" ", text).strip()


def secure_url(url: str | None) -> str | None:
    """Force an image URL onto https; protocol-relative URLs included."""
    if not url:
        return None
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    if url.startswith("//"):
        return "https:" + url
    return url
