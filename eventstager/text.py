# eventstager/text.py
from __future__ import annotations

import re
import warnings
from typing import Any, Optional

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

_WS = re.compile(r"\s+")


def clean_text(s: Any) -> Optional[str]:
    """Trim a scalar to text; empty results come back as None."""
    if s is None:
        return None
    s = str(s).strip()
    return s or None


def strip_markup(html: Optional[str], limit: Optional[int] = None) -> str:
    """
    Normalize markup to visible text:
    - drops tags, keeps their text
    - collapses whitespace runs to single spaces
    - optionally truncates to `limit` characters
    """
    if not html:
        return ""
    with warnings.catch_warnings():
        # plain text that looks like a URL or filename is fine here
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        raw = BeautifulSoup(html, "html.parser").get_text(" ")
    text = _WS.sub(" ", raw).strip()
    if limit is not None:
        text = text[:limit]
    return text
