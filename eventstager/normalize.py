# eventstager/normalize.py
from __future__ import annotations

import dataclasses
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Optional

from .dates import format_timestamp, normalize_date
from .models import Event
from .text import clean_text

_B36 = string.digits + string.ascii_lowercase

MANUAL_SOURCE = "manual"


def _base36(n: int) -> str:
    out = ""
    while True:
        n, r = divmod(n, 36)
        out = _B36[r] + out
        if not n:
            return out


def new_event_id() -> str:
    """evt-<ms since epoch, base36>-<9 random base36 chars>"""
    rand = "".join(secrets.choice(_B36) for _ in range(9))
    return f"evt-{_base36(int(time.time() * 1000))}-{rand}"


def now_timestamp() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def make_event(
    *,
    title: Optional[str],
    category: str,
    source: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    location: Optional[str] = None,
    description: Optional[str] = None,
) -> Optional[Event]:
    """
    Stamp a parsed record into a canonical Event. `start`/`end` must already
    be normalized timestamps. Returns None when the title is blank.
    """
    title = clean_text(title)
    if not title:
        return None
    return Event(
        id=new_event_id(),
        title=title,
        category=category,
        start_date=start or None,
        end_date=end or None,
        location=clean_text(location),
        description=clean_text(description),
        source=source,
        created_at=now_timestamp(),
    )


def build_manual_event(
    *,
    title: str,
    category: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    location: Optional[str] = None,
    description: Optional[str] = None,
    existing: Optional[Event] = None,
) -> Event:
    """
    Build (or rebuild) an event from hand-entered values.

    Dates go through the heuristic normalizer. When `existing` is given the
    edit keeps its id, source and creation time.
    Raises ValueError if the title is blank.
    """
    title = (title or "").strip()
    if not title:
        raise ValueError("an event needs a title")
    fields = dict(
        title=title,
        category=category,
        start_date=normalize_date(start),
        end_date=normalize_date(end),
        location=clean_text(location),
        description=clean_text(description),
    )
    if existing is not None:
        return dataclasses.replace(existing, **fields)
    return Event(
        id=new_event_id(),
        source=MANUAL_SOURCE,
        created_at=now_timestamp(),
        **fields,
    )
