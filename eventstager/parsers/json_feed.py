# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..dates import normalize_date
from ..models import Event
from ..normalize import make_event
from ..types import ParseResult

logger = logging.getLogger(__name__)

# Root-object keys that commonly wrap the event array, in lookup order
WRAPPER_KEYS = ("events", "items", "data", "results", "entries", "calendar")

# Candidate keys per canonical field, first truthy value wins
FIELD_KEYS: Dict[str, Sequence[str]] = {
    "title": ("title", "summary", "name", "subject", "event"),
    "start": ("start", "startDate", "start_date", "date", "when", "dtstart"),
    "end": ("end", "endDate", "end_date", "dtend"),
    "location": ("location", "place", "venue", "where"),
    "description": ("description", "details", "notes", "body"),
}

PLACEHOLDER_TITLE = "Untitled"


def _first(item: Dict[str, Any], keys: Sequence[str]) -> Any:
    for k in keys:
        v = item.get(k)
        if v:
            return v
    return None


def _as_text(x: Any) -> Optional[str]:
    if x is None or isinstance(x, (dict, list)):
        return None
    return str(x).strip() or None


def _flatten_location(loc: Any) -> Optional[str]:
    # Handles schema.org Place -> name/address, or plain strings
    if not loc:
        return None
    if isinstance(loc, dict):
        parts = []
        nm = loc.get("name")
        if nm:
            parts.append(str(nm))
        addr = loc.get("address")
        if isinstance(addr, str):
            parts.append(addr)
        elif isinstance(addr, dict):
            addr_parts = [
                addr.get("streetAddress"),
                addr.get("addressLocality"),
                addr.get("addressRegion"),
                addr.get("postalCode"),
                addr.get("addressCountry"),
            ]
            parts.append(", ".join([str(p) for p in addr_parts if p]))
        return ", ".join([p for p in parts if p]) or None
    return _as_text(loc)


def find_records(data: Any) -> Optional[List[Any]]:
    """The event array: the root itself, or the first wrapper key holding a list."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in WRAPPER_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    return None


def _to_event(item: Dict[str, Any], category: str, source: str) -> Optional[Event]:
    title = _as_text(_first(item, FIELD_KEYS["title"])) or PLACEHOLDER_TITLE
    start = normalize_date(_as_text(_first(item, FIELD_KEYS["start"])))
    if title == PLACEHOLDER_TITLE and not start:
        return None
    return make_event(
        title=title,
        category=category,
        source=source,
        start=start,
        end=normalize_date(_as_text(_first(item, FIELD_KEYS["end"]))),
        location=_flatten_location(_first(item, FIELD_KEYS["location"])),
        description=_as_text(_first(item, FIELD_KEYS["description"])),
    )


def parse_json(text: str, category: str, source: str) -> ParseResult:
    """
    Parse a JSON array of event-like objects (bare, or under a wrapper key).
    Records with neither a real title nor a start date are discarded.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        return ParseResult.unparseable(f"invalid JSON: {e}")

    records = find_records(data)
    if records is None:
        return ParseResult.of([], "no event array found")

    out: List[Event] = []
    for item in records:
        if not isinstance(item, dict):
            continue
        ev = _to_event(item, category, source)
        if ev is not None:
            out.append(ev)

    logger.debug("json: kept %d of %d record(s)", len(out), len(records))
    return ParseResult.of(out)
