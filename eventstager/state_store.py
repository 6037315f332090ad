# eventstager/state_store.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .dates import parse_timestamp
from .errors import StoreError
from .models import Event

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"
SORT_KEYS = ("date", "name", "created")


@dataclass
class EventStore:
    events: List[Event] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "events": [e.to_dict() for e in self.events],
            "categories": list(self.categories),
        }


def _events_from_records(records: Iterable[object]) -> List[Event]:
    out: List[Event] = []
    for rec in records:
        if not isinstance(rec, dict):
            continue
        try:
            out.append(Event.from_dict(rec))
        except (TypeError, ValueError) as e:
            logger.warning("Skipping unusable stored event %r: %s", rec.get("id"), e)
    return out


def load_store(path: Path) -> EventStore:
    """Missing file -> empty store. A bare JSON list is read as the event list."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return EventStore()
    except (OSError, ValueError) as e:
        raise StoreError(f"cannot read event store {path}: {e}") from e

    if isinstance(data, list):
        return EventStore(events=_events_from_records(data))
    if not isinstance(data, dict):
        raise StoreError(f"event store {path} must hold an object or a list")
    cats = data.get("categories") or []
    return EventStore(
        events=_events_from_records(data.get("events") or []),
        categories=[str(c) for c in cats if c],
    )


def save_store(store: EventStore, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(store.to_dict(), f, indent=2, ensure_ascii=False)


# -- collection operations ----------------------------------------------------

def merge_events(events: Sequence[Event], batch: Sequence[Event], source: str) -> List[Event]:
    """Replace every event from `source` with `batch`; all others stay as they are."""
    kept = [e for e in events if e.source != source]
    return kept + list(batch)


def upsert_event(events: Sequence[Event], event: Event) -> List[Event]:
    out = list(events)
    for i, e in enumerate(out):
        if e.id == event.id:
            out[i] = event
            return out
    out.append(event)
    return out


def delete_events(events: Sequence[Event], ids: Iterable[str]) -> List[Event]:
    drop = set(ids)
    return [e for e in events if e.id not in drop]


def all_categories(store: EventStore) -> List[str]:
    """Configured categories first, then any used by events; no repeats."""
    seen: Dict[str, None] = {}
    for c in list(store.categories) + [e.category for e in store.events]:
        if c:
            seen.setdefault(c, None)
    return list(seen)


def category_counts(events: Iterable[Event]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for e in events:
        counts[e.category] = counts.get(e.category, 0) + 1
    return counts


def filter_events(
    events: Iterable[Event],
    category: Optional[str] = None,
    dated: Optional[bool] = None,
    search: Optional[str] = None,
) -> List[Event]:
    out = []
    needle = (search or "").lower()
    for e in events:
        if category and category != ALL_CATEGORIES and e.category != category:
            continue
        if dated is not None and e.has_date != dated:
            continue
        if needle:
            # per field, so a needle never spans two fields
            if not any(needle in (x or "").lower() for x in (e.title, e.location, e.description)):
                continue
        out.append(e)
    return out


def sort_events(events: Iterable[Event], by: str = "date") -> List[Event]:
    """
    date: soonest first, undated last
    name: by title, case-insensitive
    created: newest first
    """
    events = list(events)
    if by == "name":
        return sorted(events, key=lambda e: e.title.lower())
    if by == "created":
        return sorted(events, key=lambda e: e.created_at or "", reverse=True)
    if by != "date":
        raise ValueError(f"unknown sort key {by!r}; expected one of {SORT_KEYS}")

    def _key(e: Event):
        ts = parse_timestamp(e.start_date)
        return (ts is None, ts.timestamp() if ts else 0.0)

    return sorted(events, key=_key)
