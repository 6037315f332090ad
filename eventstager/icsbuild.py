# eventstager/icsbuild.py
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from icalendar import Calendar, Event as ICalEvent

from .dates import parse_timestamp
from .models import Event

PRODID = "-//EventStaging//EN"
UID_SUFFIX = "@eventstaging"
MEDIA_TYPE = "text/calendar; charset=utf-8"
MULTI_EVENT_FILENAME = "selected_events.ics"
DEFAULT_DURATION = timedelta(hours=1)

_RESERVED = re.compile(r"[,;\\]")
_FILENAME_JUNK = re.compile(r"[^a-zA-Z0-9]")


def flatten_text(s: Optional[str]) -> str:
    """Replace the characters iCalendar would otherwise escape with a space."""
    return _RESERVED.sub(" ", s or "").replace("\r\n", "\n")


def _vevent(ev: Event, now: datetime) -> ICalEvent:
    # undated events get a bookable slot one hour out
    start = parse_timestamp(ev.start_date) or now + DEFAULT_DURATION
    end = parse_timestamp(ev.end_date) or start + DEFAULT_DURATION

    ie = ICalEvent()
    ie.add("uid", f"{ev.id}{UID_SUFFIX}")
    ie.add("dtstamp", now)
    ie.add("dtstart", start)
    ie.add("dtend", end)
    ie.add("summary", flatten_text(ev.title))
    if ev.location:
        ie.add("location", flatten_text(ev.location))
    if ev.description:
        # vText turns the remaining newlines into the literal \n escape
        ie.add("description", flatten_text(ev.description))
    return ie


def build_calendar(events: Iterable[Event], now: Optional[datetime] = None) -> Calendar:
    now = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    cal = Calendar()
    cal.add("version", "2.0")
    cal.add("prodid", PRODID)
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    for ev in events:
        cal.add_component(_vevent(ev, now))
    return cal


def encode_events(events: Iterable[Event], now: Optional[datetime] = None) -> str:
    """One VCALENDAR holding a VEVENT per event, CRLF line endings."""
    return build_calendar(events, now).to_ical(sorted=False).decode("utf-8")


def encode_event(event: Event, now: Optional[datetime] = None) -> str:
    return encode_events([event], now)


def export_filename(events: Sequence[Event]) -> str:
    if len(events) == 1:
        return _FILENAME_JUNK.sub("_", events[0].title or "event") + ".ics"
    return MULTI_EVENT_FILENAME


def write_ics(events: List[Event], path: Path, now: Optional[datetime] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_calendar(events, now).to_ical(sorted=False))
    return path
