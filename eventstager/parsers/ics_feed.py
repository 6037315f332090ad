from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from ..dates import decode_ics_datetime
from ..models import Event
from ..normalize import make_event
from ..types import ParseResult

logger = logging.getLogger(__name__)

BEGIN_CALENDAR = "BEGIN:VCALENDAR"
BEGIN_EVENT = "BEGIN:VEVENT"
END_EVENT = "END:VEVENT"

WANTED = ("SUMMARY", "DTSTART", "DTEND", "LOCATION", "DESCRIPTION")

_TEXT_UNESCAPES = (("\\n", "\n"), ("\\N", "\n"), ("\\,", ","))


def _logical_lines(block: str) -> Iterator[str]:
    """Unfold continuation lines (leading space/tab) into whole content lines."""
    current: Optional[str] = None
    for raw in block.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        if raw[:1] in (" ", "\t"):
            if current is not None:
                current += raw[1:]
            continue
        if current is not None:
            yield current
        current = raw
    if current is not None:
        yield current


def split_content_line(line: str) -> Optional[Tuple[str, str, str]]:
    """
    "DTSTART;TZID=America/Chicago:20250601T100000" ->
        ("DTSTART", "TZID=America/Chicago", "20250601T100000")

    The value starts after the first colon that is not inside a quoted
    parameter value. Returns None for lines without a colon.
    """
    in_quotes = False
    for i, ch in enumerate(line):
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == ":" and not in_quotes:
            head, value = line[:i], line[i + 1:]
            name, _, params = head.partition(";")
            return name.strip().upper(), params, value
    return None


def extract_fields(block: str) -> Dict[str, str]:
    """First occurrence of each wanted property in a VEVENT body, sub-components skipped."""
    fields: Dict[str, str] = {}
    depth = 0
    for line in _logical_lines(block):
        parsed = split_content_line(line)
        if parsed is None:
            continue
        name, _params, value = parsed
        if name == "BEGIN":
            depth += 1
            continue
        if name == "END":
            depth = max(depth - 1, 0)
            continue
        if depth or name not in WANTED or name in fields:
            continue
        fields[name] = value.strip()
    return fields


def unescape_text(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    for needle, repl in _TEXT_UNESCAPES:
        value = value.replace(needle, repl)
    return value


def _blocks(text: str) -> Iterator[str]:
    for chunk in text.split(BEGIN_EVENT)[1:]:
        yield chunk.split(END_EVENT)[0]


def parse_ics(text: str, category: str, source: str) -> ParseResult:
    """
    Parse every VEVENT in `text`. Blocks without a SUMMARY are skipped;
    dates go through the strict iCalendar decoder.
    """
    text = text or ""
    if BEGIN_EVENT not in text:
        if BEGIN_CALENDAR in text:
            return ParseResult.of([], "calendar has no VEVENT blocks")
        return ParseResult.unparseable("no BEGIN:VEVENT marker")

    out: List[Event] = []
    skipped = 0
    for block in _blocks(text):
        fields = extract_fields(block)
        ev = make_event(
            title=fields.get("SUMMARY"),
            category=category,
            source=source,
            start=decode_ics_datetime(fields.get("DTSTART")),
            end=decode_ics_datetime(fields.get("DTEND")),
            location=fields.get("LOCATION"),
            description=unescape_text(fields.get("DESCRIPTION")),
        )
        if ev is None:
            skipped += 1
            continue
        out.append(ev)

    if skipped:
        logger.debug("ics: skipped %d VEVENT block(s) without SUMMARY", skipped)
    return ParseResult.of(out)
