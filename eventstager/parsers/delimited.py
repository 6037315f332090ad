# eventstager/parsers/delimited.py
"""
CSV / TSV / semicolon-separated event tables.

Columns are located by header name; when the header names nothing we
recognize, columns are read by position instead:
    0 title, 1 start, 2 end, 3 location, 4 description
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence

from ..dates import normalize_date
from ..models import Event
from ..normalize import make_event
from ..types import ParseResult

logger = logging.getLogger(__name__)

SEPARATORS = (",", "\t", ";")

# field -> header fragments, matched against normalized header cells
HEADER_SYNONYMS: Dict[str, Sequence[str]] = {
    "title": ("title", "subject", "summary", "event", "name"),
    "start": ("start", "date", "begin", "when", "dtstart"),
    "end": ("end", "finish", "dtend", "enddate", "endtime"),
    "location": ("location", "place", "where", "venue"),
    "description": ("description", "details", "notes", "body", "desc"),
}

POSITIONAL = {"title": 0, "start": 1, "end": 2, "location": 3, "description": 4}

_LINE_SPLIT = re.compile(r"\r\n|\r|\n")
_HEADER_JUNK = re.compile(r"[^a-z0-9]")


def split_line(line: str) -> List[str]:
    """
    Quote-aware field split. A double quote toggles quoting and is dropped;
    doubled quotes inside a quoted field are not collapsed.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch in SEPARATORS and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def normalize_header(cell: str) -> str:
    return _HEADER_JUNK.sub("", cell.lower())


def locate_columns(header: Sequence[str]) -> Dict[str, int]:
    """Map field -> column index for every field some header cell names."""
    cells = [normalize_header(h) for h in header]
    found: Dict[str, int] = {}
    for fld, names in HEADER_SYNONYMS.items():
        for idx, cell in enumerate(cells):
            if any(n in cell for n in names):
                found[fld] = idx
                break
    return found


def _cell(row: Sequence[str], idx: Optional[int]) -> Optional[str]:
    if idx is None or idx >= len(row):
        return None
    return row[idx] or None


def parse_delimited(text: str, category: str, source: str) -> ParseResult:
    lines = [ln for ln in _LINE_SPLIT.split(text or "") if ln.strip()]
    if len(lines) < 2:
        return ParseResult.unparseable("need a header line and at least one data line")

    columns = locate_columns(split_line(lines[0]))
    positional = "title" not in columns and "start" not in columns
    if positional:
        columns = dict(POSITIONAL)
        logger.debug("delimited: no known headers, reading columns by position")
    else:
        columns.setdefault("title", 0)

    out: List[Event] = []
    dropped = 0
    for line in lines[1:]:
        row = split_line(line)
        ev = make_event(
            title=_cell(row, columns.get("title")),
            category=category,
            source=source,
            start=normalize_date(_cell(row, columns.get("start"))),
            end=normalize_date(_cell(row, columns.get("end"))),
            location=_cell(row, columns.get("location")),
            description=_cell(row, columns.get("description")),
        )
        if ev is None:
            dropped += 1
            continue
        out.append(ev)

    if dropped:
        logger.debug("delimited: dropped %d row(s) with an empty title", dropped)
    return ParseResult.of(out)
