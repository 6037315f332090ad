# eventstager/dates.py
from __future__ import annotations

import re
import warnings
from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as duparser
from dateutil.parser import UnknownTimezoneWarning

# -- Public API ---------------------------------------------------------------

__all__ = [
    "normalize_date",
    "decode_ics_datetime",
    "format_timestamp",
    "parse_timestamp",
]

# -- Helpers ------------------------------------------------------------------

# anything at or before this year is a lenient-parser artifact, not a date
MIN_PLAUSIBLE_YEAR = 1970

# fills parts the text leaves out; a missing year lands here and is rejected
_NO_DEFAULT = datetime(1, 1, 1)

# Numeric date like "7/4/2025", "25-03-25" or "03/04/2025 1:05 PM"
_NUM_DATE_RE = re.compile(
    r"^(?P<a>\d{1,2})[/-](?P<b>\d{1,2})[/-](?P<year>\d{2,4})"
    r"(?:\s+(?P<h>\d{1,2}):(?P<m>\d{2})(?::(?P<s>\d{2}))?\s*(?P<ampm>[AP]M)?)?$",
    re.IGNORECASE,
)

_ICS_JUNK_RE = re.compile(r"[^0-9T]")


def format_timestamp(dt: datetime) -> str:
    """Render a datetime as the canonical UTC string. Naive input is taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    """Read back a stored timestamp as an aware UTC datetime, or None."""
    if not text:
        return None
    try:
        dt = duparser.isoparse(text)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_generic(text: str) -> Optional[datetime]:
    try:
        with warnings.catch_warnings():
            # unknown zone names ("PST") are read as UTC
            warnings.simplefilter("ignore", UnknownTimezoneWarning)
            dt = duparser.parse(text, default=_NO_DEFAULT)
    except (ValueError, OverflowError, TypeError):
        return None
    if dt.year <= MIN_PLAUSIBLE_YEAR:
        return None
    return dt


def _parse_numeric(text: str) -> Optional[datetime]:
    m = _NUM_DATE_RE.match(text)
    if not m:
        return None
    year = m.group("year")
    if len(year) == 2:
        year = "20" + year
    month, day = int(m.group("a")), int(m.group("b"))
    if month > 12:
        month, day = day, month

    hour = int(m.group("h") or 0)
    ampm = (m.group("ampm") or "").upper()
    if ampm == "PM" and hour < 12:
        hour += 12
    if ampm == "AM" and hour == 12:
        hour = 0
    try:
        return datetime(int(year), month, day, hour, int(m.group("m") or 0), int(m.group("s") or 0))
    except ValueError:
        return None


# -- Main functions -----------------------------------------------------------

def normalize_date(value: Optional[str]) -> Optional[str]:
    """
    Best-effort conversion of human-written date/time text to a UTC timestamp.

    Tries, in order:
      1. a generic dateutil parse, kept only when the year is after 1970
      2. numeric "A/B/YYYY [H:MM[:SS] [AM|PM]]" (slashes or dashes), month-first
         unless the first number cannot be a month
    Returns None when neither works. Never raises.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    dt = _parse_generic(text) or _parse_numeric(text)
    if dt is None:
        return None
    try:
        return format_timestamp(dt)
    except (ValueError, OverflowError):
        return None


def decode_ics_datetime(value: Optional[str]) -> Optional[str]:
    """
    Strict decoder for iCalendar DATE / DATE-TIME values ("20250601",
    "20250601T100000Z"). Hour, minute and second default to 00. TZID is
    not applied; values are read as UTC.
    """
    if not value:
        return None
    clean = _ICS_JUNK_RE.sub("", value)
    if len(clean) < 8:
        return None
    hour = clean[9:11] if len(clean) >= 11 else "00"
    minute = clean[11:13] if len(clean) >= 13 else "00"
    second = clean[13:15] if len(clean) >= 15 else "00"
    try:
        dt = datetime(
            int(clean[0:4]), int(clean[4:6]), int(clean[6:8]),
            int(hour), int(minute), int(second),
            tzinfo=timezone.utc,
        )
    except ValueError:
        return None
    return format_timestamp(dt)
