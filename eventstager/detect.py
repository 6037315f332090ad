# eventstager/detect.py
"""
Pick a parser for raw text by structural signals, most reliable first.

ICS has a literal marker, JSON and XML have leading-character signals,
delimited text has none and is tried last. A format is only reported
when its parser yields at least one event. Text carrying an ICS marker
never falls through to the other parsers.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from .parsers import parse_delimited, parse_ics, parse_json, parse_xml
from .types import (
    FORMAT_CSV,
    FORMAT_ICS,
    FORMAT_JSON,
    FORMAT_XML,
    ParseResult,
    ParseStatus,
)

logger = logging.getLogger(__name__)

Parser = Callable[[str, str, str], ParseResult]

ICS_MARKERS = ("BEGIN:VCALENDAR", "BEGIN:VEVENT")
JSON_PREFIXES = ("{", "[")
XML_PREFIXES = ("<?xml", "<rss", "<feed", "<events")

# tag -> parser
PARSERS = {
    FORMAT_ICS: parse_ics,
    FORMAT_JSON: parse_json,
    FORMAT_XML: parse_xml,
    FORMAT_CSV: parse_delimited,
}


def looks_like_ics(text: str) -> bool:
    return any(m in text for m in ICS_MARKERS)


def looks_like_json(text: str) -> bool:
    return text.startswith(JSON_PREFIXES)


def looks_like_xml(text: str) -> bool:
    return text.startswith(XML_PREFIXES)


def looks_tabular(text: str) -> bool:
    return sum(1 for ln in text.splitlines() if ln.strip()) >= 2


def candidate_formats(text: str) -> List[str]:
    """Formats worth trying for `text`, in priority order."""
    if looks_like_ics(text):
        return [FORMAT_ICS]
    out = []
    if looks_like_json(text):
        out.append(FORMAT_JSON)
    if looks_like_xml(text):
        out.append(FORMAT_XML)
    if looks_tabular(text):
        out.append(FORMAT_CSV)
    return out


def detect_and_parse(
    text: str,
    category: str,
    source: str,
) -> Tuple[Optional[str], ParseResult, List[Tuple[str, ParseStatus]]]:
    """
    Returns (format tag or None, winning ParseResult, attempts).
    `attempts` records the status of every parser that ran.
    """
    trimmed = (text or "").strip()
    attempts: List[Tuple[str, ParseStatus]] = []

    for fmt in candidate_formats(trimmed):
        result = PARSERS[fmt](trimmed, category, source)
        attempts.append((fmt, result.status))
        logger.debug("detect: %s -> %s (%d events) %s",
                     fmt, result.status.value, len(result), result.detail or "")
        if result.events:
            return fmt, result, attempts
        if fmt == FORMAT_ICS:
            # the marker is decisive: no fallthrough, but nothing was found
            return None, result, attempts

    return None, ParseResult.of([]), attempts
