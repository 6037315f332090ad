# eventstager/parsers/xml_feed.py
from __future__ import annotations

import io
import logging
from typing import Any, List, Optional, Sequence

import feedparser
from bs4 import BeautifulSoup, Tag

from ..dates import normalize_date
from ..models import Event
from ..normalize import make_event
from ..text import clean_text, strip_markup
from ..types import ParseResult

logger = logging.getLogger(__name__)

DESCRIPTION_LIMIT = 300

# generic <event> field -> child element names (also tried as attributes)
EVENT_FIELDS = {
    "title": ("title", "name", "summary"),
    "start": ("start", "date", "when"),
    "end": ("end", "finish", "dtend"),
    "location": ("location", "place", "venue"),
    "description": ("description", "details", "notes"),
}

_FEED_HEADERS = {"content-type": "application/xml; charset=utf-8"}


def _feed_entries(text: str) -> List[Any]:
    feed = feedparser.parse(io.BytesIO(text.encode("utf-8")), response_headers=_FEED_HEADERS)
    if feed.get("bozo"):
        logger.debug("xml: feedparser reported %r", feed.get("bozo_exception"))
    return list(feed.entries)


def _entry_content(entry: Any) -> Optional[str]:
    for c in entry.get("content") or []:
        if c.get("value"):
            return c["value"]
    return None


def _item_links(soup: BeautifulSoup) -> List[Optional[str]]:
    """Text of each <item>'s own <link>, None where it has none."""
    links: List[Optional[str]] = []
    for item in soup.find_all("item"):
        link = item.find("link", recursive=False)
        links.append(clean_text(link.get_text()) if link is not None else None)
    return links


def _rss_events(soup: BeautifulSoup, text: str, category: str, source: str) -> List[Event]:
    out: List[Event] = []
    # the item's own <link> only, never a permalink <guid>
    links = _item_links(soup)
    for i, e in enumerate(_feed_entries(text)):
        link = links[i] if i < len(links) else None
        parts = [strip_markup(e.get("summary"), DESCRIPTION_LIMIT), link]
        out_ev = make_event(
            title=e.get("title"),
            category=category,
            source=source,
            start=normalize_date(e.get("published")),
            end=None,
            location=None,
            description="\n".join(p for p in parts if p),
        )
        if out_ev:
            out.append(out_ev)
    return out


def _atom_events(text: str, category: str, source: str) -> List[Event]:
    out: List[Event] = []
    for e in _feed_entries(text):
        summary = e.get("summary") or _entry_content(e)
        out_ev = make_event(
            title=e.get("title"),
            category=category,
            source=source,
            start=normalize_date(e.get("published") or e.get("updated")),
            end=None,
            location=None,
            description=strip_markup(summary, DESCRIPTION_LIMIT),
        )
        if out_ev:
            out.append(out_ev)
    return out


def _child_or_attr(el: Tag, names: Sequence[str]) -> Optional[str]:
    child = el.find(list(names))
    if child is not None:
        txt = child.get_text(" ", strip=True)
        if txt:
            return txt
    for n in names:
        v = clean_text(el.get(n))
        if v:
            return v
    return None


def _generic_events(nodes: List[Tag], category: str, source: str) -> List[Event]:
    out: List[Event] = []
    for el in nodes:
        get = {fld: _child_or_attr(el, names) for fld, names in EVENT_FIELDS.items()}
        ev = make_event(
            title=get["title"],
            category=category,
            source=source,
            start=normalize_date(get["start"]),
            end=normalize_date(get["end"]),
            location=get["location"],
            description=get["description"],
        )
        if ev:
            out.append(ev)
    return out


def parse_xml(text: str, category: str, source: str) -> ParseResult:
    """
    RSS <item>s, else Atom <entry>s, else generic <event> elements.
    The first kind present decides; the others are not looked at.
    """
    try:
        soup = BeautifulSoup(text or "", "xml")
        if soup.find() is None:
            return ParseResult.unparseable("no XML elements")

        if soup.find("item") is not None:
            kind, events = "rss", _rss_events(soup, text, category, source)
        elif soup.find("entry") is not None:
            kind, events = "atom", _atom_events(text, category, source)
        else:
            nodes = soup.find_all("event")
            kind, events = "event", _generic_events(nodes, category, source)
    except Exception as e:  # surfaced as UNPARSEABLE
        logger.debug("xml: parse failed", exc_info=True)
        return ParseResult.unparseable(f"XML parse failed: {e}")

    logger.debug("xml: %s branch produced %d event(s)", kind, len(events))
    return ParseResult.of(events, kind)
