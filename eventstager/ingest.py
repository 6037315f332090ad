"""Ingestion entry point: raw text in, canonical events out."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

from .detect import detect_and_parse
from .types import IngestResult

logger = logging.getLogger(__name__)

# for caller-side file filtering; the engine itself looks only at content
ACCEPTED_SUFFIXES = (".ics", ".csv", ".tsv", ".json", ".xml", ".rss", ".atom", ".txt")

PASTED_SOURCE = "Pasted"
IMPORTED_SOURCE = "Imported"


def decode_payload(raw: Union[str, bytes]) -> str:
    """Bytes are read as UTF-8 (BOM dropped, bad bytes replaced)."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8-sig", errors="replace")
    return raw.lstrip("\ufeff")


def ingest_text(raw: Union[str, bytes, None], category: str, source: str) -> IngestResult:
    """
    Detect the format of `raw` and parse it into events stamped with
    `category` and `source`. Never raises on bad input; an empty result
    has format None.
    """
    text = decode_payload(raw or "")
    fmt, result, attempts = detect_and_parse(text, category, source)

    if fmt:
        logger.info("Found %d events (detected %s) for source %r", len(result), fmt, source)
    else:
        tried = ", ".join(f"{f}={s.value}" for f, s in attempts) or "nothing matched"
        logger.info("No events found for source %r (%s)", source, tried)
    return IngestResult(events=result.events, format=fmt, attempts=attempts)


def is_accepted_file(path: Union[str, Path]) -> bool:
    return Path(path).suffix.lower() in ACCEPTED_SUFFIXES


def source_label_for_file(path: Union[str, Path], name: Optional[str] = None) -> str:
    """Explicit name, else the file name without its last suffix."""
    if name and name.strip():
        return name.strip()
    return Path(path).stem or IMPORTED_SOURCE


def source_label_for_url(url: str, name: Optional[str] = None) -> str:
    """Explicit name, else the URL's host."""
    if name and name.strip():
        return name.strip()
    return urlparse(url.strip()).hostname or url.strip()


def source_label_for_paste(name: Optional[str] = None) -> str:
    if name and name.strip():
        return name.strip()
    return PASTED_SOURCE
