from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .models import Event

FORMAT_ICS = "iCalendar"
FORMAT_JSON = "JSON"
FORMAT_XML = "XML/RSS"
FORMAT_CSV = "CSV"


class ParseStatus(enum.Enum):
    OK = "ok"
    EMPTY = "empty"                # valid for the format, nothing usable in it
    UNPARSEABLE = "unparseable"    # not this format at all


@dataclass(frozen=True)
class ParseResult:
    events: Tuple[Event, ...] = ()
    status: ParseStatus = ParseStatus.EMPTY
    detail: Optional[str] = None

    @classmethod
    def of(cls, events: List[Event], detail: Optional[str] = None) -> "ParseResult":
        status = ParseStatus.OK if events else ParseStatus.EMPTY
        return cls(tuple(events), status, detail)

    @classmethod
    def unparseable(cls, detail: str) -> "ParseResult":
        return cls((), ParseStatus.UNPARSEABLE, detail)

    def __len__(self) -> int:
        return len(self.events)

    def __bool__(self) -> bool:
        return bool(self.events)


@dataclass(frozen=True)
class IngestResult:
    """What the caller gets back from one ingestion call.

    `attempts` lists every (format, status) tried, in order, for diagnostics.
    """
    events: Tuple[Event, ...] = ()
    format: Optional[str] = None
    attempts: List[Tuple[str, ParseStatus]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.events)
