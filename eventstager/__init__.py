from .errors import ConfigError, EventStagerError, StoreError
from .icsbuild import encode_event, encode_events
from .ingest import ingest_text
from .models import Event
from .types import IngestResult, ParseResult, ParseStatus

__all__ = [
    "ConfigError",
    "EventStagerError",
    "StoreError",
    "Event",
    "IngestResult",
    "ParseResult",
    "ParseStatus",
    "encode_event",
    "encode_events",
    "ingest_text",
]
