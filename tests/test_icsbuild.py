"""Unit tests for the iCalendar encoder."""
from datetime import datetime, timezone

from eventstager.icsbuild import (
    MULTI_EVENT_FILENAME,
    encode_event,
    encode_events,
    export_filename,
    write_ics,
)
from eventstager.models import Event
from eventstager.parsers.ics_feed import parse_ics

NOW = datetime(2025, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _event(**overrides):
    values = dict(
        id="evt-abc-123456789",
        title="Team meeting",
        category="Sports",
        start_date="2025-06-01T10:00:00Z",
        end_date="2025-06-01T11:30:00Z",
        location="Gym",
        description="Bring shoes\nand water",
        source="manual",
        created_at="2025-05-01T00:00:00Z",
    )
    values.update(overrides)
    return Event(**values)


def _lines(text):
    return text.split("\r\n")


class TestEncodeEvents:
    """Test cases for encode_events."""

    def test_calendar_envelope(self):
        """Test the calendar header properties and CRLF line endings."""
        text = encode_events([_event()], now=NOW)
        lines = _lines(text)
        assert lines[0] == "BEGIN:VCALENDAR"
        assert "VERSION:2.0" in lines
        assert "PRODID:-//EventStaging//EN" in lines
        assert "CALSCALE:GREGORIAN" in lines
        assert "METHOD:PUBLISH" in lines
        assert "END:VCALENDAR" in lines
        assert "\n" not in text.replace("\r\n", "")

    def test_event_properties(self):
        """Test the VEVENT properties for a dated event."""
        lines = _lines(encode_event(_event(), now=NOW))
        assert "UID:evt-abc-123456789@eventstaging" in lines
        assert "DTSTAMP:20250501T120000Z" in lines
        assert "DTSTART:20250601T100000Z" in lines
        assert "DTEND:20250601T113000Z" in lines
        assert "SUMMARY:Team meeting" in lines
        assert "LOCATION:Gym" in lines
        assert "DESCRIPTION:Bring shoes\\nand water" in lines

    def test_undated_event_gets_default_slot(self):
        """Test that undated events start an hour after now and last an hour."""
        lines = _lines(encode_event(_event(start_date=None, end_date=None), now=NOW))
        assert "DTSTART:20250501T130000Z" in lines
        assert "DTEND:20250501T140000Z" in lines

    def test_missing_end_defaults_to_one_hour(self):
        """Test that a start without an end lasts one hour."""
        lines = _lines(encode_event(_event(end_date=None), now=NOW))
        assert "DTEND:20250601T110000Z" in lines

    def test_optional_fields_omitted(self):
        """Test that empty location and description are left out."""
        text = encode_event(_event(location=None, description=None), now=NOW)
        assert "LOCATION" not in text
        assert "DESCRIPTION" not in text

    def test_reserved_characters_replaced(self):
        """Test that commas, semicolons and backslashes become spaces."""
        lines = _lines(encode_event(_event(title="A, B; C\\D"), now=NOW))
        assert "SUMMARY:A  B  C D" in lines

    def test_one_vevent_per_event(self):
        """Test that several events share one calendar."""
        text = encode_events([_event(id="evt-1"), _event(id="evt-2")], now=NOW)
        assert text.count("BEGIN:VEVENT") == 2
        assert text.count("BEGIN:VCALENDAR") == 1

    def test_round_trip(self):
        """Test that encoded events parse back to the same fields."""
        original = _event(description="Line one\nLine two " + "y" * 120)
        parsed = parse_ics(encode_event(original, now=NOW), "Sports", "again").events[0]
        assert parsed.title == original.title
        assert parsed.start_date == original.start_date
        assert parsed.end_date == original.end_date
        assert parsed.location == original.location
        assert parsed.description == original.description


class TestExport:
    """Test cases for export file naming and writing."""

    def test_single_event_filename(self):
        """Test that a lone event is named after its title."""
        assert export_filename([_event(title="Team meeting!")]) == "Team_meeting_.ics"

    def test_multi_event_filename(self):
        """Test the fixed name for several events."""
        assert export_filename([_event(), _event()]) == MULTI_EVENT_FILENAME

    def test_write_ics(self, tmp_path):
        """Test that the file is written with parent directories."""
        out = write_ics([_event()], tmp_path / "build" / "x.ics", now=NOW)
        data = out.read_bytes()
        assert data.startswith(b"BEGIN:VCALENDAR\r\n")
        assert b"SUMMARY:Team meeting" in data
