"""Tests for the command line interface."""
import io
import json

import pytest

from eventstager.config import ENV_OVERRIDES
from eventstager.main import main

CSV_TEXT = "Title,Start,Location\nSwim meet,2025-06-01 09:00,Pool\nTrack day,,Stadium\n"


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty working directory with the default settings."""
    monkeypatch.chdir(tmp_path)
    for var in list(ENV_OVERRIDES) + ["EVENTSTAGER_CONFIG"]:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


def _store(workdir):
    return json.loads((workdir / "state" / "events.json").read_text(encoding="utf-8"))


def _import_csv(workdir, name="games.csv"):
    path = workdir / name
    path.write_text(CSV_TEXT, encoding="utf-8")
    return main(["import", str(path)])


class TestImport:
    """Test cases for the import command."""

    def test_import_file(self, workdir, capsys):
        """Test that a CSV file is ingested and saved under its file label."""
        assert _import_csv(workdir) == 0
        assert "Found 2 events (detected CSV) in games" in capsys.readouterr().out
        data = _store(workdir)
        assert {e["source"] for e in data["events"]} == {"games"}
        assert {e["category"] for e in data["events"]} == {"Sports"}
        assert data["categories"] == ["Sports", "Home", "Social"]

    def test_reimport_replaces(self, workdir):
        """Test that importing the same label twice does not duplicate."""
        _import_csv(workdir)
        _import_csv(workdir)
        assert len(_store(workdir)["events"]) == 2

    def test_import_stdin(self, workdir, monkeypatch, capsys):
        """Test that - reads stdin and labels the batch as pasted."""
        monkeypatch.setattr("sys.stdin", io.StringIO('[{"title": "Recital", "start": "2025-06-01"}]'))
        assert main(["import", "-", "--category", "Home"]) == 0
        assert "in Pasted" in capsys.readouterr().out
        ev = _store(workdir)["events"][0]
        assert ev["source"] == "Pasted"
        assert ev["category"] == "Home"

    def test_nothing_found(self, workdir, capsys):
        """Test exit 1 and an untouched store when nothing parses."""
        path = workdir / "notes.txt"
        path.write_text("just a note", encoding="utf-8")
        assert main(["import", str(path)]) == 1
        assert "No events found" in capsys.readouterr().out
        assert not (workdir / "state" / "events.json").exists()

    def test_unexpected_suffix_warns(self, workdir, capsys):
        """Test that an unlisted file type is still read but flagged."""
        path = workdir / "games.dat"
        path.write_text(CSV_TEXT, encoding="utf-8")
        assert main(["import", str(path)]) == 0
        captured = capsys.readouterr()
        assert "unexpected file type .dat" in captured.err
        assert "detected CSV" in captured.out

    def test_listed_suffix_does_not_warn(self, workdir, capsys):
        """Test that accepted file types import without a warning."""
        _import_csv(workdir)
        assert "unexpected file type" not in capsys.readouterr().err

    def test_missing_file(self, workdir):
        """Test that an unreadable path is reported with exit 2."""
        assert main(["import", str(workdir / "missing.csv")]) == 2

    def test_report(self, workdir):
        """Test that --report writes the run diagnostics."""
        path = workdir / "games.csv"
        path.write_text(CSV_TEXT, encoding="utf-8")
        report = workdir / "build" / "report.json"
        main(["import", str(path), "--source", "League", "--report", str(report)])
        data = json.loads(report.read_text(encoding="utf-8"))
        assert data["source"] == "League"
        assert data["format"] == "CSV"
        assert data["count"] == 2
        assert data["attempts"] == [{"format": "CSV", "status": "ok"}]


class TestAddListDelete:
    """Test cases for add, list, categories and delete."""

    def test_add_and_edit(self, workdir, capsys):
        """Test adding a manual event and editing it by id."""
        assert main(["add", "--title", "Dinner", "--start", "2025-06-05 19:00", "--category", "Social"]) == 0
        ev = _store(workdir)["events"][0]
        assert ev["source"] == "manual"
        assert ev["startDate"] == "2025-06-05T19:00:00Z"

        assert main(["add", "--id", ev["id"], "--title", "Late dinner"]) == 0
        events = _store(workdir)["events"]
        assert len(events) == 1
        assert events[0]["id"] == ev["id"]
        assert events[0]["title"] == "Late dinner"
        assert events[0]["category"] == "Social"
        assert events[0]["createdAt"] == ev["createdAt"]
        assert events[0]["startDate"] == "2025-06-05T19:00:00Z"

    def test_add_blank_title(self, workdir):
        """Test that a blank title is rejected."""
        assert main(["add", "--title", "   "]) == 2

    def test_edit_unknown_id(self, workdir):
        """Test that editing a missing id reports nothing to do."""
        assert main(["add", "--id", "evt-nope", "--title", "X"]) == 1

    def test_list(self, workdir, capsys):
        """Test plain and JSON listings with filters."""
        _import_csv(workdir)
        capsys.readouterr()

        assert main(["list", "--undated"]) == 0
        out = capsys.readouterr().out
        assert "Track day" in out
        assert "Swim meet" not in out
        assert "1 of 2 events" in out

        assert main(["list", "--json", "--sort", "name"]) == 0
        titles = [e["title"] for e in json.loads(capsys.readouterr().out)]
        assert titles == ["Swim meet", "Track day"]

    def test_categories(self, workdir, capsys):
        """Test category listing with counts."""
        _import_csv(workdir)
        capsys.readouterr()
        assert main(["categories"]) == 0
        out = capsys.readouterr().out
        assert "All (2)" in out
        assert "Sports (2)" in out
        assert "Home (0)" in out

    def test_delete(self, workdir, capsys):
        """Test deleting by id and the nothing-matched exit code."""
        _import_csv(workdir)
        ids = [e["id"] for e in _store(workdir)["events"]]
        assert main(["delete", ids[0]]) == 0
        assert [e["id"] for e in _store(workdir)["events"]] == ids[1:]
        assert main(["delete", "evt-nope"]) == 1


class TestExport:
    """Test cases for the export command."""

    def test_export_all(self, workdir, capsys):
        """Test exporting every event to the default file."""
        _import_csv(workdir)
        assert main(["export"]) == 0
        assert "(text/calendar; charset=utf-8)" in capsys.readouterr().out
        text = (workdir / "build" / "selected_events.ics").read_text(encoding="utf-8")
        assert text.count("BEGIN:VEVENT") == 2

    def test_export_one(self, workdir):
        """Test that a single id is named after its title."""
        main(["add", "--title", "Swim meet!", "--start", "2025-06-01"])
        ev_id = _store(workdir)["events"][0]["id"]
        assert main(["export", "--id", ev_id]) == 0
        assert (workdir / "build" / "Swim_meet_.ics").exists()

    def test_export_out(self, workdir):
        """Test an explicit output path."""
        _import_csv(workdir)
        out = workdir / "cal" / "mine.ics"
        assert main(["export", "--out", str(out)]) == 0
        assert out.exists()

    def test_export_nothing(self, workdir, capsys):
        """Test exit 1 when no events match."""
        assert main(["export"]) == 1
        assert "No events to export" in capsys.readouterr().out

    def test_corrupt_store(self, workdir, capsys):
        """Test that a corrupt store file is reported with exit 2."""
        (workdir / "state").mkdir()
        (workdir / "state" / "events.json").write_text("{broken", encoding="utf-8")
        assert main(["list"]) == 2
        assert "error:" in capsys.readouterr().err
