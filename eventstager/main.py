#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line entry point: `eventstager <command> ...` or `python -m eventstager.main`.

Commands work against the JSON event store named in the settings:
    import     ingest a file (or stdin) and merge it in by source label
    add        stage a hand-entered event, or edit one with --id
    list       show staged events, filtered and sorted
    categories show category names with event counts
    export     write selected events to an .ics file
    delete     drop events by id
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Settings, load_settings
from .errors import EventStagerError
from .icsbuild import MEDIA_TYPE, export_filename, write_ics
from .ingest import ingest_text, is_accepted_file, source_label_for_file, source_label_for_paste
from .log import setup_logging
from .models import Event
from .normalize import build_manual_event
from .state_store import (
    SORT_KEYS,
    EventStore,
    all_categories,
    category_counts,
    delete_events,
    filter_events,
    load_store,
    merge_events,
    save_store,
    sort_events,
    upsert_event,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOTHING = 1
EXIT_ERROR = 2


def _open_store(settings: Settings) -> EventStore:
    store = load_store(settings.store_path)
    if not store.categories:
        store.categories = list(settings.categories)
    return store


def _read_input(path: str) -> bytes:
    if path == "-":
        return sys.stdin.read().encode("utf-8")
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise EventStagerError(f"cannot read {path}: {e}") from e


def write_report(report: Dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)


def _format_row(ev: Event) -> str:
    when = ev.start_date or "(no date)"
    line = f"{ev.id}  {when:<20}  [{ev.category}] {ev.title}"
    if ev.location:
        line += f" @ {ev.location}"
    return line


# ---------------------------------
# Commands
# ---------------------------------

def cmd_import(args: argparse.Namespace, settings: Settings) -> int:
    raw = _read_input(args.path)
    if args.path == "-":
        source = source_label_for_paste(args.source)
    else:
        source = source_label_for_file(args.path, args.source)
        if not is_accepted_file(args.path):
            print(f"warning: unexpected file type {Path(args.path).suffix or '(none)'}, detecting by content",
                  file=sys.stderr)
    category = args.category or settings.default_category

    result = ingest_text(raw, category, source)

    if args.report:
        write_report({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": source,
            "category": category,
            "format": result.format,
            "count": result.count,
            "attempts": [{"format": f, "status": s.value} for f, s in result.attempts],
        }, args.report)

    if not result.events:
        print(f"No events found in {source}")
        return EXIT_NOTHING

    store = _open_store(settings)
    store.events = merge_events(store.events, result.events, source)
    save_store(store, settings.store_path)
    print(f"Found {result.count} events (detected {result.format}) in {source}")
    return EXIT_OK


def cmd_add(args: argparse.Namespace, settings: Settings) -> int:
    store = _open_store(settings)
    existing: Optional[Event] = None
    if args.id:
        existing = next((e for e in store.events if e.id == args.id), None)
        if existing is None:
            print(f"No event with id {args.id}", file=sys.stderr)
            return EXIT_NOTHING

    def _value(name: str, current: Optional[str]) -> Optional[str]:
        # options left out of an edit keep the stored value
        given = getattr(args, name)
        return given if given is not None else current

    try:
        ev = build_manual_event(
            title=args.title,
            category=_value("category", existing.category if existing else settings.default_category),
            start=_value("start", existing.start_date if existing else None),
            end=_value("end", existing.end_date if existing else None),
            location=_value("location", existing.location if existing else None),
            description=_value("description", existing.description if existing else None),
            existing=existing,
        )
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR

    store.events = upsert_event(store.events, ev)
    save_store(store, settings.store_path)
    print(f"{'Updated' if existing else 'Added'} {ev.id}: {ev.title}")
    return EXIT_OK


def cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    store = _open_store(settings)
    dated = True if args.dated else (False if args.undated else None)
    events = sort_events(
        filter_events(store.events, category=args.category, dated=dated, search=args.search),
        by=args.sort,
    )
    if args.json:
        print(json.dumps([e.to_dict() for e in events], indent=2, ensure_ascii=False))
        return EXIT_OK
    for ev in events:
        print(_format_row(ev))
    print(f"{len(events)} of {len(store.events)} events")
    return EXIT_OK


def cmd_categories(args: argparse.Namespace, settings: Settings) -> int:
    store = _open_store(settings)
    counts = category_counts(store.events)
    print(f"All ({len(store.events)})")
    for name in all_categories(store):
        print(f"{name} ({counts.get(name, 0)})")
    return EXIT_OK


def cmd_export(args: argparse.Namespace, settings: Settings) -> int:
    store = _open_store(settings)
    selected: List[Event] = store.events
    if args.id:
        wanted = set(args.id)
        selected = [e for e in selected if e.id in wanted]
        for missing in wanted - {e.id for e in selected}:
            logger.warning("No event with id %s", missing)
    selected = filter_events(selected, category=args.category)

    if not selected:
        print("No events to export")
        return EXIT_NOTHING

    out = args.out or settings.export_dir / export_filename(selected)
    write_ics(selected, out)
    print(f"Wrote {len(selected)} events ({MEDIA_TYPE}) -> {out}")
    return EXIT_OK


def cmd_delete(args: argparse.Namespace, settings: Settings) -> int:
    store = _open_store(settings)
    before = len(store.events)
    store.events = delete_events(store.events, args.ids)
    removed = before - len(store.events)
    if not removed:
        print("No matching events")
        return EXIT_NOTHING
    save_store(store, settings.store_path)
    print(f"Deleted {removed} events")
    return EXIT_OK


# ---------------------------------
# Argument parsing
# ---------------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="eventstager", description="Stage events from calendar files and export them as ICS.")
    ap.add_argument("--config", type=Path, default=None, help="Optional YAML settings file.")
    ap.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR.")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import", help="Ingest a file (or - for stdin).")
    p.add_argument("path")
    p.add_argument("--category", help="Category for every imported event.")
    p.add_argument("--source", help="Source label; re-importing a label replaces its events.")
    p.add_argument("--report", type=Path, help="Write a JSON run report here.")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("add", help="Stage a hand-entered event.")
    p.add_argument("--id", help="Edit the event with this id instead of adding one.")
    p.add_argument("--title", required=True)
    p.add_argument("--start")
    p.add_argument("--end")
    p.add_argument("--location")
    p.add_argument("--description")
    p.add_argument("--category")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("list", help="Show staged events.")
    p.add_argument("--category")
    g = p.add_mutually_exclusive_group()
    g.add_argument("--dated", action="store_true", help="Only events with a start date.")
    g.add_argument("--undated", action="store_true", help="Only events without a start date.")
    p.add_argument("--search")
    p.add_argument("--sort", choices=SORT_KEYS, default="date")
    p.add_argument("--json", action="store_true", help="Print store records as JSON.")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("categories", help="Show categories with event counts.")
    p.set_defaults(func=cmd_categories)

    p = sub.add_parser("export", help="Write events to an .ics file.")
    p.add_argument("--id", action="append", help="Event id to export; repeatable.")
    p.add_argument("--category")
    p.add_argument("--out", type=Path, help="Output file (default: export dir + derived name).")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("delete", help="Drop events by id.")
    p.add_argument("ids", nargs="+")
    p.set_defaults(func=cmd_delete)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config)
        setup_logging(args.log_level or settings.log_level)
        return args.func(args, settings)
    except EventStagerError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
