#!/usr/bin/env python3
"""
Command-line admin for SSA content records.
Modules:
- locations
- events
- routes

Every run is logged to data/admin-log.txt (14 days kept) and summarized in
data/admin-status.json.
"""

import argparse
import sys
import time
import traceback
from datetime import datetime
from pathlib import Path

from ssa_admin import config
from ssa_admin.backend import BackendClient
from ssa_admin.listing import (
    filter_events_by_date_range,
    filter_events_by_keywords,
    format_day_header,
    group_events_by_day,
    next_weekend,
    ordered_day_keys,
    upcoming_weekend,
)
from ssa_admin.pipeline.io import (
    export_path,
    export_records,
    load_existing_status,
    rows_to_records,
    save_log,
    save_status,
)
from ssa_admin.pipeline.metrics import CommandMetrics
from ssa_admin.registry import MODULES, get_module
from ssa_admin.utils.dates import format_display_time, format_duration, normalize_time

STATUS_COMMANDS = {"publish": "published", "archive": "archived", "unpublish": "draft"}


def build_parser():
    p = argparse.ArgumentParser(description="Manage SSA locations, events, and routes.")
    sub = p.add_subparsers(dest="command", required=True)

    def with_module(name, help_text):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("module", choices=sorted(MODULES))
        return sp

    sp = with_module("list", "List records that are not deleted")
    sp.add_argument("-q", "--search", default=None, help="Case-insensitive name filter")

    sp = with_module("export", "Export records to CSV")
    sp.add_argument("-o", "--out", type=Path, default=None, help="Output CSV path")

    sp = with_module("import", "Import records from CSV (upserts by slug)")
    sp.add_argument("file", type=Path)
    sp.add_argument("--dry-run", action="store_true", help="Validate and preview without saving")

    for name in (*STATUS_COMMANDS, "delete", "restore"):
        sp = with_module(name, f"{name.capitalize()} records by id")
        sp.add_argument("ids", nargs="+")

    sp = with_module("copy", "Duplicate a record as a new draft")
    sp.add_argument("id")

    sp = with_module("upload", "Upload an event image or route GPX file")
    sp.add_argument("id")
    sp.add_argument("file", type=Path)

    sp = sub.add_parser("listing", help="Show published events the way the widget groups them")
    sp.add_argument("--from", dest="from_date", default=None)
    sp.add_argument("--to", dest="to_date", default=None)
    sp.add_argument("-k", "--keyword", action="append", default=[], help="Repeat for AND matching")
    when = sp.add_mutually_exclusive_group()
    when.add_argument("--this-weekend", action="store_true")
    when.add_argument("--next-weekend", action="store_true")

    sp = sub.add_parser("normalize-time", help="Show how a typed time would be stored")
    sp.add_argument("value")
    sp.add_argument("--end", action="store_true", help="Treat the value as an end time")
    sp.add_argument("--start", default=None, help="Start time used to resolve a bare end hour")

    return p


def cmd_list(client, args, log, metrics):
    module = get_module(args.module)
    records = client.list_records(
        module.table, search=args.search, search_field=module.search_field, order=module.order
    )
    metrics.record_count = len(records)
    for r in records:
        line = f"{str(r.get('id')):>6}  {r.get('status') or '':<10} {r.get('name')}"
        if module.name == "events":
            times = f"{format_display_time(r.get('start_time'))} - {format_display_time(r.get('end_time'))}"
            line += f"  [{r.get('start_date') or 'TBA'} {times}]"
        log(line)
    log(f"  {len(records)} {module.name}")


def cmd_export(client, args, log, metrics):
    module = get_module(args.module)
    records = client.list_records(module.table, order=module.order)
    out = args.out or export_path(module)
    export_records(module, records, path=out)
    metrics.record_count = len(records)
    log(f"  Exported {len(records)} {module.name} to {out}")


def cmd_import(client, args, log, metrics):
    module = get_module(args.module)
    text = args.file.read_text(encoding="utf-8-sig")
    records, errors = rows_to_records(module, text, log_func=log)
    metrics.record_count = len(records)

    if errors:
        for e in errors:
            log(f"  {e}", "ERROR")
        metrics.errors = len(errors)
        metrics.error_messages.extend(errors)
        log(f"  Import aborted: {len(errors)} problems found", "ERROR")
        return

    for r in records:
        times = ""
        if module.name == "events":
            times = f" {r.get('start_date') or 'TBA'} {format_display_time(r.get('start_time'))}"
        log(f"  {r['slug']:<40} {r['status']:<10}{times}")

    if args.dry_run:
        log(f"  Dry run: {len(records)} {module.name} would be imported")
        return

    saved = client.upsert_records(module.table, records, on_conflict="slug")
    log(f"  Imported {len(saved)} {module.name}")


def cmd_status(client, args, log, metrics):
    module = get_module(args.module)
    target = STATUS_COMMANDS[args.command]
    for record_id in args.ids:
        try:
            client.set_status(module.table, record_id, target)
            metrics.record_count += 1
            log(f"  {module.name} {record_id} -> {target}")
        except ValueError as e:
            metrics.errors += 1
            metrics.error_messages.append(str(e))
            log(f"  {module.name} {record_id}: {e}", "WARNING")


def cmd_delete(client, args, log, metrics):
    module = get_module(args.module)
    rows = client.soft_delete(module.table, args.ids)
    metrics.record_count = len(rows)
    log(f"  Soft deleted {len(rows)} {module.name}")


def cmd_restore(client, args, log, metrics):
    module = get_module(args.module)
    rows = client.restore(module.table, args.ids)
    metrics.record_count = len(rows)
    log(f"  Restored {len(rows)} {module.name}")


def cmd_copy(client, args, log, metrics):
    module = get_module(args.module)
    copy = client.copy_record(module.table, args.id)
    metrics.record_count = 1
    log(f"  Created draft copy '{copy.get('name')}' ({copy.get('slug')})")


def cmd_upload(client, args, log, metrics):
    module = get_module(args.module)
    if not module.upload_field:
        raise ValueError(f"{module.name} records do not accept uploads")
    record = client.get_record(module.table, args.id)
    url = client.upload_file(module, args.file.name, args.file.read_bytes(), record=record)
    client.update_record(module.table, args.id, {module.upload_field: url})
    metrics.record_count = 1
    log(f"  Uploaded {args.file.name} -> {url}")


def cmd_listing(client, args, log, metrics):
    module = get_module("events")
    from_date, to_date = args.from_date, args.to_date
    if args.this_weekend or args.next_weekend:
        weekend = upcoming_weekend() if args.this_weekend else next_weekend()
        from_date, to_date = weekend["from"], weekend["to"]

    events = [
        e for e in client.list_records(module.table, order=module.order)
        if e.get("status") == "published"
    ]
    client.attach_keywords(events)

    selected = [k.lower() for k in args.keyword]
    if selected:
        known = set(client.fetch_keywords())
        for kw in selected:
            if kw not in known:
                log(f"  Unknown keyword '{kw}'; no events will match", "WARNING")

    events = filter_events_by_keywords(events, selected)
    events = filter_events_by_date_range(events, from_date, to_date)
    metrics.record_count = len(events)

    grouped = group_events_by_day(events)
    for day in ordered_day_keys(grouped, from_date, to_date):
        log(format_day_header(None if day == "TBA" else day))
        for e in grouped[day]:
            duration = format_duration(e.get("start_time"), e.get("end_time"))
            log(f"  {format_display_time(e.get('start_time')):>9}  {e.get('name')}"
                + (f" ({duration})" if duration else ""))


def cmd_normalize_time(args, log):
    start = normalize_time(args.start) if args.start else None
    value = normalize_time(args.value, is_end_time=args.end, context_start_time=start)
    if value is None:
        log(f"Could not read '{args.value}' as a time", "WARNING")
        return 1
    log(f"{value}  ({format_display_time(value)})")
    return 0


COMMANDS = {
    "list": cmd_list,
    "export": cmd_export,
    "import": cmd_import,
    "publish": cmd_status,
    "archive": cmd_status,
    "unpublish": cmd_status,
    "delete": cmd_delete,
    "restore": cmd_restore,
    "copy": cmd_copy,
    "upload": cmd_upload,
    "listing": cmd_listing,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    log_lines = []

    def log(message, level="INFO"):
        """Log a message to both console and log buffer."""
        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")
        print(message)
        log_lines.append(f"[{timestamp}] [{level}] {message}")

    if args.command == "normalize-time":
        return cmd_normalize_time(args, log)

    run_timestamp = datetime.utcnow().isoformat() + "Z"
    label = f"{args.command} {getattr(args, 'module', '')}".strip()
    log(f"Starting '{label}' at {run_timestamp}")

    metrics = CommandMetrics(name=label)
    command_status = {"last_run": run_timestamp, "success": False, "record_count": 0, "error": None}
    start_time = time.time()

    try:
        client = BackendClient()
        COMMANDS[args.command](client, args, log, metrics)
        command_status["success"] = metrics.errors == 0
    except Exception as e:
        error_msg = str(e)
        error_trace = traceback.format_exc()
        metrics.errors += 1
        metrics.error_messages.append(error_msg)
        log(f"  ERROR: '{label}' failed: {error_msg}", "ERROR")
        log(f"  Traceback:\n{error_trace}", "ERROR")
        command_status["error_trace"] = error_trace

    metrics.duration_ms = (time.time() - start_time) * 1000
    command_status["record_count"] = metrics.record_count
    command_status["duration_ms"] = round(metrics.duration_ms)
    if metrics.error_messages:
        command_status["error"] = metrics.error_messages[0]

    log(f"{'Command':<24} {'Records':>7} {'Errors':>7} {'Time':>10}")
    log(f"{metrics.name:<24} {metrics.record_count:>7} {metrics.errors:>7} {metrics.duration_ms:>8.0f}ms")

    status = load_existing_status()
    status.setdefault("commands", {})[label] = command_status
    status["last_run"] = run_timestamp
    save_status(status)

    save_log(log_lines, config.LOG_PATH, retention_days=config.LOG_RETENTION_DAYS)
    return 0 if command_status["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
