import json
import re
from datetime import datetime, timedelta

from ssa_admin import config
from ssa_admin.pipeline.records import prepare_record
from ssa_admin.utils.csvio import parse_csv, to_csv, validate_csv_headers


def trim_log_by_time(log_path, retention_days=14):
    """
    Remove log entries older than retention_days.
    Returns list of lines to keep.
    """
    if not log_path.exists():
        return []

    cutoff = datetime.utcnow() - timedelta(days=retention_days)
    cutoff_str = cutoff.strftime("%Y-%m-%d %H:%M:%S")

    kept_lines = []
    current_entry_recent = False

    with open(log_path, "r") as f:
        for line in f:
            match = re.match(r"\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\]", line)
            if match:
                current_entry_recent = match.group(1) >= cutoff_str

            if current_entry_recent:
                kept_lines.append(line)

    return kept_lines


def save_log(log_lines, log_path=None, retention_days=None):
    """Append this run's lines to the log file after trimming expired entries."""
    log_path = log_path or config.LOG_PATH
    retention_days = retention_days or config.LOG_RETENTION_DAYS

    existing_log = trim_log_by_time(log_path, retention_days=retention_days)
    log_content = existing_log + ["\n--- New Run ---\n"] + [line + "\n" for line in log_lines]

    log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(log_path, "w") as f:
        f.writelines(log_content)


def load_existing_status(status_path=None):
    """Load the previous run status file if available."""
    status_path = status_path or config.STATUS_PATH
    try:
        if status_path.exists():
            with open(status_path, "r") as f:
                return json.load(f)
    except (OSError, json.JSONDecodeError):
        pass
    return {"commands": {}}


def save_status(status, status_path=None):
    status_path = status_path or config.STATUS_PATH
    status_path.parent.mkdir(parents=True, exist_ok=True)
    with open(status_path, "w") as f:
        json.dump(status, f, indent=2)


def _resolve_headers(module, header_row):
    headers = [h.strip().lower() for h in header_row]
    return [module.header_aliases.get(h, h) for h in headers]


def rows_to_records(module, text, log_func=None):
    """
    Turn CSV text into records ready for upsert.
    Headers are matched case-insensitively and through the module's aliases.
    Slugs are left as-is so re-importing a file updates the same rows.
    Returns (records, errors); errors are prefixed with the 1-based CSV row.
    """
    grid = parse_csv(text)
    if len(grid) < 2:
        return [], ["CSV must have header + at least one data row"]

    headers = _resolve_headers(module, grid[0])
    header_errors = validate_csv_headers(headers, module.required_fields)
    if header_errors:
        return [], header_errors

    known = set(module.csv_headers) | set(module.url_fields)

    records = []
    errors = []
    for index, cols in enumerate(grid[1:], start=2):
        form = {}
        for i, header in enumerate(headers):
            if header in known:
                form[header] = cols[i] if i < len(cols) else ""

        record, row_errors = prepare_record(module, form, log_func=log_func)
        errors.extend(f"Row {index}: {e}" for e in row_errors)
        records.append(record)

    return records, errors


def export_records(module, records, path=None):
    """
    Render records as CSV using the module's columns.
    Writes to path when given and returns the CSV text.
    """
    csv_text = to_csv(records, module.csv_headers)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(csv_text + "\n")
    return csv_text


def export_path(module, when=None):
    when = when or datetime.utcnow()
    return config.EXPORT_DIR / f"{module.name}-{when.strftime('%Y-%m-%d')}.csv"
