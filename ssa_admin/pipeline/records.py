import re

from ssa_admin import config
from ssa_admin.pipeline.validate import validate_record
from ssa_admin.utils.dates import normalize_time, normalize_url
from ssa_admin.utils.slugs import ensure_unique_slug, is_valid_slug, slugify

SERVER_FIELDS = ("id", "created_at", "updated_at", "deleted_at")

# stored time columns come back from the database as HH:MM:SS
STORED_TIME_RE = re.compile(r"([01][0-9]|2[0-3]):([0-5][0-9])(?::[0-5][0-9])?", re.ASCII)


def _clean(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _parse_int(value):
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(value)
        return int(value)
    return int(str(value))


def _parse_number(value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    number = float(str(value))
    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError(value)
    return int(number) if number.is_integer() else number


def _read_time(value, is_end_time=False, context_start_time=None):
    stored = STORED_TIME_RE.fullmatch(value)
    if stored:
        return f"{stored.group(1)}:{stored.group(2)}"
    return normalize_time(value, is_end_time=is_end_time, context_start_time=context_start_time)


def normalize_event_times(record, log_func=None):
    """
    Convert start_time/end_time to HH:MM in place and return any errors.
    Zero-padded HH:MM(:SS) values are taken as already stored and kept as-is.
    Anything else is read as typed; the end time uses the start time as
    context, so "7" after a "6p" start becomes 19:00.
    """
    log = log_func or print
    raw_start = record.get("start_time")
    raw_end = record.get("end_time")
    errors = []

    start = _read_time(raw_start) if raw_start else None
    end = _read_time(raw_end, is_end_time=True, context_start_time=start) if raw_end else None

    if raw_start and start is None:
        log(f"  Warning: could not read start time '{raw_start}' for '{record.get('name')}'")
        errors.append(f"Could not read start time '{raw_start}'")
    if raw_end and end is None:
        log(f"  Warning: could not read end time '{raw_end}' for '{record.get('name')}'")
        errors.append(f"Could not read end time '{raw_end}'")

    record["start_time"] = start
    record["end_time"] = end
    return errors


def prepare_record(module, form, existing_slugs=(), current_slug=None, log_func=None):
    """
    Clean a submitted form into a record ready to persist.
    - trims strings and turns blanks into None
    - normalizes URL fields, slug, status, numbers, and (for events) times
    - drops server-managed columns
    Returns (record, errors); errors is empty when the record can be saved.
    """
    record = {k: _clean(v) for k, v in form.items() if k not in SERVER_FIELDS}
    errors = []

    slug = record.get("slug")
    if slug and not is_valid_slug(slug):
        slug = slugify(slug)
    if not slug and record.get("name"):
        slug = slugify(record["name"])
    if slug:
        slug = ensure_unique_slug(existing_slugs, slug, exclude_slug=current_slug)
    else:
        errors.append("slug missing (cannot derive)")
    record["slug"] = slug or None

    for field_name in module.url_fields:
        if field_name in record:
            record[field_name] = normalize_url(record[field_name]) or None

    status = (record.get("status") or config.DEFAULT_STATUS).lower()
    record["status"] = status if status in config.STATUSES else config.DEFAULT_STATUS

    for field_name in module.int_fields:
        if record.get(field_name) is not None:
            try:
                record[field_name] = _parse_int(record[field_name])
            except ValueError:
                errors.append(f"{field_name} must be an integer")

    # unparseable numbers stay as typed and are reported by validate_record
    for field_name in module.number_fields:
        if record.get(field_name) is not None:
            try:
                record[field_name] = _parse_number(record[field_name])
            except ValueError:
                pass

    if module.name == "events":
        if not record.get("end_date"):
            record["end_date"] = record.get("start_date")
        errors.extend(normalize_event_times(record, log_func=log_func))

    if module.name == "routes" and record.get("difficulty"):
        difficulty = record["difficulty"].lower()
        record["difficulty"] = difficulty if difficulty in config.DIFFICULTIES else config.DEFAULT_DIFFICULTY

    errors.extend(validate_record(module, record).errors)

    return record, errors


def copy_payload(record):
    """Build the insert payload for a duplicated record (always a fresh draft)."""
    payload = {k: v for k, v in record.items() if k not in SERVER_FIELDS}
    name = record.get("name") or ""
    payload["name"] = f"{name} (copy)"
    payload["slug"] = f"{record['slug']}-copy" if record.get("slug") else slugify(f"{name} copy")
    payload["status"] = config.DEFAULT_STATUS
    payload["deleted_at"] = None
    return payload
