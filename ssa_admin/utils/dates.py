import re
from datetime import datetime, timezone

from dateutil import parser as date_parser

from ssa_admin import config

ABBREV_RE = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*([ap]m?)", re.IGNORECASE | re.ASCII)
AMPM_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM|am|pm)", re.ASCII)
TIME_24_RE = re.compile(r"(\d{1,2}):(\d{2})", re.ASCII)
SINGLE_SUFFIX_RE = re.compile(r"(\d{1,2})([AP])", re.IGNORECASE | re.ASCII)
SINGLE_NUMBER_RE = re.compile(r"(\d{1,2})", re.ASCII)

DISPLAY_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})(?::\d{2})?", re.ASCII)
ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
URL_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE | re.ASCII)


def _leading_int(text):
    """Parse the leading integer of a string, or None if it has no digits."""
    match = re.match(r"\s*([+-]?\d+)", text or "", re.ASCII)
    return int(match.group(1)) if match else None


def _to_24(hours, is_pm):
    if is_pm:
        return hours if hours == 12 else hours + 12
    return 0 if hours == 12 else hours


def _end_hour(hours, context_start_time):
    """
    Resolve a bare 1-11 end hour against the start time.
    An AM start only pushes the end past noon when the end hour is smaller;
    a PM (or unreadable) start, or no start at all, always does.
    """
    if not context_start_time:
        return hours + 12

    start_hour = _leading_int(context_start_time.split(":")[0])
    if start_hour is not None and 0 <= start_hour <= 11:
        return hours + 12 if hours < start_hour else hours
    return hours + 12


def normalize_time(time_str, is_end_time=False, context_start_time=None):
    """
    Normalize a hand-typed time to HH:MM 24-hour format.
    Handles, in this order:
      - abbreviated: "2p", "9a", "2:30p", "12a"
      - 12-hour: "2:30 PM", "9:15 AM"
      - 24-hour: "14:30", "09:15" (end times 1-11 are read as PM)
      - single number with suffix: "1P", "9A", "12P"
      - bare number: "7", "11", "12" (end times resolved against the start)
    Returns None when nothing matches.
    """
    if not time_str:
        return None

    match = ABBREV_RE.fullmatch(time_str)
    if match:
        hours = _to_24(int(match.group(1)), match.group(3).lower().startswith("p"))
        minutes = match.group(2) or "00"
        return f"{hours:02d}:{minutes}"

    match = AMPM_RE.fullmatch(time_str)
    if match:
        hours = _to_24(int(match.group(1)), match.group(3).upper() == "PM")
        return f"{hours:02d}:{match.group(2)}"

    match = TIME_24_RE.fullmatch(time_str)
    if match:
        hours = int(match.group(1))
        if is_end_time and 1 <= hours <= 11:
            hours += 12
        return f"{hours:02d}:{match.group(2)}"

    match = SINGLE_SUFFIX_RE.fullmatch(time_str)
    if match:
        hours = int(match.group(1))
        if match.group(2).upper() == "A":
            if hours == 12:
                hours = 0
        elif 1 <= hours <= 11:
            hours += 12
        return f"{hours:02d}:00"

    match = SINGLE_NUMBER_RE.fullmatch(time_str)
    if match:
        hours = int(match.group(1))
        if 1 <= hours <= 11:
            if is_end_time:
                hours = _end_hour(hours, context_start_time)
            return f"{hours:02d}:00"
        if hours == 12:
            return "12:00"

    return None


def format_display_time(time_str):
    """
    Format an HH:MM or HH:MM:SS value as 12-hour time ("2:30 PM").
    Empty input renders as an em dash; anything unrecognized is returned as-is.
    """
    if not time_str:
        return config.EMPTY_DISPLAY

    match = DISPLAY_TIME_RE.fullmatch(time_str)
    if not match:
        return time_str

    hours = int(match.group(1))
    minutes = match.group(2)

    if hours == 0:
        return f"12:{minutes} AM"
    if hours < 12:
        return f"{hours}:{minutes} AM"
    if hours == 12:
        return f"12:{minutes} PM"
    return f"{hours - 12}:{minutes} PM"


def format_iso(value):
    """Format a date or datetime as YYYY-MM-DD (aware datetimes are read in UTC)."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    return value.isoformat()


def normalize_url(url):
    """Trim a URL and add https:// when no http(s) scheme is present."""
    if not url:
        return ""
    url = url.strip()
    if not url:
        return ""
    if URL_SCHEME_RE.match(url):
        return url
    return f"https://{url}"


def normalize_date_string(date_str):
    """
    Reduce a date or timestamp string to YYYY-MM-DD for date-only comparisons.
    Returns the date part unchanged when it cannot be parsed.
    """
    if not date_str:
        return None

    date_part = date_str.split("T")[0]
    if ISO_DATE_RE.fullmatch(date_part):
        return date_part

    try:
        return date_parser.parse(date_part).strftime("%Y-%m-%d")
    except (ValueError, OverflowError):
        return date_part


def _minutes_of_day(time_str):
    parts = time_str.split(":")
    if len(parts) < 2:
        return None
    hours = _leading_int(parts[0])
    minutes = _leading_int(parts[1])
    if hours is None or minutes is None:
        return None
    return hours * 60 + minutes


def format_duration(start_time, end_time):
    """Describe the span between two HH:MM times, e.g. "1 hr 30 min"."""
    if not start_time or not end_time:
        return ""

    start = _minutes_of_day(start_time)
    end = _minutes_of_day(end_time)
    if start is None or end is None or end < start:
        return ""

    hours, minutes = divmod(end - start, 60)
    if hours == 0:
        return f"{minutes} min"
    if minutes == 0:
        return f"{hours} hr"
    return f"{hours} hr {minutes} min"
