"""
Event listing helpers used by the public events widget.
Filtering by keywords and date range, grouping by month or day, and the
date labels shown above each group.
"""

from datetime import date, timedelta

from dateutil import parser as date_parser

from ssa_admin.utils.dates import normalize_date_string

TBA = "TBA"


def _parse_date(date_string):
    """Read YYYY-MM-DD as a plain calendar date, falling back to dateutil."""
    if not date_string:
        return None
    try:
        return date.fromisoformat(date_string[:10])
    except ValueError:
        pass
    try:
        return date_parser.parse(date_string).date()
    except (ValueError, OverflowError):
        return None


def ordinal_suffix(day):
    if 3 < day < 21:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_range(start, end):
    if not start and not end:
        return ""
    if start and not end:
        return start
    if end and not start:
        return end
    return start if start == end else f"{start} – {end}"


def format_event_date(date_string):
    """'2025-12-05' -> 'Fri, Dec 5th'."""
    d = _parse_date(date_string)
    if not d:
        return ""
    return f"{d.strftime('%a')}, {d.strftime('%b')} {d.day}{ordinal_suffix(d.day)}"


def format_day_header(date_string):
    """'2025-12-05' -> 'Friday, December 5th'."""
    d = _parse_date(date_string)
    if not d:
        return TBA
    return f"{d.strftime('%A')}, {d.strftime('%B')} {d.day}{ordinal_suffix(d.day)}"


def get_month_name(date_string):
    d = _parse_date(date_string)
    if not d:
        return TBA
    return d.strftime("%B %Y")


def get_all_keywords(events):
    keywords = set()
    for event in events:
        keywords.update(event.get("keywords") or [])
    return sorted(keywords)


def upcoming_weekend(today=None):
    """
    Friday through Sunday of the current weekend.
    On Friday, Saturday, or Sunday that is the weekend in progress.
    """
    today = today or date.today()
    weekday = today.weekday()  # Monday = 0, Friday = 4, Sunday = 6

    if weekday >= 4:
        friday = today - timedelta(days=weekday - 4)
    else:
        friday = today + timedelta(days=4 - weekday)
    sunday = friday + timedelta(days=2)
    return {"from": friday.isoformat(), "to": sunday.isoformat()}


def next_weekend(today=None):
    """Friday through Sunday of the weekend after upcoming_weekend()."""
    today = today or date.today()
    weekday = today.weekday()

    if weekday >= 4:
        friday = today + timedelta(days=11 - weekday)
    else:
        friday = today + timedelta(days=4 - weekday + 7)
    sunday = friday + timedelta(days=2)
    return {"from": friday.isoformat(), "to": sunday.isoformat()}


def filter_events_by_keywords(events, selected_keywords):
    """Keep events tagged with every selected keyword."""
    if not selected_keywords:
        return list(events)
    return [
        e for e in events
        if e.get("keywords") and all(kw in e["keywords"] for kw in selected_keywords)
    ]


def filter_events_by_date_range(events, from_date=None, to_date=None):
    """
    Keep events that overlap [from_date, to_date].
    - undated events are always kept
    - an event still running on from_date counts, even if it started earlier
    - events starting after to_date are dropped
    """
    if not from_date and not to_date:
        return list(events)

    from_date = normalize_date_string(from_date)
    to_date = normalize_date_string(to_date)

    def in_range(event):
        start = normalize_date_string(event.get("start_date"))
        end = normalize_date_string(event.get("end_date"))

        if not start and not end:
            return True
        if from_date:
            starts_after = start and start >= from_date
            ends_after = end and end >= from_date
            if not (starts_after or ends_after):
                return False
        if to_date and start and start > to_date:
            return False
        return True

    return [e for e in events if in_range(e)]


def group_events_by_month(events):
    grouped = {}
    for event in events:
        grouped.setdefault(get_month_name(event.get("start_date")), []).append(event)
    return grouped


def group_events_by_day(events):
    """
    Map YYYY-MM-DD -> events active that day.
    Multi-day events appear under every day they run; undated events go under TBA.
    """
    grouped = {}
    for event in events:
        start = _parse_date(event.get("start_date"))
        if not start:
            grouped.setdefault(TBA, []).append(event)
            continue

        end = _parse_date(event.get("end_date")) or start
        current = start
        while current <= end:
            day_events = grouped.setdefault(current.isoformat(), [])
            if not any(e is event or (e.get("id") is not None and e.get("id") == event.get("id")) for e in day_events):
                day_events.append(event)
            current += timedelta(days=1)
    return grouped


def ordered_day_keys(grouped, from_date=None, to_date=None):
    """
    Day keys of group_events_by_day() in display order, TBA last.
    With a date range, days outside it are dropped, and TBA is hidden once
    a from_date is set.
    """
    from_date = normalize_date_string(from_date)
    to_date = normalize_date_string(to_date)

    keys = sorted(k for k in grouped if k != TBA)
    if from_date:
        keys = [k for k in keys if k >= from_date]
    if to_date:
        keys = [k for k in keys if k <= to_date]
    if TBA in grouped and not from_date:
        keys.append(TBA)
    return keys
