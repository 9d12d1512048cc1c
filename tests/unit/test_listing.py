from datetime import date

from freezegun import freeze_time

from ssa_admin.listing import (
    filter_events_by_date_range,
    filter_events_by_keywords,
    format_day_header,
    format_event_date,
    format_range,
    get_all_keywords,
    get_month_name,
    group_events_by_day,
    group_events_by_month,
    next_weekend,
    ordered_day_keys,
    ordinal_suffix,
    upcoming_weekend,
)

EVENTS = [
    {"id": "a", "start_date": "2025-12-20", "end_date": "2025-12-21"},
    {"id": "b", "start_date": "2025-12-01", "end_date": "2025-12-02"},
    {"id": "c"},
    {"id": "d", "start_date": "2025-12-25"},
    {"id": "e", "start_date": "2025-12-21"},
]


def _ids(events):
    return [e["id"] for e in events]


def test_date_labels():
    assert format_event_date("2025-12-05") == "Fri, Dec 5th"
    assert format_event_date(None) == ""
    assert format_day_header("2025-12-21") == "Sunday, December 21st"
    assert format_day_header(None) == "TBA"
    assert get_month_name("2025-12-05") == "December 2025"
    assert get_month_name(None) == "TBA"


def test_ordinal_suffix():
    assert [ordinal_suffix(d) for d in (1, 2, 3, 4, 11, 12, 13, 21, 22, 23, 31)] == [
        "st", "nd", "rd", "th", "th", "th", "th", "st", "nd", "rd", "st",
    ]


def test_format_range():
    assert format_range(None, None) == ""
    assert format_range("9:00 AM", None) == "9:00 AM"
    assert format_range(None, "5:00 PM") == "5:00 PM"
    assert format_range("9:00 AM", "9:00 AM") == "9:00 AM"
    assert format_range("9:00 AM", "5:00 PM") == "9:00 AM – 5:00 PM"


def test_weekends_from_a_weekday():
    wednesday = date(2025, 12, 3)
    assert upcoming_weekend(wednesday) == {"from": "2025-12-05", "to": "2025-12-07"}
    assert next_weekend(wednesday) == {"from": "2025-12-12", "to": "2025-12-14"}


@freeze_time("2025-12-06")
def test_weekends_on_saturday():
    assert upcoming_weekend() == {"from": "2025-12-05", "to": "2025-12-07"}
    assert next_weekend() == {"from": "2025-12-12", "to": "2025-12-14"}


@freeze_time("2025-12-07")
def test_weekends_on_sunday():
    assert upcoming_weekend() == {"from": "2025-12-05", "to": "2025-12-07"}
    assert next_weekend() == {"from": "2025-12-12", "to": "2025-12-14"}


def test_filter_events_by_keywords_requires_all():
    events = [
        {"id": 1, "keywords": ["hike", "family"]},
        {"id": 2, "keywords": ["hike"]},
        {"id": 3},
    ]
    assert _ids(filter_events_by_keywords(events, ["hike", "family"])) == [1]
    assert _ids(filter_events_by_keywords(events, ["hike"])) == [1, 2]
    assert _ids(filter_events_by_keywords(events, [])) == [1, 2, 3]
    assert get_all_keywords(events) == ["family", "hike"]


def test_filter_events_by_date_range():
    assert _ids(filter_events_by_date_range(EVENTS)) == ["a", "b", "c", "d", "e"]
    assert _ids(filter_events_by_date_range(EVENTS, "2025-12-21")) == ["a", "c", "d", "e"]
    assert _ids(filter_events_by_date_range(EVENTS, "2025-12-21", "2025-12-22")) == ["a", "c", "e"]
    assert _ids(filter_events_by_date_range(EVENTS, None, "2025-12-10")) == ["b", "c"]
    assert _ids(filter_events_by_date_range(EVENTS, "2025-12-21T08:00:00Z")) == ["a", "c", "d", "e"]


def test_group_events_by_day_spreads_multi_day_events():
    events = [
        {"id": 1, "start_date": "2025-12-20", "end_date": "2025-12-22"},
        {"id": 2, "start_date": "2025-12-21"},
        {"id": 3},
    ]
    grouped = group_events_by_day(events)

    assert list(grouped) == ["2025-12-20", "2025-12-21", "2025-12-22", "TBA"]
    assert _ids(grouped["2025-12-21"]) == [1, 2]
    assert _ids(grouped["TBA"]) == [3]


def test_group_events_by_month():
    grouped = group_events_by_month(EVENTS)
    assert _ids(grouped["December 2025"]) == ["a", "b", "d", "e"]
    assert _ids(grouped["TBA"]) == ["c"]


def test_ordered_day_keys_sorts_and_trims_to_range():
    events = [
        {"id": 1, "start_date": "2025-12-22"},
        {"id": 2, "start_date": "2025-12-18", "end_date": "2025-12-21"},
        {"id": 3},
    ]
    grouped = group_events_by_day(events)

    assert ordered_day_keys(grouped) == [
        "2025-12-18", "2025-12-19", "2025-12-20", "2025-12-21", "2025-12-22", "TBA",
    ]
    assert ordered_day_keys(grouped, from_date="2025-12-20") == ["2025-12-20", "2025-12-21", "2025-12-22"]
    assert ordered_day_keys(grouped, to_date="2025-12-19") == ["2025-12-18", "2025-12-19", "TBA"]
