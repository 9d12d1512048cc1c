from datetime import date, datetime, timedelta, timezone

import pytest

from ssa_admin.utils.dates import (
    format_display_time,
    format_duration,
    format_iso,
    normalize_date_string,
    normalize_time,
    normalize_url,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2:30 PM", "14:30"),
        ("9:15 AM", "09:15"),
        ("12:00 PM", "12:00"),
        ("12:15 am", "00:15"),
        ("2p", "14:00"),
        ("9a", "09:00"),
        ("2:30p", "14:30"),
        ("12a", "00:00"),
        ("12p", "12:00"),
        ("11 pm", "23:00"),
        ("1P", "13:00"),
        ("9A", "09:00"),
        ("14:30", "14:30"),
        ("9:00", "09:00"),
        ("7", "07:00"),
        ("11", "11:00"),
        ("12", "12:00"),
    ],
)
def test_normalize_time_start_times(raw, expected):
    assert normalize_time(raw) == expected


def test_normalize_time_rejects_unreadable_input():
    assert normalize_time(None) is None
    assert normalize_time("") is None
    assert normalize_time("invalid") is None
    assert normalize_time("0") is None
    assert normalize_time("13") is None
    assert normalize_time("2:3") is None
    assert normalize_time(" 2p") is None


def test_normalize_time_bare_end_hour_without_start_is_pm():
    assert normalize_time("7", is_end_time=True) == "19:00"
    assert normalize_time("10", is_end_time=True) == "22:00"
    assert normalize_time("12", is_end_time=True) == "12:00"


def test_normalize_time_bare_end_hour_uses_start_context():
    # morning start: only wrap past noon when the end hour is smaller
    assert normalize_time("7", is_end_time=True, context_start_time="06:00") == "07:00"
    assert normalize_time("3", is_end_time=True, context_start_time="09:00") == "15:00"
    assert normalize_time("11", is_end_time=True, context_start_time="10:30") == "11:00"
    # afternoon start always pushes the end to PM
    assert normalize_time("9", is_end_time=True, context_start_time="18:00") == "21:00"
    assert normalize_time("10", is_end_time=True, context_start_time="14:00") == "22:00"
    # unreadable start behaves like a PM start
    assert normalize_time("5", is_end_time=True, context_start_time="soon") == "17:00"


def test_normalize_time_24_hour_end_time_ignores_context():
    assert normalize_time("9:00", is_end_time=True) == "21:00"
    assert normalize_time("9:00", is_end_time=True, context_start_time="08:00") == "21:00"
    assert normalize_time("14:30", is_end_time=True) == "14:30"
    assert normalize_time("12:00", is_end_time=True) == "12:00"
    assert normalize_time("0:30", is_end_time=True) == "00:30"


def test_normalize_time_suffix_forms_ignore_end_role():
    assert normalize_time("9a", is_end_time=True) == "09:00"
    assert normalize_time("9:15 AM", is_end_time=True) == "09:15"


def test_normalize_time_output_is_stable():
    inputs = ["2:30 PM", "9a", "12a", "7", "1P", "14:30", "11:05 pm"]
    for raw in inputs:
        out = normalize_time(raw)
        assert normalize_time(out) == out


def test_format_display_time():
    assert format_display_time(None) == "—"
    assert format_display_time("") == "—"
    assert format_display_time("00:30") == "12:30 AM"
    assert format_display_time("09:05") == "9:05 AM"
    assert format_display_time("12:00:00") == "12:00 PM"
    assert format_display_time("14:30") == "2:30 PM"
    assert format_display_time("23:59") == "11:59 PM"
    assert format_display_time("noon") == "noon"


def test_format_iso():
    assert format_iso(date(2024, 1, 15)) == "2024-01-15"
    assert format_iso(datetime(2024, 12, 31, 9, 0)) == "2024-12-31"
    eastern = timezone(timedelta(hours=-5))
    assert format_iso(datetime(2024, 12, 31, 23, 30, tzinfo=eastern)) == "2025-01-01"


def test_normalize_url():
    assert normalize_url("example.com") == "https://example.com"
    assert normalize_url("  example.com  ") == "https://example.com"
    assert normalize_url("http://example.com") == "http://example.com"
    assert normalize_url("HTTPS://Example.com") == "HTTPS://Example.com"
    assert normalize_url(None) == ""
    assert normalize_url("   ") == ""


def test_normalize_date_string():
    assert normalize_date_string(None) is None
    assert normalize_date_string("2025-12-05") == "2025-12-05"
    assert normalize_date_string("2025-12-05T10:00:00Z") == "2025-12-05"
    assert normalize_date_string("12/05/2025") == "2025-12-05"
    assert normalize_date_string("garbage") == "garbage"


def test_format_duration():
    assert format_duration("09:00", "10:30") == "1 hr 30 min"
    assert format_duration("09:00", "09:45") == "45 min"
    assert format_duration("09:00:00", "11:00:00") == "2 hr"
    assert format_duration("10:00", "09:00") == ""
    assert format_duration(None, "09:00") == ""
    assert format_duration("later", "09:00") == ""


def test_normalize_time_only_reads_ascii_digits():
    assert normalize_time("٧") is None
    assert normalize_time("١٤:٣٠") is None
    assert normalize_time("7٣p") is None
    assert format_display_time("١٤:٣٠") == "١٤:٣٠"
