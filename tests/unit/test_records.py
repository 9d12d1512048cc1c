from ssa_admin.pipeline.records import copy_payload, prepare_record
from ssa_admin.registry import EVENTS, LOCATIONS, ROUTES


def test_prepare_event_record_normalizes_fields():
    form = {
        "name": "  Trail Cleanup ",
        "start_date": "2025-06-01",
        "start_time": "9a",
        "end_time": "12",
        "website_url": "ssa.org",
        "status": "PUBLISHED",
        "sort_order": "3",
        "created_at": "2025-01-01T00:00:00Z",
    }
    record, errors = prepare_record(EVENTS, form)

    assert errors == []
    assert record["name"] == "Trail Cleanup"
    assert record["slug"] == "trail-cleanup"
    assert record["end_date"] == "2025-06-01"
    assert record["start_time"] == "09:00"
    assert record["end_time"] == "12:00"
    assert record["website_url"] == "https://ssa.org"
    assert record["status"] == "published"
    assert record["sort_order"] == 3
    assert "created_at" not in record


def test_prepare_event_record_reads_end_time_against_start():
    record, _ = prepare_record(EVENTS, {"name": "Night Hike", "start_time": "6p", "end_time": "9"})
    assert (record["start_time"], record["end_time"]) == ("18:00", "21:00")

    record, _ = prepare_record(EVENTS, {"name": "Paddle", "start_time": "9:00", "end_time": "3"})
    assert (record["start_time"], record["end_time"]) == ("09:00", "15:00")


def test_prepare_event_record_rejects_unreadable_time():
    messages = []
    record, errors = prepare_record(EVENTS, {"name": "Swap Meet", "start_time": "soon"}, log_func=messages.append)

    assert record["start_time"] is None
    assert errors == ["Could not read start time 'soon'"]
    assert any("soon" in m for m in messages)


def test_prepare_event_record_keeps_stored_times():
    record, errors = prepare_record(EVENTS, {"name": "Dawn Paddle", "start_time": "06:30:00", "end_time": "11:00:00"})
    assert errors == []
    assert (record["start_time"], record["end_time"]) == ("06:30", "11:00")

    # short forms are still read as typed
    record, _ = prepare_record(EVENTS, {"name": "Dusk Paddle", "start_time": "6:30", "end_time": "9:00"})
    assert (record["start_time"], record["end_time"]) == ("06:30", "21:00")


def test_prepare_event_record_rejects_backwards_dates():
    _, errors = prepare_record(EVENTS, {"name": "Fair", "start_date": "2025-06-02", "end_date": "2025-06-01"})
    assert errors == ["End date must be after start date"]


def test_prepare_record_uniquifies_slug():
    record, _ = prepare_record(LOCATIONS, {"name": "Boathouse"}, existing_slugs=["boathouse"])
    assert record["slug"] == "boathouse-1"

    record, _ = prepare_record(
        LOCATIONS, {"name": "Boathouse"}, existing_slugs=["boathouse"], current_slug="boathouse"
    )
    assert record["slug"] == "boathouse"


def test_prepare_record_requires_name():
    record, errors = prepare_record(LOCATIONS, {"name": "   ", "status": "live"})
    assert record["status"] == "draft"
    assert "Name is required" in errors
    assert "slug missing (cannot derive)" in errors


def test_prepare_route_record_coerces_values():
    record, errors = prepare_record(ROUTES, {"name": "River Loop", "difficulty": "HARD", "duration_minutes": "90"})
    assert errors == []
    assert record["difficulty"] == "moderate"
    assert record["duration_minutes"] == 90

    record, errors = prepare_record(ROUTES, {"name": "Ridge", "duration_minutes": "abc", "sort_order": "x"})
    assert "sort_order must be an integer" in errors
    assert "Duration minutes must be a valid number" in errors


def test_copy_payload_creates_draft():
    original = {
        "id": 4,
        "name": "Hike",
        "slug": "hike",
        "status": "published",
        "created_at": "2025-01-01T00:00:00Z",
        "deleted_at": None,
        "location": "Park",
    }
    assert copy_payload(original) == {
        "name": "Hike (copy)",
        "slug": "hike-copy",
        "status": "draft",
        "deleted_at": None,
        "location": "Park",
    }
