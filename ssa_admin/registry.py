from dataclasses import dataclass, field

from ssa_admin import config

STATUS_OPTIONS = [
    {"value": "draft", "label": "📝 Draft"},
    {"value": "published", "label": "✅ Published"},
    {"value": "archived", "label": "📦 Archived"},
]

DIFFICULTY_OPTIONS = [
    {"value": "easy", "label": "🟢 Easy"},
    {"value": "moderate", "label": "🟡 Moderate"},
    {"value": "challenging", "label": "🔴 Challenging"},
]


@dataclass
class ModuleDef:
    """Describe one admin module: its table, CSV layout, and field rules."""
    name: str
    table: str
    csv_headers: list
    required_fields: list = field(default_factory=lambda: ["name"])
    url_fields: list = field(default_factory=list)
    int_fields: list = field(default_factory=list)
    number_fields: list = field(default_factory=list)
    header_aliases: dict = field(default_factory=dict)
    order: list = field(default_factory=lambda: [("sort_order", True), ("name", True)])
    search_field: str = "name"
    upload_bucket: str = None
    upload_field: str = None


LOCATIONS = ModuleDef(
    name="locations",
    table="locations",
    csv_headers=["name", "slug", "region", "short_description", "website_url", "status", "sort_order"],
    url_fields=["website_url"],
    int_fields=["sort_order"],
)

EVENTS = ModuleDef(
    name="events",
    table="events",
    csv_headers=[
        "name", "slug", "host_org", "start_date", "end_date", "start_time", "end_time",
        "location", "recurrence", "website_url", "image_url", "status", "sort_order",
    ],
    url_fields=["website_url", "image_url"],
    int_fields=["sort_order"],
    header_aliases={
        "event name": "name",
        "event title": "name",
        "title": "name",
        "event date": "start_date",
        "date": "start_date",
        "start date": "start_date",
        "end date": "end_date",
        "start time": "start_time",
        "end time": "end_time",
        "event location": "location",
        "venue": "location",
        "website": "website_url",
        "url": "website_url",
        "event status": "status",
    },
    order=[("sort_order", True), ("start_date", True)],
    upload_bucket=config.EVENT_IMAGE_BUCKET,
    upload_field="image_url",
)

ROUTES = ModuleDef(
    name="routes",
    table="routes",
    csv_headers=[
        "name", "slug", "duration_minutes", "start_point", "end_point",
        "difficulty", "notes", "status", "sort_order",
    ],
    url_fields=["gpx_url"],
    int_fields=["sort_order"],
    number_fields=["duration_minutes"],
    header_aliases={
        "title": "name",
        "route": "name",
        "start": "start_point",
        "start point": "start_point",
        "end": "end_point",
        "end point": "end_point",
        "duration": "duration_minutes",
        "minutes": "duration_minutes",
        "difficulty_level": "difficulty",
        "desc": "notes",
        "description": "notes",
        "sort": "sort_order",
        "order": "sort_order",
    },
    upload_bucket=config.ROUTE_GPX_BUCKET,
    upload_field="gpx_url",
)

MODULES = {m.name: m for m in (LOCATIONS, EVENTS, ROUTES)}


def get_module(name):
    """Look up a module definition by name, raising KeyError with the valid choices."""
    try:
        return MODULES[name]
    except KeyError:
        raise KeyError(f"Unknown module '{name}' (expected one of: {', '.join(MODULES)})") from None
