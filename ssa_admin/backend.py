import random
import time
from datetime import datetime

import requests

from ssa_admin import config
from ssa_admin.pipeline.records import copy_payload
from ssa_admin.pipeline.status import transition
from ssa_admin.uploads import (
    GPX_CONTENT_TYPE,
    gpx_object_path,
    image_object_path,
    inspect_gpx,
    inspect_image,
)


class BackendError(Exception):
    """Raised when the REST or storage API rejects a request."""

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)


def _now():
    return datetime.utcnow().isoformat() + "Z"


def _in_filter(values):
    return "in.(" + ",".join(str(v) for v in values) + ")"


class BackendClient:
    """
    Thin client for the hosted PostgREST database and storage API.
    Every read filters out soft-deleted rows unless asked otherwise.
    """

    def __init__(self, url=None, key=None, session=None, timeout=None, max_retries=None):
        self.url = (url or config.SUPABASE_URL).rstrip("/")
        self.key = key or config.SUPABASE_SERVICE_KEY or config.SUPABASE_ANON_KEY
        self.session = session or requests.Session()
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else config.MAX_RETRIES

        if not self.url or not self.key:
            raise BackendError("Missing SUPABASE_URL or API key")
        if self.max_retries < 1:
            raise BackendError(f"MAX_RETRIES must be at least 1 (got {self.max_retries})")

    def _headers(self, extra=None):
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method, path, headers=None, **kwargs):
        """Send a request, retrying timeouts, connection errors, and 5xx responses."""
        url = f"{self.url}{path}"

        for attempt in range(self.max_retries):
            try:
                resp = self.session.request(
                    method, url, headers=self._headers(headers), timeout=self.timeout, **kwargs
                )
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                if attempt < self.max_retries - 1:
                    wait = (2 ** attempt) + random.uniform(0, 1)
                    print(f"    Retry {attempt + 1}/{self.max_retries} after {type(e).__name__}...")
                    time.sleep(wait)
                    continue
                raise BackendError(f"{method} {path} failed: {e}") from e

            if resp.status_code >= 500 and attempt < self.max_retries - 1:
                time.sleep((2 ** attempt) + random.uniform(0, 1))
                continue

            if resp.status_code >= 400:
                raise BackendError(self._error_message(resp), status_code=resp.status_code)

            if not resp.content:
                return None
            return resp.json()

        return None

    @staticmethod
    def _error_message(resp):
        try:
            body = resp.json()
        except ValueError:
            return f"HTTP {resp.status_code}: {resp.text[:200]}"
        if isinstance(body, dict):
            return body.get("message") or body.get("error") or f"HTTP {resp.status_code}"
        return f"HTTP {resp.status_code}"

    def _rest(self, table):
        return f"/rest/v1/{table}"

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def list_records(self, table, search=None, search_field="name", order=None, select="*", include_deleted=False):
        """
        List records, optionally narrowed by a case-insensitive search.
        order is a list of (column, ascending) pairs.
        """
        params = {"select": select}
        if not include_deleted:
            params["deleted_at"] = "is.null"
        if search and search.strip():
            params[search_field] = f"ilike.%{search}%"
        if order:
            params["order"] = ",".join(f"{col}.{'asc' if asc else 'desc'}" for col, asc in order)
        return self._request("GET", self._rest(table), params=params) or []

    def get_record(self, table, record_id, include_deleted=False):
        params = {"select": "*", "id": f"eq.{record_id}"}
        if not include_deleted:
            params["deleted_at"] = "is.null"
        rows = self._request("GET", self._rest(table), params=params) or []
        if not rows:
            raise BackendError(f"No {table} record with id {record_id}", status_code=404)
        return rows[0]

    def create_record(self, table, record):
        rows = self._request(
            "POST", self._rest(table), json=record, headers={"Prefer": "return=representation"}
        )
        return rows[0] if rows else None

    def update_record(self, table, record_id, fields):
        fields = dict(fields, updated_at=fields.get("updated_at") or _now())
        rows = self._request(
            "PATCH",
            self._rest(table),
            params={"id": f"eq.{record_id}"},
            json=fields,
            headers={"Prefer": "return=representation"},
        )
        return rows[0] if rows else None

    def bulk_update(self, table, record_ids, fields):
        """Apply the same fields to many rows at once. Returns the updated rows."""
        if not record_ids:
            return []
        fields = dict(fields, updated_at=fields.get("updated_at") or _now())
        return self._request(
            "PATCH",
            self._rest(table),
            params={"id": _in_filter(record_ids)},
            json=fields,
            headers={"Prefer": "return=representation"},
        ) or []

    def upsert_records(self, table, records, on_conflict="slug"):
        if not records:
            return []
        return self._request(
            "POST",
            self._rest(table),
            params={"on_conflict": on_conflict},
            json=records,
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        ) or []

    def soft_delete(self, table, record_ids):
        return self.bulk_update(table, record_ids, {"deleted_at": _now()})

    def restore(self, table, record_ids):
        return self.bulk_update(table, record_ids, {"deleted_at": None})

    def set_status(self, table, record_id, target):
        """Move one record through the status workflow; raises StatusTransitionError if not allowed."""
        record = self.get_record(table, record_id)
        payload = transition(record, target)
        if not payload:
            return record
        return self.update_record(table, record_id, payload)

    def copy_record(self, table, record_id):
        record = self.get_record(table, record_id)
        return self.create_record(table, copy_payload(record))

    # ------------------------------------------------------------------
    # Keywords
    # ------------------------------------------------------------------

    def fetch_keywords(self):
        """Return every keyword name, lowercased and sorted."""
        rows = self._request(
            "GET", self._rest("keywords"), params={"select": "id,name", "order": "name.asc"}
        ) or []
        return sorted(r["name"].lower() for r in rows if r.get("name"))

    def attach_keywords(self, events):
        """Set a lowercased keywords list on each event from the event_keywords join table."""
        event_ids = [e["id"] for e in events if e.get("id") is not None]
        for event in events:
            event["keywords"] = []
        if not event_ids:
            return events

        relations = self._request(
            "GET",
            self._rest("event_keywords"),
            params={"select": "event_id,keyword_id", "event_id": _in_filter(event_ids)},
        ) or []
        keyword_ids = sorted({r["keyword_id"] for r in relations})
        if not keyword_ids:
            return events

        keywords = self._request(
            "GET",
            self._rest("keywords"),
            params={"select": "id,name", "id": _in_filter(keyword_ids)},
        ) or []
        names = {k["id"]: k["name"].lower() for k in keywords}

        by_event = {}
        for rel in relations:
            name = names.get(rel["keyword_id"])
            if name:
                by_event.setdefault(rel["event_id"], []).append(name)

        for event in events:
            event["keywords"] = by_event.get(event.get("id"), [])
        return events

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def public_url(self, bucket, object_path):
        return f"{self.url}/storage/v1/object/public/{bucket}/{object_path}"

    def upload_object(self, bucket, object_path, data, content_type):
        self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{object_path}",
            data=data,
            headers={
                "Content-Type": content_type,
                "Cache-Control": f"max-age={config.UPLOAD_CACHE_CONTROL}",
                "x-upsert": "false",
            },
        )
        return self.public_url(bucket, object_path)

    def upload_file(self, module, filename, data, record=None):
        """
        Check and upload a file for a module's upload slot.
        Events take images, routes take GPX tracks. Returns the public URL.
        """
        record = record or {}
        if module.name == "events":
            content_type = inspect_image(data)
            object_path = image_object_path(filename)
        elif module.name == "routes":
            inspect_gpx(data)
            content_type = GPX_CONTENT_TYPE
            object_path = gpx_object_path(filename, slug=record.get("slug"), name=record.get("name"))
        else:
            raise BackendError(f"{module.name} records do not accept uploads")

        return self.upload_object(module.upload_bucket, object_path, data, content_type)
