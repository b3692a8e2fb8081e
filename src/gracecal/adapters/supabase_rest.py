"""Hosted database adapter - PostgREST (Supabase) over HTTP."""

import logging
from datetime import tzinfo

import requests

from gracecal.config import Config
from gracecal.core.calendar import Event
from gracecal.core.errors import InvalidRecordError
from gracecal.core.occurrences import Person
from gracecal.core.rsvp import RSVP
from gracecal.core.tasks import Task

from .errors import DataStoreError, NotFoundError

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"
TIMEOUT = 30


class SupabaseAdapter:
    """
    PostgREST adapter for the church's hosted tables.

    Implements EventRepository, PersonRepository, TaskRepository and
    RSVPRepository. No business logic - just I/O and row parsing.
    """

    def __init__(self, config: Config, session: requests.Session | None = None):
        if not config.supabase_url or not config.supabase_key:
            raise DataStoreError("SUPABASE_URL and SUPABASE_KEY must be set in gracecal.conf")
        self.base_url = f"{config.supabase_url.rstrip('/')}{REST_PATH}"
        self.church_id = config.church_id
        self.tz: tzinfo | None = config.tzinfo
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": config.supabase_key,
                "Authorization": f"Bearer {config.supabase_key}",
                "Content-Type": "application/json",
            }
        )

    def _scope(self, params: dict) -> dict:
        if self.church_id:
            params["church_id"] = f"eq.{self.church_id}"
        return params

    def _request(self, method: str, table: str, **kwargs) -> list[dict]:
        url = f"{self.base_url}/{table}"
        try:
            resp = self._session.request(method, url, timeout=TIMEOUT, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise DataStoreError(f"{method} {table} failed: {e}") from e
        if not resp.content:
            return []
        return resp.json()

    def _select(self, table: str, order: str | None = None, **filters: str) -> list[dict]:
        params = {"select": "*", **{k: f"eq.{v}" for k, v in filters.items()}}
        if order:
            params["order"] = order
        return self._request("GET", table, params=self._scope(params))

    def _parse_rows(self, table: str, rows: list[dict], parse) -> list:
        items = []
        for row in rows:
            try:
                items.append(parse(row))
            except InvalidRecordError as e:
                logger.warning(f"Skipping row in {table}: {e}")
        return items

    def _one(self, table: str, record_id: str) -> dict:
        rows = self._select(table, id=record_id)
        if not rows:
            raise NotFoundError(f"No record {record_id!r} in {table}")
        return rows[0]

    # Events

    def list_events(self) -> list[Event]:
        rows = self._select("calendar_events", order="start_date")
        return self._parse_rows("calendar_events", rows, lambda row: Event.from_record(row, self.tz))

    def get_event(self, event_id: str) -> Event:
        return Event.from_record(self._one("calendar_events", event_id), self.tz)

    # People

    def list_people(self) -> list[Person]:
        rows = self._select("people", order="last_name")
        return self._parse_rows("people", rows, Person.from_record)

    # Tasks

    def list_tasks(self) -> list[Task]:
        rows = self._select("tasks", order="due_date")
        return self._parse_rows("tasks", rows, Task.from_record)

    def get_task(self, task_id: str) -> Task:
        return Task.from_record(self._one("tasks", task_id))

    def add_task(self, task: Task) -> None:
        row = task.to_record()
        if self.church_id:
            row["church_id"] = self.church_id
        self._request("POST", "tasks", json=row, headers={"Prefer": "return=minimal"})

    def mark_completed(self, task_id: str) -> None:
        rows = self._request(
            "PATCH",
            "tasks",
            params=self._scope({"id": f"eq.{task_id}"}),
            json={"completed": True},
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise NotFoundError(f"No record {task_id!r} in tasks")

    # RSVPs

    def list_rsvps(self, event_id: str | None = None) -> list[RSVP]:
        filters = {"event_id": event_id} if event_id else {}
        rows = self._select("event_rsvps", **filters)
        return self._parse_rows("event_rsvps", rows, RSVP.from_record)

    def save_rsvp(self, rsvp: RSVP) -> None:
        """Upsert on (event_id, person_id) so the latest answer replaces the old one."""
        row = rsvp.to_record()
        if self.church_id:
            row["church_id"] = self.church_id
        self._request(
            "POST",
            "event_rsvps",
            params={"on_conflict": "event_id,person_id"},
            json=row,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )
