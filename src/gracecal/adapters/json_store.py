"""File-based JSON data store adapter."""

import json
import logging
from datetime import tzinfo
from pathlib import Path
from typing import Callable, TypeVar

from gracecal.core.calendar import Event
from gracecal.core.errors import InvalidRecordError
from gracecal.core.occurrences import Person
from gracecal.core.rsvp import RSVP
from gracecal.core.tasks import Task

from .errors import DataStoreError, NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonDataStore:
    """
    JSON file storage.

    Implements EventRepository, PersonRepository, TaskRepository and
    RSVPRepository. One file per collection, each a JSON list of rows.
    """

    EVENTS = "events.json"
    PEOPLE = "people.json"
    TASKS = "tasks.json"
    RSVPS = "rsvps.json"

    def __init__(self, data_dir: Path | str, tz: tzinfo | None = None):
        self.data_dir = Path(data_dir).expanduser()
        self.tz = tz

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def _read_rows(self, name: str) -> list[dict]:
        path = self._path(name)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise DataStoreError(f"{path} is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise DataStoreError(f"{path} must contain a JSON list")
        return data

    def _write_rows(self, name: str, rows: list[dict]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._path(name).write_text(json.dumps(rows, indent=2))

    def _load(self, name: str, parse: Callable[[dict], T]) -> list[T]:
        """Parse every row, skipping (and logging) malformed ones."""
        items = []
        for row in self._read_rows(name):
            try:
                items.append(parse(row))
            except InvalidRecordError as e:
                logger.warning(f"Skipping record in {name}: {e}")
        return items

    def _find_row(self, name: str, record_id: str) -> dict:
        for row in self._read_rows(name):
            if str(row.get("id")) == record_id:
                return row
        raise NotFoundError(f"No record {record_id!r} in {name}")

    # Events

    def list_events(self) -> list[Event]:
        return self._load(self.EVENTS, lambda row: Event.from_record(row, self.tz))

    def get_event(self, event_id: str) -> Event:
        return Event.from_record(self._find_row(self.EVENTS, event_id), self.tz)

    # People

    def list_people(self) -> list[Person]:
        return self._load(self.PEOPLE, Person.from_record)

    # Tasks

    def list_tasks(self) -> list[Task]:
        return self._load(self.TASKS, Task.from_record)

    def get_task(self, task_id: str) -> Task:
        return Task.from_record(self._find_row(self.TASKS, task_id))

    def add_task(self, task: Task) -> None:
        rows = self._read_rows(self.TASKS)
        if any(str(row.get("id")) == task.id for row in rows):
            raise DataStoreError(f"Task {task.id!r} already exists")
        rows.append(task.to_record())
        self._write_rows(self.TASKS, rows)

    def mark_completed(self, task_id: str) -> None:
        rows = self._read_rows(self.TASKS)
        for row in rows:
            if str(row.get("id")) == task_id:
                row["completed"] = True
                self._write_rows(self.TASKS, rows)
                return
        raise NotFoundError(f"No record {task_id!r} in {self.TASKS}")

    # RSVPs

    def list_rsvps(self, event_id: str | None = None) -> list[RSVP]:
        rsvps = self._load(self.RSVPS, RSVP.from_record)
        if event_id is not None:
            rsvps = [r for r in rsvps if r.event_id == event_id]
        return rsvps

    def save_rsvp(self, rsvp: RSVP) -> None:
        """Replace this person's row for the event, or append one. Other rows are kept as stored."""
        rows = []
        replaced = False
        for row in self._read_rows(self.RSVPS):
            if (str(row.get("event_id")), str(row.get("person_id"))) != rsvp.key:
                rows.append(row)
            elif not replaced:
                rows.append(rsvp.to_record())
                replaced = True
        if not replaced:
            rows.append(rsvp.to_record())
        self._write_rows(self.RSVPS, rows)
