"""Shared workflow layer between the CLI and any other front end.

Each function loads what it needs from the configured store, runs the pure
core over it, and (where there is one) writes the result back.
"""

import logging
import uuid
from datetime import date, timedelta
from pathlib import Path

from .adapters.errors import DataStoreError, NotFoundError
from .adapters.json_store import JsonDataStore
from .adapters.supabase_rest import SupabaseAdapter
from .config import Config
from .core import ical, links
from .core.calendar import CalendarFilter, Event, expand_events
from .core.occurrences import DayBucket, DerivedOccurrence, month_view, upcoming_agenda
from .core.rsvp import RSVP, RSVPStatus, RSVPSummary, summarize
from .core.tasks import Task, TaskChain, chain_for, complete_task
from .ports import DataStore

logger = logging.getLogger(__name__)


def get_store(config: Config) -> DataStore:
    """Resolve the data store from config."""
    if config.data_backend == "supabase":
        return SupabaseAdapter(config)
    if config.data_backend != "json":
        raise DataStoreError(f"Unknown DATA_BACKEND '{config.data_backend}' (use json or supabase)")
    return JsonDataStore(config.data_path, tz=config.tzinfo)


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    first = date(year, month, 1)
    next_first = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return first, next_first - timedelta(days=1)


def build_month(
    config: Config,
    year: int,
    month: int,
    calendar_filter: CalendarFilter | None = None,
    store: DataStore | None = None,
) -> dict[date, DayBucket]:
    """Day buckets for a month, recurring events expanded into the month."""
    store = store or get_store(config)
    tz = config.tzinfo
    first, last = _month_bounds(year, month)
    events = expand_events(store.list_events(), first, last, tz)
    return month_view(year, month, events, store.list_people(), calendar_filter, tz)


def build_upcoming(
    config: Config,
    reference_date: date | None = None,
    days: int | None = None,
    calendar_filter: CalendarFilter | None = None,
    store: DataStore | None = None,
) -> list[Event | DerivedOccurrence]:
    """Events, birthdays and anniversaries coming up in the next N days."""
    store = store or get_store(config)
    tz = config.tzinfo
    reference_date = reference_date or date.today()
    days = config.upcoming_days if days is None else days
    events = expand_events(store.list_events(), reference_date, reference_date + timedelta(days=days), tz)
    return upcoming_agenda(events, store.list_people(), reference_date, days, calendar_filter, tz)


def export_calendar(
    config: Config,
    output: Path | None = None,
    event_ids: list[str] | None = None,
    store: DataStore | None = None,
) -> Path:
    """Write the .ics document for all (or the chosen) events. Returns the path."""
    store = store or get_store(config)
    if event_ids:
        events = [store.get_event(event_id) for event_id in event_ids]
    else:
        events = store.list_events()
    content = ical.export_document(events, config.church_name, config.calendar_name or None)
    path = output or Path.cwd() / ical.download_filename(config.church_name)
    # newline="" keeps the CRLF line endings intact
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    logger.info(f"Exported {len(events)} events to {path} as {ical.CONTENT_TYPE}")
    return path


def event_link(config: Config, event_id: str, provider: str, store: DataStore | None = None) -> str:
    store = store or get_store(config)
    return links.add_event_url(store.get_event(event_id), provider)


def record_rsvp(
    config: Config,
    event_id: str,
    person_id: str,
    status: str,
    guest_count: int = 0,
    store: DataStore | None = None,
) -> RSVPSummary:
    """Save an RSVP (replacing any earlier one) and return the event's new totals."""
    store = store or get_store(config)
    store.get_event(event_id)
    rsvp = RSVP(event_id=event_id, person_id=person_id, status=RSVPStatus(status), guest_count=guest_count)
    store.save_rsvp(rsvp)
    logger.info(f"RSVP {status} from {person_id} for {event_id} (+{guest_count})")
    return summarize(event_id, store.list_rsvps(event_id))


def rsvp_summary(config: Config, event_id: str, store: DataStore | None = None) -> RSVPSummary:
    store = store or get_store(config)
    return summarize(event_id, store.list_rsvps(event_id))


def finish_task(config: Config, task_id: str, store: DataStore | None = None) -> tuple[Task, Task | None]:
    """
    Complete a task; if it repeats, insert the next instance.

    Returns (completed task, new instance or None).
    """
    store = store or get_store(config)
    task = store.get_task(task_id)
    if task.completed:
        raise DataStoreError(f"Task {task_id!r} is already completed")
    completed, following = complete_task(task, new_id=uuid.uuid4().hex)
    # The task stays open until its successor is stored
    if following is not None:
        store.add_task(following)
        logger.info(f"Created next instance {following.id} of {following.root_id} due {following.due_date}")
    store.mark_completed(task_id)
    return completed, following


def task_chain(config: Config, task_id: str, store: DataStore | None = None) -> TaskChain:
    store = store or get_store(config)
    chain = chain_for(store.list_tasks(), task_id)
    if chain is None:
        raise NotFoundError(f"No task {task_id!r}")
    return chain
