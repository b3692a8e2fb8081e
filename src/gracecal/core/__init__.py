"""Functional core - pure calendar and task logic with no I/O."""

from .calendar import CalendarFilter, Event, EventCategory, expand_events, filter_events_by_date
from .errors import InvalidDateError, InvalidRecordError
from .ical import export_document, download_filename
from .links import Provider, add_event_url
from .occurrences import (
    DayBucket,
    DerivedOccurrence,
    Person,
    RolloverPolicy,
    bucket_by_date,
    derive_anniversaries,
    derive_birthdays,
    month_view,
    upcoming,
    upcoming_agenda,
)
from .recurrence import Frequency, RecurrenceRule, advance, rule_for
from .rsvp import RSVP, RSVPBook, RSVPStatus, RSVPSummary, summarize
from .tasks import Task, TaskChain, chain_for, complete_task, next_instance

__all__ = [
    # Recurrence
    "Frequency",
    "RecurrenceRule",
    "rule_for",
    "advance",
    # Tasks
    "Task",
    "TaskChain",
    "next_instance",
    "complete_task",
    "chain_for",
    # Calendar
    "Event",
    "EventCategory",
    "CalendarFilter",
    "expand_events",
    "filter_events_by_date",
    # Occurrences
    "Person",
    "DerivedOccurrence",
    "RolloverPolicy",
    "DayBucket",
    "derive_birthdays",
    "derive_anniversaries",
    "bucket_by_date",
    "upcoming",
    "month_view",
    "upcoming_agenda",
    # RSVP
    "RSVP",
    "RSVPStatus",
    "RSVPSummary",
    "RSVPBook",
    "summarize",
    # Export
    "export_document",
    "download_filename",
    "Provider",
    "add_event_url",
    # Errors
    "InvalidDateError",
    "InvalidRecordError",
]
