"""Ports - interfaces/protocols for external dependencies."""

from typing import Protocol

from .event_repo import EventRepository
from .person_repo import PersonRepository
from .task_repo import TaskRepository
from .rsvp_repo import RSVPRepository


class DataStore(EventRepository, PersonRepository, TaskRepository, RSVPRepository, Protocol):
    """A backend that holds every collection the calendar needs."""


__all__ = [
    "EventRepository",
    "PersonRepository",
    "TaskRepository",
    "RSVPRepository",
    "DataStore",
]
