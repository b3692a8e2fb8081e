"""Event repository interface."""

from typing import Protocol

from gracecal.core.calendar import Event


class EventRepository(Protocol):
    """Interface for reading calendar events from any backend."""

    def list_events(self) -> list[Event]:
        """All stored events (series, not expanded instances)."""
        ...

    def get_event(self, event_id: str) -> Event:
        """One event. Raises NotFoundError if unknown."""
        ...
