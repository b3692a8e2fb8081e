"""RSVP repository interface."""

from typing import Protocol

from gracecal.core.rsvp import RSVP


class RSVPRepository(Protocol):
    """Interface for RSVPs. Saving replaces any earlier answer from the same person."""

    def list_rsvps(self, event_id: str | None = None) -> list[RSVP]:
        ...

    def save_rsvp(self, rsvp: RSVP) -> None:
        ...
