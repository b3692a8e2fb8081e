"""Event RSVPs and their roll-up."""

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidRecordError


class RSVPStatus(str, Enum):
    YES = "yes"
    NO = "no"
    MAYBE = "maybe"


@dataclass(frozen=True)
class RSVP:
    """One person's response to one event. ``guest_count`` excludes the responder."""

    event_id: str
    person_id: str
    status: RSVPStatus
    guest_count: int = 0

    def __post_init__(self):
        if self.guest_count < 0:
            raise InvalidRecordError(f"Negative guest count for {self.person_id} on {self.event_id}")

    @property
    def key(self) -> tuple[str, str]:
        return (self.event_id, self.person_id)

    @classmethod
    def from_record(cls, data: dict) -> "RSVP":
        try:
            return cls(
                event_id=str(data["event_id"]),
                person_id=str(data["person_id"]),
                status=RSVPStatus(data["status"]),
                guest_count=int(data.get("guest_count") or 0),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidRecordError(f"Bad RSVP record {data!r}: {e}") from e

    def to_record(self) -> dict:
        return {
            "event_id": self.event_id,
            "person_id": self.person_id,
            "status": self.status.value,
            "guest_count": self.guest_count,
        }


@dataclass(frozen=True)
class RSVPSummary:
    yes: int = 0
    no: int = 0
    maybe: int = 0
    total_attending: int = 0

    @property
    def responses(self) -> int:
        return self.yes + self.no + self.maybe


def latest_per_person(rsvps: list[RSVP]) -> dict[tuple[str, str], RSVP]:
    """Collapse to one RSVP per (event, person); later entries win."""
    latest: dict[tuple[str, str], RSVP] = {}
    for rsvp in rsvps:
        latest[rsvp.key] = rsvp
    return latest


def summarize(event_id: str, rsvps: list[RSVP]) -> RSVPSummary:
    """
    Count responses for one event.

    total_attending is the yes responders plus their guests. Guests on
    "no" and "maybe" responses don't count.
    """
    yes = no = maybe = guests = 0
    for rsvp in latest_per_person(rsvps).values():
        if rsvp.event_id != event_id:
            continue
        if rsvp.status is RSVPStatus.YES:
            yes += 1
            guests += rsvp.guest_count
        elif rsvp.status is RSVPStatus.NO:
            no += 1
        else:
            maybe += 1
    return RSVPSummary(yes=yes, no=no, maybe=maybe, total_attending=yes + guests)


class RSVPBook:
    """In-memory RSVP set. Recording again for the same person replaces the old answer."""

    def __init__(self, rsvps: list[RSVP] | None = None):
        self._rsvps = latest_per_person(rsvps or [])

    def record(self, rsvp: RSVP) -> RSVP | None:
        """Store an RSVP. Returns the response it replaced, if any."""
        previous = self._rsvps.pop(rsvp.key, None)
        self._rsvps[rsvp.key] = rsvp
        return previous

    def get(self, event_id: str, person_id: str) -> RSVP | None:
        return self._rsvps.get((event_id, person_id))

    def for_event(self, event_id: str) -> list[RSVP]:
        return [r for r in self._rsvps.values() if r.event_id == event_id]

    def summary(self, event_id: str) -> RSVPSummary:
        return summarize(event_id, self.for_event(event_id))

    def all(self) -> list[RSVP]:
        return list(self._rsvps.values())

    def __len__(self) -> int:
        return len(self._rsvps)
