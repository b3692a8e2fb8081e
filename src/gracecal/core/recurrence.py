"""Recurrence vocabulary shared by task scheduling and calendar export.

The mapping table below is the only place that knows what "biweekly" or
"quarterly" means. Export, event expansion and task advancement all go
through it.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from dateutil import rrule
from dateutil.relativedelta import relativedelta


class Frequency(str, Enum):
    """Repeat frequency as stored on events and tasks."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

    @classmethod
    def parse(cls, value: "str | Frequency | None") -> "Frequency":
        """Parse a stored value. Anything unrecognised means no recurrence."""
        if isinstance(value, Frequency):
            return value
        if not value:
            return cls.NONE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NONE

    @property
    def label(self) -> str:
        return FREQUENCY_LABELS[self]


FREQUENCY_LABELS: dict[Frequency, str] = {
    Frequency.NONE: "Does not repeat",
    Frequency.DAILY: "Daily",
    Frequency.WEEKLY: "Weekly",
    Frequency.BIWEEKLY: "Every 2 weeks",
    Frequency.MONTHLY: "Monthly",
    Frequency.QUARTERLY: "Quarterly",
}

# frequency -> (RRULE FREQ tag, interval)
_RULE_TABLE: dict[Frequency, tuple[str, int]] = {
    Frequency.DAILY: ("DAILY", 1),
    Frequency.WEEKLY: ("WEEKLY", 1),
    Frequency.BIWEEKLY: ("WEEKLY", 2),
    Frequency.MONTHLY: ("MONTHLY", 1),
    Frequency.QUARTERLY: ("MONTHLY", 3),
}

_DATEUTIL_FREQ = {
    "DAILY": rrule.DAILY,
    "WEEKLY": rrule.WEEKLY,
    "MONTHLY": rrule.MONTHLY,
}


@dataclass(frozen=True)
class RecurrenceRule:
    """Normalized recurrence: FREQ tag, interval multiplier, inclusive end date."""

    freq: str
    interval: int = 1
    until: date | None = None

    def to_rrule(self) -> str:
        """Render as an iCalendar RRULE value (without the 'RRULE:' prefix)."""
        parts = [f"FREQ={self.freq}"]
        if self.interval != 1:
            parts.append(f"INTERVAL={self.interval}")
        if self.until:
            parts.append(f"UNTIL={self.until.strftime('%Y%m%d')}")
        return ";".join(parts)

    def delta(self) -> relativedelta:
        """Calendar step between two consecutive occurrences."""
        if self.freq == "DAILY":
            return relativedelta(days=self.interval)
        if self.freq == "WEEKLY":
            return relativedelta(weeks=self.interval)
        return relativedelta(months=self.interval)

    def occurrences(self, dtstart: datetime, window_end: datetime):
        """
        Iterate occurrence start times from ``dtstart`` up to ``window_end``.

        ``window_end`` is tightened to the rule's own end bound. Both bounds
        are inclusive.
        """
        until = window_end
        if self.until:
            rule_end = datetime.combine(self.until, datetime.max.time(), tzinfo=dtstart.tzinfo)
            until = min(until, rule_end)
        return rrule.rrule(
            _DATEUTIL_FREQ[self.freq],
            interval=self.interval,
            dtstart=dtstart,
            until=until,
        )


def rule_for(frequency: "Frequency | str | None", until: date | None = None) -> RecurrenceRule | None:
    """Map a repeat frequency to a RecurrenceRule. None for no recurrence."""
    entry = _RULE_TABLE.get(Frequency.parse(frequency))
    if entry is None:
        return None
    freq, interval = entry
    return RecurrenceRule(freq=freq, interval=interval, until=until)


def advance(due_date: date, frequency: "Frequency | str") -> date:
    """
    Next due date for a repeating item.

    Month and quarter steps use relativedelta, so Jan 31 + 1 month is Feb 28
    (or 29). Pure function - the only date involved is the one passed in.
    """
    rule = rule_for(frequency)
    if rule is None:
        raise ValueError(f"Frequency {frequency!r} does not repeat")
    return due_date + rule.delta()
