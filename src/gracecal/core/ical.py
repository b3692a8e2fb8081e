"""iCalendar (.ics) export - pure text generation, no I/O.

Output is byte-stable for a fixed ``generated_at``: same events, same
document. Lines end in CRLF and are folded at 75 characters after escaping.
"""

import re
from datetime import date, datetime, timedelta, timezone

from .calendar import Event, EventCategory

CONTENT_TYPE = "text/calendar; charset=utf-8"
PRODUCT_ID = "-//Grace CRM//Church Calendar//EN"
CRLF = "\r\n"
MAX_LINE_LENGTH = 75

CATEGORY_NAMES: dict[EventCategory, str] = {
    EventCategory.SERVICE: "CHURCH SERVICE",
    EventCategory.MEETING: "MEETING",
    EventCategory.EVENT: "EVENT",
    EventCategory.SMALL_GROUP: "SMALL GROUP",
    EventCategory.HOLIDAY: "HOLIDAY",
    EventCategory.OTHER: "OTHER",
}


def escape_text(text: str) -> str:
    """Escape backslash, semicolon, comma and newline for a TEXT value."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def fold_line(line: str) -> str:
    """
    Fold a content line longer than 75 characters.

    Each continuation starts with a single space; removing every CRLF+space
    gives the original line back.
    """
    if len(line) <= MAX_LINE_LENGTH:
        return line
    parts = []
    remaining = line
    while len(remaining) > MAX_LINE_LENGTH:
        parts.append(remaining[:MAX_LINE_LENGTH])
        remaining = " " + remaining[MAX_LINE_LENGTH:]
    parts.append(remaining)
    return CRLF.join(parts)


def unfold(text: str) -> str:
    return text.replace(CRLF + " ", "")


def format_date(value: date) -> str:
    """YYYYMMDD"""
    return value.strftime("%Y%m%d")


def format_datetime(value: datetime) -> str:
    """UTC YYYYMMDDTHHMMSSZ"""
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def generate_uid(event: Event, church_name: str) -> str:
    """Stable UID so re-importing the same event updates rather than duplicates."""
    sanitized = re.sub(r"[^a-z0-9]", "", church_name.lower())
    return f"{event.id}@{sanitized}.gracecrm"


def event_lines(event: Event, church_name: str, generated_at: datetime) -> list[str]:
    """Unfolded content lines of one VEVENT block."""
    lines = [
        "BEGIN:VEVENT",
        f"UID:{generate_uid(event, church_name)}",
        f"DTSTAMP:{format_datetime(generated_at)}",
    ]

    if event.all_day:
        # All-day DTEND is exclusive
        lines.append(f"DTSTART;VALUE=DATE:{format_date(event.start)}")
        lines.append(f"DTEND;VALUE=DATE:{format_date(event.last_day() + timedelta(days=1))}")
    else:
        lines.append(f"DTSTART:{format_datetime(event.start)}")
        lines.append(f"DTEND:{format_datetime(event.effective_end())}")

    lines.append(f"SUMMARY:{escape_text(event.title)}")
    if event.description:
        lines.append(f"DESCRIPTION:{escape_text(event.description)}")
    if event.location:
        lines.append(f"LOCATION:{escape_text(event.location)}")

    rule = event.recurrence_rule
    if rule:
        lines.append(f"RRULE:{rule.to_rrule()}")

    lines.append(f"CATEGORIES:{CATEGORY_NAMES.get(event.category, 'OTHER')}")
    lines.append("END:VEVENT")
    return lines


def export_document(
    events: list[Event],
    church_name: str,
    calendar_name: str | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Build a complete VCALENDAR document for the given events."""
    generated_at = generated_at or datetime.now(timezone.utc)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODUCT_ID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{escape_text(calendar_name or f'{church_name} Calendar')}",
    ]
    for event in events:
        lines.extend(event_lines(event, church_name, generated_at))
    lines.append("END:VCALENDAR")
    return CRLF.join(fold_line(line) for line in lines)


def download_filename(church_name: str) -> str:
    """e.g. 'Grace Community Church' -> 'grace-community-church-calendar.ics'"""
    slug = re.sub(r"\s+", "-", church_name.lower())
    return f"{slug}-calendar.ics"


def webcal_url(url: str) -> str:
    """Subscription URL for a hosted .ics feed."""
    return re.sub(r"^https?://", "webcal://", url)
