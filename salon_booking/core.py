# salon_booking/core.py

from datetime import datetime, timezone
from typing import Optional, Set


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes (SQLite hands these back) are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    # 2025-01-28T10:00:00.000Z
    if value is None:
        return None
    text = as_utc(value).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def parse_iso(text: str) -> datetime:
    """Parse ISO-8601 text, accepting a trailing ``Z``. Raises ValueError."""
    if not isinstance(text, str) or not text.strip():
        raise ValueError("empty datetime")
    text = text.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except OverflowError as exc:
        # offsets that push the instant outside datetime's year range
        raise ValueError(f"datetime out of range: {text}") from exc


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    # half-open intervals: touching edges do not overlap
    return start_a < end_b and start_b < end_a


class ConflictDetector:
    """Finds appointments that would double-book a stylist.

    The store narrows candidates in SQL; the result is re-checked here so
    the rule does not depend on how a store writes its query.
    """

    def __init__(self, appointment_store):
        self.appointment_store = appointment_store

    def find_conflicts(
        self,
        stylist_id: Optional[str],
        window_start: datetime,
        window_end: datetime,
        exclude_appointment_id: Optional[str] = None,
    ) -> Set:
        if not stylist_id:
            return set()

        window_start = as_utc(window_start)
        window_end = as_utc(window_end)
        candidates = self.appointment_store.find_conflicting_appointments(
            stylist_id, window_start, window_end, exclude_appointment_id
        )

        conflicts = set()
        for appt in candidates:
            if exclude_appointment_id and appt.id == exclude_appointment_id:
                continue
            if appt.stylist_id != stylist_id:
                continue
            if appt.status.is_terminal:
                continue
            if overlaps(window_start, window_end, appt.date_time, appt.end_time):
                conflicts.add(appt)
        return conflicts
