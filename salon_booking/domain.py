# salon_booking/domain.py

import uuid
from datetime import datetime, timedelta
from typing import List, Optional

from . import config
from .core import as_utc, overlaps, utcnow
from .errors import ValidationError
from .status import AppointmentStatus, StatusName


def validate_duration(duration) -> None:
    if duration is None or duration <= 0:
        raise ValidationError("Duration must be greater than 0")
    if duration < config.MIN_DURATION_MINUTES:
        raise ValidationError(
            f"Minimum appointment duration is {config.MIN_DURATION_MINUTES} minutes"
        )
    if duration > config.MAX_DURATION_MINUTES:
        hours = config.MAX_DURATION_MINUTES // 60
        raise ValidationError(f"Maximum appointment duration is {hours} hours")
    if duration % config.DURATION_INCREMENT_MINUTES != 0:
        raise ValidationError(
            f"Duration must be in {config.DURATION_INCREMENT_MINUTES}-minute increments"
        )


class Appointment:
    """A booked slot for a client, optionally with a stylist.

    Holds its own invariants (duration grid, non-empty services, required
    references). Every mutator re-checks the invariant it touches and bumps
    ``updated_at``. Nothing here talks to the database.
    """

    def __init__(
        self,
        id: str,
        date_time: datetime,
        duration: int,
        user_id: str,
        client_id: str,
        schedule_id: str,
        status: AppointmentStatus,
        stylist_id: Optional[str] = None,
        service_ids: Optional[List[str]] = None,
        confirmed_at: Optional[datetime] = None,
        notes: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        now = utcnow()
        self.id = id
        self.date_time = as_utc(date_time)
        self.duration = duration
        self.user_id = user_id
        self.client_id = client_id
        self.schedule_id = schedule_id
        self.status = status
        self.stylist_id = stylist_id
        self.service_ids = list(service_ids or [])
        self.confirmed_at = as_utc(confirmed_at)
        self.notes = notes
        self.created_at = as_utc(created_at) or now
        self.updated_at = as_utc(updated_at) or now
        self._validate()

    @classmethod
    def create(
        cls,
        date_time: datetime,
        duration: int,
        user_id: str,
        client_id: str,
        schedule_id: str,
        status: AppointmentStatus,
        stylist_id: Optional[str] = None,
        service_ids: Optional[List[str]] = None,
        now: Optional[datetime] = None,
    ) -> "Appointment":
        now = now or utcnow()
        if as_utc(date_time) <= now:
            raise ValidationError("Appointment cannot be scheduled in the past")
        return cls(
            id=str(uuid.uuid4()),
            date_time=date_time,
            duration=duration,
            user_id=user_id,
            client_id=client_id,
            schedule_id=schedule_id,
            status=status,
            stylist_id=stylist_id,
            service_ids=service_ids,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_persistence(cls, **fields) -> "Appointment":
        # Stored rows may already be in the past, so no clock check here.
        return cls(**fields)

    def _validate(self) -> None:
        if self.date_time is None:
            raise ValidationError("Appointment date and time is required")
        validate_duration(self.duration)
        for name in ("user_id", "client_id", "schedule_id"):
            value = getattr(self, name)
            if not value or not str(value).strip():
                raise ValidationError(f"{name} is required")
        if self.status is None:
            raise ValidationError("status_id is required")
        self._validate_services(self.service_ids)

    @staticmethod
    def _validate_services(service_ids: List[str]) -> None:
        if not service_ids:
            raise ValidationError("An appointment must include at least one service")
        seen = set()
        for service_id in service_ids:
            if not service_id or not str(service_id).strip():
                raise ValidationError("Service ID is required")
            if service_id in seen:
                raise ValidationError("Service is already added to this appointment")
            seen.add(service_id)

    def touch(self, now: Optional[datetime] = None) -> None:
        self.updated_at = now or utcnow()

    # ---- queries ----

    @property
    def status_id(self) -> str:
        return self.status.id

    @property
    def end_time(self) -> datetime:
        return self.date_time + timedelta(minutes=self.duration)

    def is_confirmed(self) -> bool:
        return self.status.name == StatusName.confirmed.value

    def is_in_past(self, now: Optional[datetime] = None) -> bool:
        return self.date_time < (now or utcnow())

    def can_be_modified(self, now: Optional[datetime] = None) -> bool:
        if self.status.is_terminal:
            return False
        cutoff = (now or utcnow()) + timedelta(hours=config.MODIFICATION_LEAD_TIME_HOURS)
        return self.date_time > cutoff

    def has_conflict_with(self, other: "Appointment") -> bool:
        return overlaps(self.date_time, self.end_time, other.date_time, other.end_time)

    # ---- mutators ----

    def reschedule(self, new_date_time: datetime, now: Optional[datetime] = None) -> None:
        new_date_time = as_utc(new_date_time)
        if new_date_time is None:
            raise ValidationError("Appointment date and time is required")
        if new_date_time <= (now or utcnow()):
            raise ValidationError("Cannot reschedule to a past date")
        self.date_time = new_date_time
        self.touch()

    def update_duration(self, new_duration: int) -> None:
        validate_duration(new_duration)
        self.duration = new_duration
        self.touch()

    def assign_stylist(self, stylist_id: str) -> None:
        if not stylist_id or not stylist_id.strip():
            raise ValidationError("Stylist ID is required")
        self.stylist_id = stylist_id
        self.touch()

    def unassign_stylist(self) -> None:
        self.stylist_id = None
        self.touch()

    def replace_services(self, service_ids: List[str]) -> None:
        self._validate_services(service_ids)
        self.service_ids = list(service_ids)
        self.touch()

    def attach_notes(self, notes: str) -> None:
        if notes is None or not notes.strip():
            raise ValidationError("Notes cannot be empty if provided")
        if len(notes) > config.MAX_NOTES_LENGTH:
            raise ValidationError(
                f"Notes cannot exceed {config.MAX_NOTES_LENGTH} characters"
            )
        self.notes = notes
        self.touch()

    def __eq__(self, other):
        return isinstance(other, Appointment) and other.id == self.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"<Appointment {self.id} {self.date_time.isoformat()} +{self.duration}m>"
