# salon_booking/update_appointment.py

import logging
import re
from datetime import datetime, timedelta
from typing import Callable, Optional

from . import config
from .core import ConflictDetector, parse_iso, to_iso, utcnow
from .domain import Appointment, validate_duration
from .errors import BusinessRuleError, ConflictError, NotFoundError, ValidationError
from .schemas import AppointmentPublic, AppointmentUpdate

logger = logging.getLogger(__name__)

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

UPDATABLE_FIELDS = ("date_time", "duration", "stylist_id", "service_ids", "notes", "reason")
WINDOW_FIELDS = ("date_time", "duration", "stylist_id")


def _is_uuid(value) -> bool:
    return isinstance(value, str) and bool(UUID_RE.match(value))


def to_public(appt: Appointment) -> AppointmentPublic:
    return AppointmentPublic(
        id=appt.id,
        date_time=to_iso(appt.date_time),
        duration=appt.duration,
        confirmed_at=to_iso(appt.confirmed_at),
        created_at=to_iso(appt.created_at),
        updated_at=to_iso(appt.updated_at),
        user_id=appt.user_id,
        client_id=appt.client_id,
        stylist_id=appt.stylist_id,
        schedule_id=appt.schedule_id,
        status_id=appt.status_id,
        service_ids=list(appt.service_ids),
        notes=appt.notes,
    )


class UpdateAppointment:
    """Applies a client or stylist's change to an existing appointment.

    Every stage before the write only reads, so any failure leaves storage
    untouched. The store is written exactly once, at the end.
    """

    def __init__(
        self,
        appointment_store,
        service_store,
        stylist_store,
        conflict_detector: Optional[ConflictDetector] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.appointment_store = appointment_store
        self.service_store = service_store
        self.stylist_store = stylist_store
        self.conflict_detector = conflict_detector or ConflictDetector(appointment_store)
        self.clock = clock

    def execute(
        self,
        appointment_id: str,
        update: AppointmentUpdate,
        requester_id: str,
    ) -> AppointmentPublic:
        now = self.clock()

        # 1) Shape and ranges
        new_date_time = self._validate_input(appointment_id, update, requester_id, now)

        # 2) Load
        appointment = self.appointment_store.find_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment", appointment_id)

        # 3) Who may change it
        self._check_permission(appointment, requester_id)

        # 4) Whether it may still change
        self._check_modifiable(appointment, now)

        # 5) Confirmed bookings need an explanation for a time change
        if appointment.is_confirmed() and (update.has_field("date_time") or update.has_field("duration")):
            if not update.notes and not update.reason:
                raise BusinessRuleError(
                    "A note or reason is required when changing the date/time of a confirmed appointment"
                )

        # 6) Referenced rows must exist
        if update.has_field("stylist_id") and update.stylist_id:
            if self.stylist_store.find_by_id(update.stylist_id) is None:
                raise NotFoundError("Stylist", update.stylist_id)

        if update.has_field("service_ids"):
            for service_id in update.service_ids:
                if self.service_store.find_by_id(service_id) is None:
                    raise NotFoundError("Service", service_id)

        # 7) Double booking
        if any(update.has_field(name) for name in WINDOW_FIELDS):
            self._check_conflicts(appointment, update, new_date_time)

        # 8) Apply and write
        before = self._snapshot(appointment)
        if new_date_time is not None:
            appointment.reschedule(new_date_time, now=now)
        if update.has_field("duration"):
            appointment.update_duration(update.duration)
        if update.has_field("stylist_id"):
            if update.stylist_id:
                appointment.assign_stylist(update.stylist_id)
            else:
                appointment.unassign_stylist()
        if update.has_field("service_ids"):
            appointment.replace_services(update.service_ids)
        if update.has_field("notes"):
            appointment.attach_notes(update.notes)

        self._log_audit(appointment, before, update, requester_id)
        # reason-only requests still count as a modification
        appointment.touch(now)

        saved = self.appointment_store.update(appointment)
        return to_public(saved)

    def _validate_input(
        self,
        appointment_id: str,
        update: AppointmentUpdate,
        requester_id: str,
        now: datetime,
    ) -> Optional[datetime]:
        if not appointment_id or not appointment_id.strip():
            raise ValidationError("Appointment ID is required")
        if not _is_uuid(appointment_id):
            raise ValidationError("Appointment ID must be a valid UUID")

        if not requester_id or not requester_id.strip():
            raise ValidationError("Requester ID is required")
        if not _is_uuid(requester_id):
            raise ValidationError("Requester ID must be a valid UUID")

        if not any(update.has_field(name) for name in UPDATABLE_FIELDS):
            raise ValidationError("At least one field must be provided for update")

        new_date_time = None
        if update.has_field("date_time"):
            try:
                new_date_time = parse_iso(update.date_time)
            except (ValueError, OverflowError):
                raise ValidationError("DateTime must be a valid ISO 8601 date")
            if new_date_time <= now:
                raise ValidationError("Appointment cannot be rescheduled to the past")
            if new_date_time > now + timedelta(days=config.MAX_ADVANCE_DAYS):
                raise ValidationError(
                    f"Appointment cannot be scheduled more than {config.MAX_ADVANCE_DAYS} days in advance"
                )

        if update.has_field("duration"):
            validate_duration(update.duration)

        if update.has_field("stylist_id") and update.stylist_id is not None:
            if not _is_uuid(update.stylist_id):
                raise ValidationError("Stylist ID must be a valid UUID")

        if update.has_field("service_ids"):
            if len(update.service_ids) == 0:
                raise ValidationError("Service IDs must be a non-empty array")
            if not all(_is_uuid(service_id) for service_id in update.service_ids):
                raise ValidationError("All service IDs must be valid UUIDs")
            if len(set(update.service_ids)) != len(update.service_ids):
                raise ValidationError("Service IDs must not contain duplicates")

        if update.notes is not None:
            if not update.notes.strip():
                raise ValidationError("Notes cannot be empty if provided")
            if len(update.notes) > config.MAX_NOTES_LENGTH:
                raise ValidationError(f"Notes cannot exceed {config.MAX_NOTES_LENGTH} characters")

        if update.reason is not None:
            if not update.reason.strip():
                raise ValidationError("Reason cannot be empty if provided")
            if len(update.reason) > config.MAX_REASON_LENGTH:
                raise ValidationError(f"Reason cannot exceed {config.MAX_REASON_LENGTH} characters")

        return new_date_time

    @staticmethod
    def _check_permission(appointment: Appointment, requester_id: str) -> None:
        # TODO: let admins through once roles reach this layer
        if requester_id not in (appointment.user_id, appointment.stylist_id):
            logger.info(
                "Rejected update of appointment %s by %s: not owner or stylist",
                appointment.id, requester_id,
            )
            raise BusinessRuleError("You do not have permission to update this appointment")

    @staticmethod
    def _check_modifiable(appointment: Appointment, now: datetime) -> None:
        if appointment.status.is_terminal:
            raise BusinessRuleError("Cannot update appointments in terminal status")
        if appointment.is_in_past(now):
            raise BusinessRuleError("Cannot update appointments that have already occurred")
        if not appointment.can_be_modified(now):
            raise BusinessRuleError(
                f"Appointments can only be modified at least {config.MODIFICATION_LEAD_TIME_HOURS} "
                "hours in advance. For last-minute changes, please contact customer service."
            )

    def _check_conflicts(
        self,
        appointment: Appointment,
        update: AppointmentUpdate,
        new_date_time: Optional[datetime],
    ) -> None:
        start = new_date_time or appointment.date_time
        duration = update.duration if update.has_field("duration") else appointment.duration
        stylist_id = update.stylist_id if update.has_field("stylist_id") else appointment.stylist_id

        conflicts = self.conflict_detector.find_conflicts(
            stylist_id, start, start + timedelta(minutes=duration), appointment.id
        )
        if conflicts:
            logger.info(
                "Appointment %s update clashes with %d appointment(s) for stylist %s",
                appointment.id, len(conflicts), stylist_id,
            )
            raise ConflictError(
                f"The updated appointment conflicts with {len(conflicts)} existing appointment(s). "
                "Please choose a different time or stylist.",
                count=len(conflicts),
            )

    @staticmethod
    def _snapshot(appointment: Appointment) -> dict:
        return {
            "dateTime": to_iso(appointment.date_time),
            "duration": appointment.duration,
            "stylistId": appointment.stylist_id,
            "serviceIds": list(appointment.service_ids),
        }

    def _log_audit(
        self,
        appointment: Appointment,
        before: dict,
        update: AppointmentUpdate,
        requester_id: str,
    ) -> None:
        after = self._snapshot(appointment)
        changes = {
            key: {"from": before[key], "to": after[key]}
            for key in before
            if before[key] != after[key]
        }
        logger.info(
            "Appointment updated: id=%s by=%s changes=%s reason=%r notify_client=%s",
            appointment.id,
            requester_id,
            changes,
            update.reason,
            update.notify_client is not False,
        )
