"""Tests for the Appointment entity invariants and predicates."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from salon_booking.domain import Appointment
from salon_booking.errors import ValidationError
from salon_booking.status import AppointmentStatus

NOW = datetime(2030, 3, 1, 9, 0, tzinfo=timezone.utc)
PENDING = AppointmentStatus(id="st-pending", name="PENDING")
CONFIRMED = AppointmentStatus(id="st-confirmed", name="CONFIRMED")
CANCELLED = AppointmentStatus(id="st-cancelled", name="CANCELLED")


def build(start=None, duration=60, status=PENDING, **kw):
    fields = dict(
        id=str(uuid.uuid4()),
        date_time=start or NOW + timedelta(days=3),
        duration=duration,
        user_id="user-1",
        client_id="client-1",
        schedule_id="schedule-1",
        status=status,
        stylist_id="stylist-1",
        service_ids=["svc-1"],
    )
    fields.update(kw)
    return Appointment.from_persistence(**fields)


@pytest.mark.parametrize("duration,message", [
    (0, "Duration must be greater than 0"),
    (-15, "Duration must be greater than 0"),
    (10, "Minimum appointment duration is 15 minutes"),
    (500, "Maximum appointment duration is 8 hours"),
    (22, "Duration must be in 15-minute increments"),
])
def test_duration_rules(duration, message):
    with pytest.raises(ValidationError, match=message):
        build(duration=duration)


@pytest.mark.parametrize("duration", [15, 45, 240, 480])
def test_valid_durations(duration):
    assert build(duration=duration).duration == duration


def test_services_required():
    with pytest.raises(ValidationError):
        build(service_ids=[])


def test_duplicate_services_rejected():
    with pytest.raises(ValidationError, match="already added"):
        build(service_ids=["svc-1", "svc-1"])


def test_required_references():
    with pytest.raises(ValidationError, match="client_id is required"):
        build(client_id="  ")


def test_create_rejects_past_start():
    with pytest.raises(ValidationError, match="past"):
        Appointment.create(NOW - timedelta(minutes=1), 30, "u", "c", "s", PENDING,
                           service_ids=["svc-1"], now=NOW)


def test_create_assigns_id_and_timestamps():
    appt = Appointment.create(NOW + timedelta(days=1), 30, "u", "c", "s", PENDING,
                              service_ids=["svc-1"], now=NOW)
    assert uuid.UUID(appt.id)
    assert appt.created_at == NOW
    assert appt.updated_at == NOW


def test_from_persistence_allows_past_rows():
    appt = build(start=NOW - timedelta(days=10))
    assert appt.is_in_past(NOW)


def test_naive_datetimes_are_utc():
    appt = build(start=datetime(2030, 3, 5, 10, 0))
    assert appt.date_time.tzinfo is not None
    assert appt.date_time == datetime(2030, 3, 5, 10, 0, tzinfo=timezone.utc)


def test_can_be_modified_needs_lead_time():
    assert build(start=NOW + timedelta(hours=25)).can_be_modified(NOW)
    assert not build(start=NOW + timedelta(hours=24)).can_be_modified(NOW)
    assert not build(start=NOW + timedelta(hours=2)).can_be_modified(NOW)


def test_terminal_status_blocks_modification():
    assert not build(start=NOW + timedelta(days=5), status=CANCELLED).can_be_modified(NOW)


def test_is_confirmed_follows_status_name():
    assert build(status=CONFIRMED).is_confirmed()
    assert not build(status=PENDING).is_confirmed()


def test_end_time_and_conflicts():
    a = build(start=NOW + timedelta(days=2), duration=60)
    b = build(start=a.date_time + timedelta(minutes=30), duration=30)
    c = build(start=a.end_time, duration=30)

    assert a.end_time == a.date_time + timedelta(minutes=60)
    assert a.has_conflict_with(b)
    assert not a.has_conflict_with(c)


def test_reschedule_updates_timestamp():
    stale = datetime(2020, 1, 1, tzinfo=timezone.utc)
    appt = build(updated_at=stale)
    new_start = NOW + timedelta(days=4)
    appt.reschedule(new_start, now=NOW)

    assert appt.date_time == new_start
    assert appt.updated_at > stale


def test_reschedule_into_past_fails():
    appt = build()
    with pytest.raises(ValidationError, match="past"):
        appt.reschedule(NOW - timedelta(hours=1), now=NOW)


def test_update_duration_validates_before_changing():
    appt = build(duration=60)
    with pytest.raises(ValidationError):
        appt.update_duration(22)
    assert appt.duration == 60
    appt.update_duration(90)
    assert appt.duration == 90


def test_stylist_assignment():
    appt = build()
    with pytest.raises(ValidationError):
        appt.assign_stylist("")
    appt.assign_stylist("stylist-2")
    assert appt.stylist_id == "stylist-2"
    appt.unassign_stylist()
    assert appt.stylist_id is None


def test_replace_services_keeps_order():
    appt = build()
    appt.replace_services(["svc-3", "svc-1", "svc-2"])
    assert appt.service_ids == ["svc-3", "svc-1", "svc-2"]
    with pytest.raises(ValidationError):
        appt.replace_services([])


def test_attach_notes_limits():
    appt = build()
    with pytest.raises(ValidationError, match="500"):
        appt.attach_notes("n" * 501)
    with pytest.raises(ValidationError):
        appt.attach_notes("   ")
    appt.attach_notes("n" * 500)
    assert len(appt.notes) == 500
