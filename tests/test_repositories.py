"""AppointmentStore against a real (in-memory) database."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from salon_booking.errors import ConflictError
from salon_booking.models import Appointment as AppointmentModel
from salon_booking.repositories import AppointmentStore, StatusStore, _db_time

from sample_data import MISSING_ID, STYLIST_ID


@pytest.mark.parametrize("column", ["starts_at", "ends_at", "confirmed_at", "created_at", "updated_at"])
def test_time_columns_are_timezone_aware(column):
    assert AppointmentModel.__table__.c[column].type.timezone is True


def test_bound_times_keep_utc_offset():
    naive = datetime(2030, 1, 1, 10, 0)
    shifted = datetime(2030, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))

    assert _db_time(naive) == datetime(2030, 1, 1, 10, 0, tzinfo=timezone.utc)
    assert _db_time(shifted).tzinfo == timezone.utc
    assert _db_time(shifted) == _db_time(naive)
    assert _db_time(None) is None


def test_round_trip_keeps_instants(make_appointment, appointment_store):
    appt = make_appointment()

    stored = appointment_store.find_by_id(appt.id)

    assert stored.date_time == appt.date_time
    assert stored.date_time.tzinfo is not None
    assert stored.end_time == appt.date_time + timedelta(minutes=60)
    assert stored.created_at == appt.created_at


def test_conflict_query_uses_half_open_windows(make_appointment, appointment_store):
    appt = make_appointment(hours_ahead=72, duration=60)
    start, end = appt.date_time, appt.end_time

    inside = appointment_store.find_conflicting_appointments(STYLIST_ID, start + timedelta(minutes=15), end)
    touching = appointment_store.find_conflicting_appointments(STYLIST_ID, end, end + timedelta(minutes=30))
    excluded = appointment_store.find_conflicting_appointments(STYLIST_ID, start, end, appt.id)

    assert [a.id for a in inside] == [appt.id]
    assert touching == []
    assert excluded == []


def test_overlapping_save_raises_conflict(make_appointment, appointment_store):
    first = make_appointment(hours_ahead=72)

    with pytest.raises(ConflictError) as exc:
        make_appointment(hours_ahead=72)

    assert exc.value.count == 1
    assert appointment_store.find_by_id(first.id) is not None


def test_no_unique_constraint_on_stylist_and_start():
    constraints = [c for c in AppointmentModel.__table__.constraints if isinstance(c, UniqueConstraint)]
    assert constraints == []


def test_integrity_errors_are_not_reported_as_conflicts(engine, make_appointment):
    appt = make_appointment()

    with Session(engine) as other:
        store = AppointmentStore(other, StatusStore(other))
        with pytest.raises(IntegrityError):
            store.save(appt)
        other.rollback()


def test_status_store_derives_kind_and_finds_by_id(session, statuses):
    store = StatusStore(session)

    cancelled = store.find_by_id(statuses["CANCELLED"].id)
    pending = store.find_by_id(statuses["PENDING"].id)

    assert cancelled.name == "CANCELLED" and cancelled.is_terminal
    assert pending.name == "PENDING" and not pending.is_terminal
    assert store.find_by_id(MISSING_ID) is None
