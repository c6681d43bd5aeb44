"""Shared fixtures: an in-memory database seeded with statuses, stylists and services."""

from datetime import timedelta

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from salon_booking.core import utcnow
from salon_booking.domain import Appointment
from salon_booking.models import Service, Stylist, User
from salon_booking.repositories import AppointmentStore, ServiceStore, StatusStore, StylistStore
from salon_booking.status import StatusName
from salon_booking.update_appointment import UpdateAppointment

from sample_data import (
    BOOKER_ID,
    CLIENT_ID,
    COLOR_ID,
    HAIRCUT_ID,
    OTHER_STYLIST_ID,
    SCHEDULE_ID,
    STYLIST_ID,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def statuses(session):
    store = StatusStore(session)
    return {name.value: store.create(name.value, f"{name.value.title()} appointment") for name in StatusName}


@pytest.fixture
def seeded(session, statuses):
    session.add(User(id=BOOKER_ID, email="maria@example.com", password_hash="x", role="client"))
    session.add(User(id=STYLIST_ID, email="lucia@example.com", password_hash="x", role="stylist"))
    session.add(Stylist(id=STYLIST_ID, name="Lucia"))
    session.add(Stylist(id=OTHER_STYLIST_ID, name="Carlos"))
    session.add(Service(id=HAIRCUT_ID, name="Haircut", duration=30, price=2500))
    session.add(Service(id=COLOR_ID, name="Color", duration=90, price=8000))
    session.commit()
    return statuses


@pytest.fixture
def appointment_store(session):
    return AppointmentStore(session, StatusStore(session))


@pytest.fixture
def use_case(session, appointment_store):
    return UpdateAppointment(
        appointment_store=appointment_store,
        service_store=ServiceStore(session),
        stylist_store=StylistStore(session),
    )


@pytest.fixture
def make_appointment(seeded, appointment_store):
    """Persist an appointment starting ``hours_ahead`` from now."""

    def _make(hours_ahead=72, duration=60, status="PENDING", stylist_id=STYLIST_ID,
              service_ids=None, user_id=BOOKER_ID):
        now = utcnow()
        start = (now + timedelta(hours=hours_ahead)).replace(second=0, microsecond=0)
        appt = Appointment.create(
            date_time=start,
            duration=duration,
            user_id=user_id,
            client_id=CLIENT_ID,
            schedule_id=SCHEDULE_ID,
            status=seeded[status],
            stylist_id=stylist_id,
            service_ids=service_ids or [HAIRCUT_ID],
            now=now,
        )
        return appointment_store.save(appt)

    return _make
