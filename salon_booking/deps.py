# salon_booking/deps.py

from fastapi import Depends
from sqlmodel import Session

from .db import get_session
from .repositories import AppointmentStore, ServiceStore, StatusStore, StylistStore
from .update_appointment import UpdateAppointment


def get_update_appointment(session: Session = Depends(get_session)) -> UpdateAppointment:
    return UpdateAppointment(
        appointment_store=AppointmentStore(session, StatusStore(session)),
        service_store=ServiceStore(session),
        stylist_store=StylistStore(session),
    )
