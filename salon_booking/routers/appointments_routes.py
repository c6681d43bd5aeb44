# salon_booking/routers/appointments_routes.py

from fastapi import APIRouter, Depends

from salon_booking.auth import get_current_user
from salon_booking.deps import get_update_appointment
from salon_booking.schemas import AppointmentPublic, AppointmentUpdate
from salon_booking.update_appointment import UpdateAppointment

router = APIRouter(
    tags=["appointments"],
)


@router.patch("/appointments/{appointment_id}", response_model=AppointmentPublic)
def update_appointment(
    appointment_id: str,
    update: AppointmentUpdate,
    use_case: UpdateAppointment = Depends(get_update_appointment),
    current_user: dict = Depends(get_current_user),
):
    # Errors raised by the use case are mapped to responses in main.py
    return use_case.execute(appointment_id, update, current_user["id"])
