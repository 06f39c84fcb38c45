# salon_booking/routers/appointments_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from salon_booking import booking
from salon_booking.booking import BookingError
from salon_booking.core import parse_date_key
from salon_booking.deps import get_store, http_error
from salon_booking.schemas import AppointmentPublic, BookingCreate, StepPublic
from salon_booking.store import SchedulingStore

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


def appointment_public(appointment, steps=()) -> AppointmentPublic:
    return AppointmentPublic(
        id=appointment.id,
        service_id=appointment.service_id,
        professional_id=appointment.professional_id,
        client_name=appointment.client_name,
        client_phone=appointment.client_phone,
        client_email=appointment.client_email,
        starts_at=appointment.starts_at,
        ends_at=appointment.ends_at,
        status=appointment.status,
        steps=[
            StepPublic(
                service_id=step.service_id,
                professional_id=step.professional_id,
                starts_at=step.starts_at,
                ends_at=step.ends_at,
                order_index=step.order_index,
                duration_minutes=step.duration_minutes_snapshot,
            )
            for step in steps
        ],
    )


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    payload: BookingCreate,
    store: SchedulingStore = Depends(get_store),
):
    try:
        appointment, steps = booking.book(store, payload)
    except BookingError as exc:
        raise http_error(exc)

    return appointment_public(appointment, steps)


@router.get("", response_model=List[AppointmentPublic])
def list_appointments(
    day: Optional[str] = None,
    professional_id: Optional[str] = None,
    store: SchedulingStore = Depends(get_store),
):
    if day is not None:
        try:
            parse_date_key(day)
        except ValueError:
            raise HTTPException(status_code=422, detail="day must be YYYY-MM-DD")

    appointments = store.list_appointments(day, professional_id)
    return [appointment_public(a, store.appointment_steps(a.id)) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentPublic)
def get_appointment(
    appointment_id: int,
    store: SchedulingStore = Depends(get_store),
):
    appointment = store.get_appointment(appointment_id)
    if appointment is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    return appointment_public(appointment, store.appointment_steps(appointment.id))


@router.patch("/{appointment_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appointment_id: int,
    store: SchedulingStore = Depends(get_store),
):
    try:
        appointment = booking.cancel(store, appointment_id)
    except BookingError as exc:
        raise http_error(exc)

    return appointment_public(appointment, store.appointment_steps(appointment.id))
