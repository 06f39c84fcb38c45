# salon_booking/booking.py

"""
Booking flow on top of the scheduling engine.

A booking is re-validated right before it is written: the package slots are
recomputed from a fresh snapshot and the requested start time must still be
among them. Recompute and insert run under one lock per participating
professional, so two requests in this process cannot both pass the check for
the same professional. Other processes are not covered; running several
workers needs an exclusion constraint in the database.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .business_hours import BusinessHoursResolver
from .core import (
    add_days,
    format_date_key,
    local_today,
    minutes_to_time,
    parse_date_key,
    sunday_weekday,
    time_to_minutes,
    to_local_datetime,
)
from .data import shop_settings
from .models import Appointment, AppointmentService, Block
from .schedule_builder import PackageItem, ScheduleBuilder
from .schemas import BlockCreate, BookingCreate, DayAvailability
from .slots import PackageScheduler, SlotGenerator
from .store import SchedulingStore, StoreConflict

logger = logging.getLogger(__name__)


class BookingError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class BookingValidationError(BookingError):
    status_code = 422


class SlotUnavailableError(BookingError):
    status_code = 409


class BookingConflictError(BookingError):
    status_code = 409


class AppointmentNotFoundError(BookingError):
    status_code = 404


# --- per-professional critical section ---------------------------------

_registry_lock = threading.Lock()
_professional_locks: Dict[str, threading.Lock] = {}


def _lock_for(professional_id: str) -> threading.Lock:
    with _registry_lock:
        return _professional_locks.setdefault(professional_id, threading.Lock())


@contextmanager
def hold_professionals(professional_ids: Iterable[str]):
    # sorted acquisition so overlapping packages cannot deadlock
    locks = [_lock_for(professional_id) for professional_id in sorted(set(professional_ids))]
    for lock in locks:
        lock.acquire()
    try:
        yield
    finally:
        for lock in reversed(locks):
            lock.release()


# --- availability ------------------------------------------------------

def _valid_date_key(date_key: Optional[str]) -> Optional[str]:
    if not date_key:
        return None
    try:
        return format_date_key(parse_date_key(date_key))
    except ValueError:
        return None


def available_slots(
    store: SchedulingStore,
    professional_id: str,
    service_id: str,
    date_key: str,
) -> List[str]:
    """Single-service start times; anything missing just means no slots."""
    date_key = _valid_date_key(date_key)
    if not professional_id or not service_id or not date_key:
        return []

    duration = store.service_duration(service_id)
    if duration <= 0:
        logger.info("Service %s has no duration; no slots offered", service_id)
        return []

    resolver = BusinessHoursResolver(store.business_hours_rules())
    if resolver.resolve(parse_date_key(date_key)) is None:
        return []

    busy = store.busy_index(date_key, [professional_id])
    return SlotGenerator(resolver, busy).slots(professional_id, duration, date_key)


def available_package_slots(
    store: SchedulingStore,
    date_key: str,
    items: Sequence[PackageItem],
) -> List[str]:
    date_key = _valid_date_key(date_key)
    if not date_key or not items:
        return []

    resolver = BusinessHoursResolver(store.business_hours_rules())
    if resolver.resolve(parse_date_key(date_key)) is None:
        return []

    busy = store.busy_index(date_key, [item.professional_id for item in items])
    return PackageScheduler(resolver, busy).package_slots(date_key, items)


def available_days(
    store: SchedulingStore,
    start: Optional[date] = None,
    count: Optional[int] = None,
) -> List[DayAvailability]:
    start = start or local_today()
    count = shop_settings["day_picker_days"] if count is None else count
    resolver = BusinessHoursResolver(store.business_hours_rules())

    days = []
    for offset in range(max(count, 0)):
        day = add_days(start, offset)
        hours = resolver.resolve(day)
        days.append(
            DayAvailability(
                date=format_date_key(day),
                weekday=sunday_weekday(day),
                is_open=hours is not None,
                open=hours.open if hours else None,
                close=hours.close if hours else None,
            )
        )
    return days


def package_items(
    store: SchedulingStore,
    pairs: Sequence[Tuple[str, str]],
) -> List[PackageItem]:
    """(service_id, professional_id) pairs -> items with snapshotted durations."""
    durations = store.service_durations(service_id for service_id, _ in pairs)
    return [
        PackageItem(
            service_id=service_id,
            professional_id=professional_id,
            duration_minutes=durations.get(service_id, 0),
        )
        for service_id, professional_id in pairs
    ]


# --- booking -----------------------------------------------------------

def normalize_list(value: Union[List[str], str, None]) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [item.strip() for item in value if item and item.strip()]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def book(store: SchedulingStore, request: BookingCreate) -> Tuple[Appointment, List[AppointmentService]]:
    # 1) Normalize the request
    service_ids = normalize_list(request.services)
    if not service_ids and _clean(request.service_id):
        service_ids = [_clean(request.service_id)]
    professional_ids = normalize_list(request.professionals)
    if not professional_ids and _clean(request.professional_id):
        professional_ids = [_clean(request.professional_id)]

    client_name = _clean(request.client_name)
    client_phone = _clean(request.client_phone)
    client_email = _clean(request.client_email)
    date_key = _clean(request.date)
    start_time = _clean(request.time)

    # 2) Required fields
    if not service_ids or not professional_ids or not client_name or not client_phone or not date_key or not start_time:
        raise BookingValidationError("Missing required booking data")
    if len(service_ids) != len(professional_ids):
        raise BookingValidationError("Each service needs exactly one professional")
    date_key = _valid_date_key(date_key)
    if date_key is None:
        raise BookingValidationError("date must be YYYY-MM-DD")
    try:
        start_time = minutes_to_time(time_to_minutes(start_time))
    except ValueError:
        raise BookingValidationError("time must be HH:MM")

    # 3) Every professional must offer their service
    pairs = list(zip(service_ids, professional_ids))
    offered = store.offered_pairs(service_ids, professional_ids)
    if any(pair not in offered for pair in pairs):
        raise BookingValidationError("Professional does not offer this service")

    # 4) Snapshot durations
    items = package_items(store, pairs)
    if any(item.duration_minutes <= 0 for item in items):
        raise BookingValidationError("Service duration is not defined")

    # 5) Re-check and insert while holding every participating professional
    with hold_professionals(professional_ids):
        slots = available_package_slots(store, date_key, items)
        if start_time not in slots:
            logger.info("Rejected booking on %s at %s: slot no longer available", date_key, start_time)
            raise SlotUnavailableError("Time slot is no longer available")

        schedule = ScheduleBuilder().build(date_key, start_time, items)
        if schedule.starts_at is None or schedule.ends_at is None:
            raise SlotUnavailableError("Time slot is no longer available")

        try:
            appointment = store.add_booking(schedule, client_name, client_phone, client_email)
        except StoreConflict as exc:
            logger.warning("Booking on %s at %s conflicted on write: %s", date_key, start_time, exc)
            raise BookingConflictError("Appointment conflicts with another booking")

    logger.info(
        "Booked appointment %s on %s at %s (%d steps)",
        appointment.id, date_key, start_time, len(schedule.steps),
    )
    return appointment, store.appointment_steps(appointment.id)


def cancel(store: SchedulingStore, appointment_id: int) -> Appointment:
    appointment = store.get_appointment(appointment_id)
    if appointment is None:
        raise AppointmentNotFoundError("Appointment not found")
    if appointment.status == "cancelled":
        raise BookingConflictError("Appointment already cancelled")

    appointment = store.set_status(appointment, "cancelled")
    logger.info("Cancelled appointment %s", appointment_id)
    return appointment


def create_block(store: SchedulingStore, request: BlockCreate) -> Block:
    date_key = _clean(request.date)
    start_time = _clean(request.start_time)
    end_time = _clean(request.end_time)

    if not date_key or not start_time or not end_time:
        raise BookingValidationError("Date, start time and end time are required")

    try:
        starts_at = to_local_datetime(date_key, start_time)
        ends_at = to_local_datetime(date_key, end_time)
    except ValueError:
        raise BookingValidationError("date must be YYYY-MM-DD and times HH:MM")

    if ends_at <= starts_at:
        raise BookingValidationError("End time must be after start time")

    try:
        block = store.add_block(_clean(request.professional_id), starts_at, ends_at, _clean(request.reason))
    except StoreConflict:
        raise BookingConflictError("Block could not be saved")
    logger.info("Added block %s for %s", block.id, block.professional_id or "all professionals")
    return block
