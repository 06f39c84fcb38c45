# salon_booking/routers/availability_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from salon_booking import booking
from salon_booking.core import format_minutes, parse_date_key
from salon_booking.data import shop_settings
from salon_booking.deps import get_store
from salon_booking.schedule_builder import total_package_minutes
from salon_booking.schemas import (
    AvailabilityResponse,
    DayAvailability,
    PackageAvailabilityRequest,
    PackageAvailabilityResponse,
)
from salon_booking.store import SchedulingStore

router = APIRouter(
    tags=["availability"],
)


@router.get("/professionals/{professional_id}/availability", response_model=AvailabilityResponse)
def professional_availability(
    professional_id: str,
    service_id: str,
    date: str,
    store: SchedulingStore = Depends(get_store),
):
    available = booking.available_slots(store, professional_id, service_id, date)
    return {
        "professional_id": professional_id,
        "service_id": service_id,
        "date": date,
        "available_starts": available,
    }


@router.post("/availability/package", response_model=PackageAvailabilityResponse)
def package_availability(
    request: PackageAvailabilityRequest,
    store: SchedulingStore = Depends(get_store),
):
    items = booking.package_items(
        store, [(item.service_id, item.professional_id) for item in request.items]
    )
    # a service without a duration cannot be laid out
    if any(item.duration_minutes <= 0 for item in items):
        available = []
    else:
        available = booking.available_package_slots(store, request.date, items)

    total = total_package_minutes(items, shop_settings["gap_minutes"])
    return {
        "date": request.date,
        "total_minutes": total,
        "duration_label": format_minutes(total),
        "available_starts": available,
    }


@router.get("/availability/days", response_model=List[DayAvailability])
def availability_days(
    start: Optional[str] = None,
    days: Optional[int] = None,
    store: SchedulingStore = Depends(get_store),
):
    start_day = None
    if start is not None:
        try:
            start_day = parse_date_key(start)
        except ValueError:
            raise HTTPException(status_code=422, detail="start must be YYYY-MM-DD")

    if days is not None and not (1 <= days <= 60):
        raise HTTPException(status_code=422, detail="days must be between 1 and 60")

    return booking.available_days(store, start_day, days)
