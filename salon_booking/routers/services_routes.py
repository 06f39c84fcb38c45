# salon_booking/routers/services_routes.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from salon_booking.core import format_minutes
from salon_booking.deps import get_store
from salon_booking.schemas import ProfessionalPublic, ServicePublic
from salon_booking.store import SchedulingStore

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


@router.get("", response_model=List[ServicePublic])
def list_services(store: SchedulingStore = Depends(get_store)):
    return [
        {
            "id": service.id,
            "name": service.name,
            "duration_minutes": service.duration_minutes,
            "duration_label": format_minutes(service.duration_minutes),
        }
        for service in store.list_services()
    ]


@router.get("/{service_id}/professionals", response_model=List[ProfessionalPublic])
def service_professionals(
    service_id: str,
    store: SchedulingStore = Depends(get_store),
):
    if store.get_service(service_id) is None:
        raise HTTPException(status_code=404, detail="Service not found")

    return [
        {"id": professional.id, "name": professional.name}
        for professional in store.professionals_for_service(service_id)
    ]
