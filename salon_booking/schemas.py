# salon_booking/schemas.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import List, Optional, Union

from .core import ensure_utc


class UTCModel(BaseModel):
    """Response model whose instants go out as aware UTC."""

    model_config = ConfigDict(from_attributes=True)

    @field_validator("starts_at", "ends_at", check_fields=False)
    @classmethod
    def tag_utc(cls, value):
        return ensure_utc(value)


class ServicePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    duration_minutes: Optional[int] = None
    duration_label: str = ""


class ProfessionalPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class AvailabilityResponse(BaseModel):
    professional_id: str
    service_id: str
    date: str
    available_starts: List[str]


class PackageItemIn(BaseModel):
    service_id: str
    professional_id: str


class PackageAvailabilityRequest(BaseModel):
    date: str
    items: List[PackageItemIn] = Field(default_factory=list)


class PackageAvailabilityResponse(BaseModel):
    date: str
    total_minutes: int
    duration_label: str
    available_starts: List[str]


class DayAvailability(BaseModel):
    date: str
    weekday: int  # 0=Sunday
    is_open: bool
    open: Optional[str] = None
    close: Optional[str] = None


class BookingCreate(BaseModel):
    # either parallel lists (or comma-separated strings) or a single pair
    services: Optional[Union[List[str], str]] = None
    professionals: Optional[Union[List[str], str]] = None
    service_id: Optional[str] = None
    professional_id: Optional[str] = None

    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None


class StepPublic(UTCModel):
    service_id: str
    professional_id: str
    starts_at: datetime
    ends_at: datetime
    order_index: int
    duration_minutes: int


class AppointmentPublic(UTCModel):
    id: int
    service_id: Optional[str] = None
    professional_id: Optional[str] = None
    client_name: str
    client_phone: str
    client_email: Optional[str] = None
    starts_at: datetime
    ends_at: datetime
    status: str
    steps: List[StepPublic] = Field(default_factory=list)


class BlockCreate(BaseModel):
    professional_id: Optional[str] = None
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None


class BlockPublic(UTCModel):
    id: int
    professional_id: Optional[str] = None
    starts_at: datetime
    ends_at: datetime
    reason: Optional[str] = None
