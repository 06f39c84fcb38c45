# salon_booking/models.py

from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return uuid4().hex


class Service(SQLModel, table=True):
    __tablename__ = "services"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    duration_minutes: Optional[int] = None


class Professional(SQLModel, table=True):
    __tablename__ = "professionals"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str


class ServiceProfessional(SQLModel, table=True):
    __tablename__ = "service_professionals"

    service_id: str = Field(foreign_key="services.id", primary_key=True)
    professional_id: str = Field(foreign_key="professionals.id", primary_key=True)


class BusinessHours(SQLModel, table=True):
    __tablename__ = "business_hours"

    id: Optional[int] = Field(default=None, primary_key=True)
    day_of_week: Optional[int] = None  # 0=Sunday ... 6=Saturday (7 also means Sunday)
    opens_at: Optional[str] = None  # "HH:MM"
    closes_at: Optional[str] = None
    is_closed: bool = False


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"

    id: Optional[int] = Field(default=None, primary_key=True)

    # first step's service/professional
    service_id: Optional[str] = Field(default=None, foreign_key="services.id")
    professional_id: Optional[str] = Field(default=None, foreign_key="professionals.id", index=True)

    client_name: str
    client_phone: str
    client_email: Optional[str] = None

    # naive UTC everywhere; plain DateTime keeps the column timezone-less
    starts_at: datetime = Field(sa_type=DateTime, index=True)
    ends_at: datetime = Field(sa_type=DateTime, index=True)
    status: str = "confirmed"
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class AppointmentService(SQLModel, table=True):
    __tablename__ = "appointment_services"
    __table_args__ = (
        UniqueConstraint("appointment_id", "order_index", name="uq_appointment_step"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    appointment_id: int = Field(foreign_key="appointments.id", index=True)
    service_id: str = Field(foreign_key="services.id")
    professional_id: str = Field(foreign_key="professionals.id", index=True)
    starts_at: datetime = Field(sa_type=DateTime)
    ends_at: datetime = Field(sa_type=DateTime)
    order_index: int
    duration_minutes_snapshot: int


class Block(SQLModel, table=True):
    __tablename__ = "blocks"

    id: Optional[int] = Field(default=None, primary_key=True)

    # None blocks the whole shop
    professional_id: Optional[str] = Field(default=None, foreign_key="professionals.id", index=True)
    starts_at: datetime = Field(sa_type=DateTime)
    ends_at: datetime = Field(sa_type=DateTime)
    reason: Optional[str] = None
