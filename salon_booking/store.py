# salon_booking/store.py

"""
Read/write boundary between the scheduling engine and the database.

Instants are stored as naive UTC; `core.ensure_utc` tags them back on the way out.
Business hours rows are normalized here, so nothing past this module sees
the raw table shape.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .business_hours import BusinessHoursRule, normalize_business_hours
from .busy_intervals import BusyIntervalIndex
from .core import local_day_range, to_naive_utc
from .models import (
    Appointment,
    AppointmentService,
    Block,
    BusinessHours as BusinessHoursModel,
    Professional,
    Service,
    ServiceProfessional,
)
from .schedule_builder import PackageSchedule

logger = logging.getLogger(__name__)


class StoreConflict(Exception):
    """The database refused a write that passed the availability check."""


class SchedulingStore:
    def __init__(self, session: Session):
        self.session = session

    # --- reads -----------------------------------------------------------

    def business_hours_rules(self) -> List[BusinessHoursRule]:
        rows = self.session.exec(select(BusinessHoursModel).order_by(BusinessHoursModel.id)).all()
        return normalize_business_hours(row.model_dump() for row in rows)

    def get_service(self, service_id: str) -> Optional[Service]:
        return self.session.get(Service, service_id)

    def service_duration(self, service_id: str) -> int:
        if not service_id:
            return 0
        service = self.get_service(service_id)
        if service is None:
            return 0
        return service.duration_minutes or 0

    def service_durations(self, service_ids: Iterable[str]) -> Dict[str, int]:
        ids = list({service_id for service_id in service_ids if service_id})
        if not ids:
            return {}
        services = self.session.exec(select(Service).where(Service.id.in_(ids))).all()
        return {service.id: service.duration_minutes or 0 for service in services}

    def offered_pairs(
        self, service_ids: Sequence[str], professional_ids: Sequence[str]
    ) -> Set[Tuple[str, str]]:
        if not service_ids or not professional_ids:
            return set()
        links = self.session.exec(
            select(ServiceProfessional)
            .where(ServiceProfessional.service_id.in_(list(service_ids)))
            .where(ServiceProfessional.professional_id.in_(list(professional_ids)))
        ).all()
        return {(link.service_id, link.professional_id) for link in links}

    def busy_index(self, date_key: str, professional_ids: Iterable[str]) -> BusyIntervalIndex:
        """Every busy interval touching the local day for the given professionals."""
        ids = sorted({professional_id for professional_id in professional_ids if professional_id})
        day = local_day_range(date_key)
        day_start = to_naive_utc(day.start)
        day_end = to_naive_utc(day.end)

        appointments = []
        steps = []
        if ids:
            appointments = self.session.exec(
                select(Appointment)
                .where(Appointment.status == "confirmed")
                .where(Appointment.professional_id.in_(ids))
                .where(Appointment.starts_at < day_end)
                .where(Appointment.ends_at > day_start)
            ).all()

            # steps only count while their appointment is confirmed
            steps = self.session.exec(
                select(AppointmentService)
                .join(Appointment, Appointment.id == AppointmentService.appointment_id)
                .where(Appointment.status == "confirmed")
                .where(AppointmentService.professional_id.in_(ids))
                .where(AppointmentService.starts_at < day_end)
                .where(AppointmentService.ends_at > day_start)
            ).all()

        professional_filter = Block.professional_id.is_(None)
        if ids:
            professional_filter = or_(Block.professional_id.in_(ids), professional_filter)

        blocks = self.session.exec(
            select(Block)
            .where(professional_filter)
            .where(Block.starts_at < day_end)
            .where(Block.ends_at > day_start)
        ).all()

        logger.debug(
            "Busy rows for %s %s: %d appointments, %d steps, %d blocks",
            date_key, ids, len(appointments), len(steps), len(blocks),
        )
        return BusyIntervalIndex.from_rows(date_key, appointments=appointments, steps=steps, blocks=blocks)

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]:
        return self.session.get(Appointment, appointment_id)

    def appointment_steps(self, appointment_id: int) -> List[AppointmentService]:
        steps = self.session.exec(
            select(AppointmentService)
            .where(AppointmentService.appointment_id == appointment_id)
            .order_by(AppointmentService.order_index)
        ).all()
        return list(steps)

    def list_appointments(
        self, date_key: Optional[str] = None, professional_id: Optional[str] = None
    ) -> List[Appointment]:
        stmt = select(Appointment)

        if date_key is not None:
            day = local_day_range(date_key)
            stmt = stmt.where(Appointment.starts_at >= to_naive_utc(day.start)).where(
                Appointment.starts_at < to_naive_utc(day.end)
            )

        if professional_id is not None:
            stmt = stmt.where(Appointment.professional_id == professional_id)

        stmt = stmt.order_by(Appointment.starts_at)
        return list(self.session.exec(stmt).all())

    def list_services(self) -> List[Service]:
        return list(self.session.exec(select(Service).order_by(Service.name)).all())

    def professionals_for_service(self, service_id: str) -> List[Professional]:
        return list(
            self.session.exec(
                select(Professional)
                .join(ServiceProfessional, ServiceProfessional.professional_id == Professional.id)
                .where(ServiceProfessional.service_id == service_id)
                .order_by(Professional.name)
            ).all()
        )

    # --- writes ----------------------------------------------------------

    def add_booking(
        self,
        schedule: PackageSchedule,
        client_name: str,
        client_phone: str,
        client_email: Optional[str] = None,
    ) -> Appointment:
        """Parent appointment plus its ordered steps, in one commit."""
        first = schedule.steps[0]
        appointment = Appointment(
            service_id=first.service_id,
            professional_id=first.professional_id,
            client_name=client_name,
            client_phone=client_phone,
            client_email=client_email,
            starts_at=to_naive_utc(schedule.starts_at),
            ends_at=to_naive_utc(schedule.ends_at),
            status="confirmed",
        )
        self.session.add(appointment)
        try:
            self.session.flush()  # fills appointment.id
            for step in schedule.steps:
                self.session.add(
                    AppointmentService(
                        appointment_id=appointment.id,
                        service_id=step.service_id,
                        professional_id=step.professional_id,
                        starts_at=to_naive_utc(step.starts_at),
                        ends_at=to_naive_utc(step.ends_at),
                        order_index=step.order_index,
                        duration_minutes_snapshot=step.duration_minutes,
                    )
                )
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise StoreConflict(str(exc.orig)) from exc

        self.session.refresh(appointment)
        return appointment

    def set_status(self, appointment: Appointment, status: str) -> Appointment:
        appointment.status = status
        self.session.add(appointment)
        self.session.commit()
        self.session.refresh(appointment)
        return appointment

    def add_block(self, professional_id: Optional[str], starts_at, ends_at, reason: Optional[str] = None) -> Block:
        block = Block(
            professional_id=professional_id,
            starts_at=to_naive_utc(starts_at),
            ends_at=to_naive_utc(ends_at),
            reason=reason,
        )
        self.session.add(block)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise StoreConflict(str(exc.orig)) from exc
        self.session.refresh(block)
        return block
