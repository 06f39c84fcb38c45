# salon_booking/slots.py

"""
Slot generation.

Both generators walk candidate start times from the opening time in fixed
steps and keep the ones whose whole span fits before closing and misses every
busy interval. Results are recomputed on every call.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterator, List, Optional, Sequence

from .business_hours import BusinessHoursResolver
from .busy_intervals import BusyIntervalIndex
from .core import format_time, parse_date_key, to_local_datetime
from .data import shop_settings
from .schedule_builder import PackageItem, ScheduleBuilder, total_package_minutes

logger = logging.getLogger(__name__)


def iter_candidate_starts(
    window_start: datetime,
    window_end: datetime,
    span_minutes: int,
    step_minutes: int,
) -> Iterator[datetime]:
    span = timedelta(minutes=span_minutes)
    step = timedelta(minutes=step_minutes)
    current = window_start
    while current + span <= window_end:
        yield current
        current += step


class SlotGenerator:
    """Start times for one service with one professional."""

    def __init__(
        self,
        resolver: BusinessHoursResolver,
        busy: BusyIntervalIndex,
        step_minutes: Optional[int] = None,
    ):
        self.resolver = resolver
        self.busy = busy
        self.step_minutes = step_minutes or shop_settings["slot_minutes"]

    def slots(self, professional_id: str, duration_minutes: int, date_key: str) -> List[str]:
        if duration_minutes <= 0:
            return []

        hours = self.resolver.resolve(parse_date_key(date_key))
        if hours is None:
            return []

        window_start = to_local_datetime(date_key, hours.open)
        window_end = to_local_datetime(date_key, hours.close)

        available = []
        for start in iter_candidate_starts(window_start, window_end, duration_minutes, self.step_minutes):
            end = start + timedelta(minutes=duration_minutes)
            if self.busy.is_free(professional_id, start, end):
                available.append(format_time(start))
        return available


class PackageScheduler:
    """
    Start times for an ordered package of (service, professional) steps.

    Every professional is checked against the same shop window. A start time
    is offered only if each step, laid out back to back, is free for its own
    professional and clear of lunch.
    """

    def __init__(
        self,
        resolver: BusinessHoursResolver,
        busy: BusyIntervalIndex,
        step_minutes: Optional[int] = None,
        builder: Optional[ScheduleBuilder] = None,
    ):
        self.resolver = resolver
        self.busy = busy
        self.step_minutes = step_minutes or shop_settings["slot_minutes"]
        self.builder = builder or ScheduleBuilder()

    def total_minutes(self, items: Sequence[PackageItem]) -> int:
        return total_package_minutes(items, self.builder.gap_minutes)

    def fits(self, start: datetime, items: Sequence[PackageItem]) -> bool:
        schedule = self.builder.build_from(start, items)
        return all(
            self.busy.is_free(step.professional_id, step.starts_at, step.ends_at)
            for step in schedule.steps
        )

    def package_slots(self, date_key: str, items: Sequence[PackageItem]) -> List[str]:
        if not date_key or not items:
            return []

        total_minutes = self.total_minutes(items)
        if total_minutes <= 0:
            return []

        hours = self.resolver.resolve(parse_date_key(date_key))
        if hours is None:
            return []

        window_start = to_local_datetime(date_key, hours.open)
        window_end = to_local_datetime(date_key, hours.close)

        available = [
            format_time(start)
            for start in iter_candidate_starts(window_start, window_end, total_minutes, self.step_minutes)
            if self.fits(start, items)
        ]
        logger.debug(
            "Package of %d items (%d min) on %s: %d start times",
            len(items), total_minutes, date_key, len(available),
        )
        return available
