# salon_booking/schedule_builder.py

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

from .core import add_minutes, to_local_datetime
from .data import shop_settings


@dataclass(frozen=True)
class PackageItem:
    service_id: str
    professional_id: str
    duration_minutes: int


@dataclass(frozen=True)
class PackageStep:
    service_id: str
    professional_id: str
    duration_minutes: int
    starts_at: datetime
    ends_at: datetime
    order_index: int


@dataclass(frozen=True)
class PackageSchedule:
    steps: Tuple[PackageStep, ...]
    starts_at: Optional[datetime]
    ends_at: Optional[datetime]


def total_package_minutes(items: Sequence[PackageItem], gap_minutes: int) -> int:
    if not items:
        return 0
    return sum(item.duration_minutes for item in items) + gap_minutes * (len(items) - 1)


class ScheduleBuilder:
    """
    Lays the items out back to back from a start time, `gap_minutes` apart.

    No conflict checking happens here. The same inputs always give the same
    steps, so a slot picked from PackageScheduler can be rebuilt at commit time.
    """

    def __init__(self, gap_minutes: Optional[int] = None):
        self.gap_minutes = shop_settings["gap_minutes"] if gap_minutes is None else gap_minutes

    def build(self, date_key: str, start_time: str, items: Sequence[PackageItem]) -> PackageSchedule:
        return self.build_from(to_local_datetime(date_key, start_time), items)

    def build_from(self, start: datetime, items: Sequence[PackageItem]) -> PackageSchedule:
        cursor = start
        steps = []
        for index, item in enumerate(items):
            ends_at = add_minutes(cursor, item.duration_minutes)
            steps.append(
                PackageStep(
                    service_id=item.service_id,
                    professional_id=item.professional_id,
                    duration_minutes=item.duration_minutes,
                    starts_at=cursor,
                    ends_at=ends_at,
                    order_index=index,
                )
            )
            cursor = add_minutes(ends_at, self.gap_minutes)

        if not steps:
            return PackageSchedule(steps=(), starts_at=None, ends_at=None)
        return PackageSchedule(steps=tuple(steps), starts_at=steps[0].starts_at, ends_at=steps[-1].ends_at)
