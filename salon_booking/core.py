# salon_booking/core.py

from dataclasses import dataclass
from datetime import datetime, date, time, timedelta, timezone
from typing import Iterable, Optional, Union

from .data import shop_settings, LUNCH_START, LUNCH_END

UTC = timezone.utc


@dataclass(frozen=True)
class Interval:
    """Half-open range [start, end) of aware instants."""

    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return overlaps(start, end, self.start, self.end)


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    return start_a < end_b and end_a > start_b


def overlaps_any(start: datetime, end: datetime, intervals: Iterable[Interval]) -> bool:
    return any(interval.overlaps(start, end) for interval in intervals)


def parse_utc_offset(value: str) -> timezone:
    """'-03:00' / '+0530' / 'Z' -> fixed tzinfo."""
    value = value.strip()
    if value in ("Z", "z", ""):
        return UTC
    sign = -1 if value.startswith("-") else 1
    digits = value.lstrip("+-").replace(":", "")
    if len(digits) != 4 or not digits.isdigit():
        raise ValueError(f"Invalid UTC offset: {value!r}")
    minutes = int(digits[:2]) * 60 + int(digits[2:])
    return timezone(sign * timedelta(minutes=minutes))


def local_tz() -> timezone:
    return parse_utc_offset(shop_settings["utc_offset"])


def parse_date_key(date_key: str) -> date:
    return datetime.strptime(date_key.strip(), "%Y-%m-%d").date()


def format_date_key(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def parse_time(value: str) -> time:
    return datetime.strptime(value.strip()[:5], "%H:%M").time()


def to_local_datetime(date_key: str, time_of_day: str) -> datetime:
    """Wall-clock date + 'HH:MM' at the shop offset."""
    return datetime.combine(parse_date_key(date_key), parse_time(time_of_day), tzinfo=local_tz())


def format_time(instant: datetime) -> str:
    return ensure_utc(instant).astimezone(local_tz()).strftime("%H:%M")


def time_to_minutes(value: str) -> int:
    hours, minutes = (int(part) for part in value.split(":")[:2])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"time out of range: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(instant: datetime, minutes: int) -> datetime:
    return instant + timedelta(minutes=minutes)


def add_days(day: date, amount: int) -> date:
    return day + timedelta(days=amount)


def format_minutes(total_minutes: Optional[int]) -> str:
    if not total_minutes or total_minutes <= 0:
        return ""
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes} min"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h{minutes:02d}"


def sunday_weekday(day: date) -> int:
    # date.weekday() is Monday=0
    return (day.weekday() + 1) % 7


def ensure_utc(value: Union[datetime, str, None]) -> Optional[datetime]:
    """Aware UTC instant from a datetime or ISO string; naive values are read as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_naive_utc(instant: datetime) -> datetime:
    return ensure_utc(instant).replace(tzinfo=None)


def local_today(now: Optional[datetime] = None) -> date:
    """Today on the shop's clock, whatever zone the server runs in."""
    now = now or datetime.now(UTC)
    return ensure_utc(now).astimezone(local_tz()).date()


def local_day_range(date_key: str) -> Interval:
    start = to_local_datetime(date_key, "00:00")
    return Interval(start=start, end=start + timedelta(days=1))


def lunch_interval(date_key: str) -> Interval:
    return Interval(
        start=to_local_datetime(date_key, LUNCH_START),
        end=to_local_datetime(date_key, LUNCH_END),
    )
