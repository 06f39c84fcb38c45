# salon_booking/business_hours.py

"""
Business hours resolution.

Rows coming out of the store do not share one shape: the day index, the
open/close times and the closed flag can each live under several field names.
`normalize_business_hours` folds them into `BusinessHoursRule`s once, at the
store boundary, and `BusinessHoursResolver` only ever works with those.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional

from .core import minutes_to_time, sunday_weekday, time_to_minutes
from .data import shop_settings

logger = logging.getLogger(__name__)

DAY_FIELDS = ("day_of_week", "weekday", "day", "day_index", "week_day")
OPEN_FIELDS = ("opens_at", "open_time", "start_time", "opens", "open")
CLOSE_FIELDS = ("closes_at", "close_time", "end_time", "closes", "close")


@dataclass(frozen=True)
class BusinessHoursRule:
    day_of_week: int  # Sunday=0
    opens_at: Optional[str] = None  # "HH:MM"
    closes_at: Optional[str] = None
    is_closed: bool = False


@dataclass(frozen=True)
class BusinessHours:
    open: str
    close: str


def _get(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def _first(row: Any, names) -> Any:
    for name in names:
        value = _get(row, name)
        if value is not None:
            return value
    return None


def read_day_index(row: Any) -> Optional[int]:
    raw = _first(row, DAY_FIELDS)
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        try:
            raw = float(raw.strip())
        except ValueError:
            return None
    if isinstance(raw, float):
        if not raw.is_integer():
            return None
        raw = int(raw)
    if not isinstance(raw, int):
        return None
    day = raw

    if 0 <= day <= 6:
        return day
    if day == 7:
        return 0
    return None


def read_time(value: Any) -> Optional[str]:
    """'HH:MM' from a time string, a time or a timestamp."""
    if not value:
        return None
    if isinstance(value, (datetime, time)):
        return value.strftime("%H:%M")
    if isinstance(value, str):
        text = value.strip()
        # full timestamps: keep the time-of-day part
        if "T" in text:
            text = text.split("T", 1)[1]
        elif " " in text:
            text = text.split(" ", 1)[1]
        text = text[:5]
        try:
            return minutes_to_time(time_to_minutes(text))
        except ValueError:
            return None
    return None


def read_first_time(row: Any, names) -> Optional[str]:
    # an empty or unparseable field falls through to the next name
    for name in names:
        value = read_time(_get(row, name))
        if value is not None:
            return value
    return None


def is_closed_row(row: Any) -> bool:
    return bool(
        _get(row, "is_closed")
        or _get(row, "closed")
        or _get(row, "is_open") is False
        or _get(row, "active") is False
    )


def normalize_business_hours(rows: Optional[Iterable[Any]]) -> List[BusinessHoursRule]:
    rules = []
    for row in rows or []:
        day = read_day_index(row)
        if day is None:
            logger.debug("Skipping business hours row without a usable day: %r", row)
            continue
        rules.append(
            BusinessHoursRule(
                day_of_week=day,
                opens_at=read_first_time(row, OPEN_FIELDS),
                closes_at=read_first_time(row, CLOSE_FIELDS),
                is_closed=is_closed_row(row),
            )
        )
    return rules


def default_hours(day_of_week: int) -> Optional[BusinessHours]:
    if day_of_week not in shop_settings["default_open_days"]:
        return None
    return BusinessHours(open=shop_settings["default_open"], close=shop_settings["default_close"])


class BusinessHoursResolver:
    """Date -> opening window, or None when closed. Build one per request."""

    def __init__(self, rules: Iterable[BusinessHoursRule]):
        self._rules: Dict[int, BusinessHoursRule] = {}
        for rule in rules:
            # first rule for a day wins
            self._rules.setdefault(rule.day_of_week, rule)
        self._cache: Dict[date, Optional[BusinessHours]] = {}

    @classmethod
    def from_rows(cls, rows: Optional[Iterable[Any]]) -> "BusinessHoursResolver":
        return cls(normalize_business_hours(rows))

    def resolve(self, day: date) -> Optional[BusinessHours]:
        if day not in self._cache:
            self._cache[day] = self._resolve(day)
        return self._cache[day]

    def _resolve(self, day: date) -> Optional[BusinessHours]:
        day_index = sunday_weekday(day)
        rule = self._rules.get(day_index)

        if rule is None:
            return default_hours(day_index)

        if rule.is_closed:
            return None

        if not rule.opens_at or not rule.closes_at:
            return default_hours(day_index)

        if time_to_minutes(rule.opens_at) >= time_to_minutes(rule.closes_at):
            logger.warning(
                "Business hours for day %s open at %s and close at %s; treating as closed",
                day_index, rule.opens_at, rule.closes_at,
            )
            return None

        return BusinessHours(open=rule.opens_at, close=rule.closes_at)
