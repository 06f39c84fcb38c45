# salon_booking/busy_intervals.py

from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .core import Interval, ensure_utc, lunch_interval, overlaps_any


def _get(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def row_interval(row: Any) -> Optional[Interval]:
    start = ensure_utc(_get(row, "starts_at"))
    end = ensure_utc(_get(row, "ends_at"))
    if start is None or end is None:
        return None
    return Interval(start=start, end=end)


class BusyIntervalIndex:
    """
    Everything that makes a professional unavailable on one day.

    Appointments and package steps are keyed by professional; blocks without a
    professional apply to everyone. Lunch is kept apart since it has no key.
    Overlapping intervals are kept as-is: a candidate is busy if it hits any.
    """

    def __init__(self, date_key: str):
        self.date_key = date_key
        self.lunch = lunch_interval(date_key)
        self._by_professional: Dict[str, List[Interval]] = defaultdict(list)
        self._general: List[Interval] = []

    @classmethod
    def from_rows(
        cls,
        date_key: str,
        appointments: Iterable[Any] = (),
        steps: Iterable[Any] = (),
        blocks: Iterable[Any] = (),
    ) -> "BusyIntervalIndex":
        index = cls(date_key)
        for row in list(appointments) + list(steps):
            index.add_commitment(_get(row, "professional_id"), row_interval(row))
        for row in blocks:
            index.add_block(_get(row, "professional_id"), row_interval(row))
        return index

    def add_commitment(self, professional_id: Optional[str], interval: Optional[Interval]) -> None:
        # appointments and steps without a professional or a full range are ignored
        if not professional_id or interval is None:
            return
        self._by_professional[professional_id].append(interval)

    def add_block(self, professional_id: Optional[str], interval: Optional[Interval]) -> None:
        if interval is None:
            return
        if not professional_id:
            self._general.append(interval)
        else:
            self._by_professional[professional_id].append(interval)

    def for_professional(self, professional_id: str) -> List[Interval]:
        intervals = self._by_professional.get(professional_id, []) + self._general
        return sorted(intervals, key=lambda interval: (interval.start, interval.end))

    def is_free(self, professional_id: str, start: datetime, end: datetime) -> bool:
        if self.lunch.overlaps(start, end):
            return False
        return not (
            overlaps_any(start, end, self._by_professional.get(professional_id, []))
            or overlaps_any(start, end, self._general)
        )
