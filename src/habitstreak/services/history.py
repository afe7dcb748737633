"""Dense day-by-day completion history for charting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Collection


@dataclass(frozen=True, slots=True)
class DailyCompletion:
    date: date
    completed: bool

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "completed": self.completed}


def window_bounds(today: date, window_days: int) -> tuple[date, date]:
    """Return the (start, end) of a trailing window; both ends are inclusive.

    The start never goes before ``date.min``, so the window is shorter for
    days at the very beginning of the calendar.
    """

    start = today.toordinal() - window_days
    start = min(max(start, date.min.toordinal()), date.max.toordinal())
    return date.fromordinal(start), today


def build_history(
    completion_dates: Collection[date], start_date: date, end_date: date
) -> list[DailyCompletion]:
    """Return one entry per calendar day from ``start_date`` to ``end_date`` inclusive."""

    completed = set(completion_dates)
    span = (end_date - start_date).days
    return [
        DailyCompletion(date=day, completed=day in completed)
        for day in (start_date + timedelta(days=offset) for offset in range(span + 1))
    ]


__all__ = ["DailyCompletion", "build_history", "window_bounds"]
