"""Streak calculations over sets of completion dates."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

ONE_DAY = timedelta(days=1)


def previous_day(day: date) -> Optional[date]:
    """Return the calendar day before ``day``, or None at ``date.min``."""

    if day == date.min:
        return None
    return day - ONE_DAY


def current_streak(completion_dates: Iterable[date], today: date) -> int:
    """Return the run of consecutive completed days ending today or yesterday.

    A streak whose latest day is yesterday is still alive: it only breaks once
    a whole day has passed without a completion.
    """

    streak = 0
    expected: Optional[date] = today
    yesterday = previous_day(today)

    # Walk newest to oldest; each match moves the expectation one day back.
    # Only the first step may land on yesterday instead of today.
    for day in sorted(set(completion_dates), reverse=True):
        if day == expected or (streak == 0 and day == yesterday):
            streak += 1
            expected = previous_day(day)
        else:
            break

    return streak


def longest_streak(completion_dates: Iterable[date]) -> int:
    """Return the longest run of consecutive completed days across all history."""

    days = sorted(set(completion_dates))
    if not days:
        return 0

    longest = 1
    run = 1
    for previous, day in zip(days, days[1:]):
        if (day - previous).days == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


__all__ = ["current_streak", "longest_streak", "previous_day"]
