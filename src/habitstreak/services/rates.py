"""Completion-rate calculations."""

from __future__ import annotations

from datetime import date
from typing import Iterable


def lifetime_rate(total_completions: int, created_date: date, today: date) -> float:
    """Percentage of days since creation (inclusive) with a completion, one decimal."""

    days_since_creation = (today - created_date).days + 1
    if days_since_creation <= 0:
        return 0.0
    return round(total_completions / days_since_creation * 100, 1)


def window_rate(completion_dates_in_window: Iterable[date], window_days: int) -> float:
    """Percentage of distinct completed days over a trailing window. Not rounded.

    The history window spans ``window_days + 1`` calendar days, so a perfect
    record would exceed 100; the result is capped there.
    """

    if window_days <= 0:
        return 0.0
    return min(len(set(completion_dates_in_window)) / window_days * 100, 100.0)


__all__ = ["lifetime_rate", "window_rate"]
