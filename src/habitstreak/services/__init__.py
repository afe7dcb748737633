"""Service module exports."""

from . import dates, habits, history, rates, streaks

__all__ = [
    "dates",
    "habits",
    "history",
    "rates",
    "streaks",
]
