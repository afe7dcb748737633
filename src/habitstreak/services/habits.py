"""Habit service: summaries, statistics and completion writes.

All derived numbers are recomputed from the full completion log on every
read. Expected outcomes such as a duplicate completion are returned as
:class:`Rejected` values; only unexpected storage failures raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence, Union

from ..domain.repositories.habit import DuplicateCompletionError, HabitRepository
from ..logging_config import get_logger
from ..models.habit import Habit, HabitCompletion, utcnow
from .dates import LocalDate, resolve_today
from .history import DailyCompletion, build_history, window_bounds
from .rates import lifetime_rate, window_rate
from .streaks import current_streak, longest_streak

logger = get_logger(__name__)

DEFAULT_WINDOW_DAYS = 30


class RejectionReason(str, Enum):
    """Recoverable reasons a habit operation did not happen."""

    NOT_FOUND = "not_found"
    ALREADY_COMPLETED = "already_completed"
    NOT_COMPLETED = "not_completed"
    INVALID_IDS = "invalid_ids"


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: RejectionReason
    message: str


NOT_FOUND = Rejected(RejectionReason.NOT_FOUND, "Habit not found")
ALREADY_COMPLETED = Rejected(RejectionReason.ALREADY_COMPLETED, "Habit already completed today")
NOT_COMPLETED = Rejected(RejectionReason.NOT_COMPLETED, "Habit not completed today")
INVALID_IDS = Rejected(RejectionReason.INVALID_IDS, "Some habit IDs are invalid")


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(slots=True)
class HabitSummary:
    """Habit fields plus today's status and lifetime numbers."""

    id: int
    title: str
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime
    is_completed_today: bool
    last_completed_at: Optional[datetime]
    current_streak: int
    total_completions: int
    completion_rate: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "isActive": self.is_active,
            "sortOrder": self.sort_order,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
            "isCompletedToday": self.is_completed_today,
            "lastCompletedAt": _isoformat(self.last_completed_at),
            "currentStreak": self.current_streak,
            "totalCompletions": self.total_completions,
            "completionRate": self.completion_rate,
        }


@dataclass(slots=True)
class HabitStats:
    """Streaks, windowed rate and a dense history for one habit."""

    habit_id: int
    habit_title: str
    total_completions: int
    current_streak: int
    longest_streak: int
    completion_rate_last_month: float
    completion_history: list[DailyCompletion] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "habitId": self.habit_id,
            "habitTitle": self.habit_title,
            "totalCompletions": self.total_completions,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "completionRateLastMonth": self.completion_rate_last_month,
            "completionHistory": [day.to_dict() for day in self.completion_history],
        }


@dataclass(frozen=True, slots=True)
class DailyCompletionRate:
    """Share of a user's active habits completed on one day."""

    completed: int
    total: int
    percentage: float

    def to_dict(self) -> dict:
        return {"completed": self.completed, "total": self.total, "percentage": self.percentage}


def completion_to_dict(completion: HabitCompletion) -> dict:
    return {
        "id": completion.id,
        "habitId": completion.habit_id,
        "completedAt": _isoformat(completion.completed_at),
        "completedDate": completion.completed_date.isoformat(),
    }


def summarize(habit: Habit, completions: Sequence[HabitCompletion], today: date) -> HabitSummary:
    """Assemble a summary from a habit and its full completion history."""

    dates = {completion.completed_date for completion in completions}
    total = len(completions)
    last_completed_at = max((completion.completed_at for completion in completions), default=None)

    return HabitSummary(
        id=habit.id,  # type: ignore[arg-type]
        title=habit.title,
        is_active=habit.is_active,
        sort_order=habit.sort_order,
        created_at=habit.created_at,
        updated_at=habit.updated_at,
        is_completed_today=today in dates,
        last_completed_at=last_completed_at,
        current_streak=current_streak(dates, today),
        total_completions=total,
        completion_rate=lifetime_rate(total, habit.created_date, today),
    )


def compute_stats(
    habit: Habit,
    completions: Sequence[HabitCompletion],
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> HabitStats:
    """Assemble streaks, windowed rate and history over ``[today - window_days, today]``."""

    all_dates = {completion.completed_date for completion in completions}
    start, end = window_bounds(today, window_days)
    in_window = {day for day in all_dates if start <= day <= end}

    return HabitStats(
        habit_id=habit.id,  # type: ignore[arg-type]
        habit_title=habit.title,
        total_completions=len(completions),
        current_streak=current_streak(all_dates, today),
        longest_streak=longest_streak(all_dates),
        completion_rate_last_month=window_rate(in_window, window_days),
        completion_history=build_history(in_window, start, end),
    )


HabitResult = Union[HabitSummary, Rejected]


class HabitService:
    """Orchestrates habit reads and completion writes over any habit store."""

    def __init__(
        self,
        repository: HabitRepository,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.repository = repository
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    # Reads -----------------------------------------------------------------
    def summary(self, habit: Habit, *, today: date) -> HabitSummary:
        """Return the summary for an already-loaded habit."""

        completions = self.repository.load_completions(habit.id)  # type: ignore[arg-type]
        return summarize(habit, completions, today)

    def get_habit(
        self, habit_id: int, *, user_id: int, local_date: LocalDate = None
    ) -> HabitResult:
        habit = self.repository.get_habit(habit_id, user_id=user_id)
        if habit is None:
            return NOT_FOUND
        return self.summary(habit, today=resolve_today(local_date))

    def list_habits(
        self,
        *,
        user_id: int,
        is_active: Optional[bool] = None,
        local_date: LocalDate = None,
    ) -> list[HabitSummary]:
        today = resolve_today(local_date)
        habits = self.repository.list_habits(user_id=user_id, is_active=is_active)
        return self._summarize_all(habits, today)

    def stats(
        self,
        habit_id: int,
        *,
        user_id: int,
        window_days: int = DEFAULT_WINDOW_DAYS,
        local_date: LocalDate = None,
    ) -> Union[HabitStats, Rejected]:
        habit = self.repository.get_habit(habit_id, user_id=user_id)
        if habit is None:
            return NOT_FOUND
        completions = self.repository.load_completions(habit_id)
        return compute_stats(habit, completions, resolve_today(local_date), window_days)

    def list_completions(
        self,
        habit_id: int,
        *,
        user_id: int,
        days: int = DEFAULT_WINDOW_DAYS,
        local_date: LocalDate = None,
    ) -> Union[list[HabitCompletion], Rejected]:
        """Return raw completions since ``today - days``, newest first."""

        if self.repository.get_habit(habit_id, user_id=user_id) is None:
            return NOT_FOUND
        start, _ = window_bounds(resolve_today(local_date), days)
        completions = self.repository.load_completions(habit_id, since=start)
        return sorted(completions, key=lambda completion: completion.completed_date, reverse=True)

    def daily_completion_rate(
        self, *, user_id: int, local_date: LocalDate = None
    ) -> DailyCompletionRate:
        """Return how many active habits are done for the resolved day."""

        today = resolve_today(local_date)
        habits = self.repository.list_habits(user_id=user_id, is_active=True)
        grouped = self.repository.load_completions_for(habit.id for habit in habits)  # type: ignore[misc]
        completed = sum(
            1
            for habit in habits
            if any(c.completed_date == today for c in grouped.get(habit.id, []))  # type: ignore[arg-type]
        )
        total = len(habits)
        percentage = completed / total * 100 if total else 0.0
        return DailyCompletionRate(completed=completed, total=total, percentage=percentage)

    # Habit writes ----------------------------------------------------------
    def create_habit(self, *, user_id: int, title: str, local_date: LocalDate = None) -> HabitSummary:
        now = utcnow()
        habit = Habit(
            user_id=user_id,
            title=title,
            sort_order=self.repository.next_sort_order(user_id=user_id),
            created_at=now,
            updated_at=now,
        )
        habit = self.repository.create_habit(habit, user_id=user_id)
        logger.info("Habit created", extra={"habit_id": habit.id, "user_id": user_id})
        return summarize(habit, [], resolve_today(local_date))

    def update_habit(
        self,
        habit_id: int,
        *,
        user_id: int,
        title: str,
        is_active: bool,
        local_date: LocalDate = None,
    ) -> HabitResult:
        habit = self.repository.get_habit(habit_id, user_id=user_id)
        if habit is None:
            return NOT_FOUND
        habit.title = title
        habit.is_active = is_active
        habit.updated_at = utcnow()
        self.repository.update_habits([habit], user_id=user_id)
        return self.summary(habit, today=resolve_today(local_date))

    def delete_habit(self, habit_id: int, *, user_id: int) -> Optional[Rejected]:
        """Delete a habit with its completions; returns a rejection when it is not found."""

        if not self.repository.delete_habit(habit_id, user_id=user_id):
            return NOT_FOUND
        logger.info("Habit deleted", extra={"habit_id": habit_id, "user_id": user_id})
        return None

    def reorder_habits(
        self, *, user_id: int, habit_ids: Sequence[int], local_date: LocalDate = None
    ) -> Union[list[HabitSummary], Rejected]:
        """Assign sort orders following ``habit_ids``; every id must be the user's."""

        owned = {habit.id: habit for habit in self.repository.list_habits(user_id=user_id)}
        if len(set(habit_ids)) != len(habit_ids) or any(i not in owned for i in habit_ids):
            return INVALID_IDS

        now = utcnow()
        reordered = []
        for position, habit_id in enumerate(habit_ids):
            habit = owned[habit_id]
            habit.sort_order = position
            habit.updated_at = now
            reordered.append(habit)
        self.repository.update_habits(reordered, user_id=user_id)
        return self.list_habits(user_id=user_id, local_date=local_date)

    # Completion writes -----------------------------------------------------
    def complete(
        self, habit_id: int, *, user_id: int, local_date: LocalDate = None
    ) -> HabitResult:
        """Mark a habit done for the resolved day (absent -> present)."""

        habit = self.repository.get_habit(habit_id, user_id=user_id)
        if habit is None:
            return NOT_FOUND

        today = resolve_today(local_date)
        if self.repository.get_completion(habit_id, today) is not None:
            logger.info(
                "Completion rejected: already completed",
                extra={"habit_id": habit_id, "completed_date": today.isoformat()},
            )
            return ALREADY_COMPLETED

        try:
            self.repository.insert_completion(habit_id, today, self.clock())
        except DuplicateCompletionError:
            logger.warning(
                "Concurrent completion won the race",
                extra={"habit_id": habit_id, "completed_date": today.isoformat()},
            )
            return ALREADY_COMPLETED

        logger.info(
            "Habit completed",
            extra={"habit_id": habit_id, "completed_date": today.isoformat()},
        )
        return self.summary(habit, today=today)

    def uncomplete(
        self, habit_id: int, *, user_id: int, local_date: LocalDate = None
    ) -> HabitResult:
        """Remove the completion for the resolved day (present -> absent)."""

        habit = self.repository.get_habit(habit_id, user_id=user_id)
        if habit is None:
            return NOT_FOUND

        today = resolve_today(local_date)
        if not self.repository.delete_completion(habit_id, today):
            logger.info(
                "Uncompletion rejected: not completed",
                extra={"habit_id": habit_id, "completed_date": today.isoformat()},
            )
            return NOT_COMPLETED

        logger.info(
            "Habit uncompleted",
            extra={"habit_id": habit_id, "completed_date": today.isoformat()},
        )
        return self.summary(habit, today=today)

    # Helpers ---------------------------------------------------------------
    def _summarize_all(self, habits: Iterable[Habit], today: date) -> list[HabitSummary]:
        habits = list(habits)
        grouped = self.repository.load_completions_for(habit.id for habit in habits)  # type: ignore[misc]
        return [summarize(habit, grouped.get(habit.id, []), today) for habit in habits]  # type: ignore[arg-type]


__all__ = [
    "ALREADY_COMPLETED",
    "DEFAULT_WINDOW_DAYS",
    "DailyCompletionRate",
    "HabitResult",
    "HabitService",
    "HabitStats",
    "HabitSummary",
    "INVALID_IDS",
    "NOT_COMPLETED",
    "NOT_FOUND",
    "Rejected",
    "RejectionReason",
    "completion_to_dict",
    "compute_stats",
    "summarize",
]
