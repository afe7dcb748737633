"""Habit storage protocol shared by the SQL and in-memory stores."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ...models.habit import Habit, HabitCompletion


class DuplicateCompletionError(Exception):
    """Raised by a store when a (habit, day) completion already exists."""

    def __init__(self, habit_id: int, completed_date: date) -> None:
        super().__init__(f"Habit {habit_id} already has a completion on {completed_date.isoformat()}")
        self.habit_id = habit_id
        self.completed_date = completed_date


class HabitRepository(Protocol):
    """Repository for habits and their completion events.

    Habit lookups are scoped to the owning user. Completion operations take a
    habit id the caller has already resolved for that user.
    """

    def get_habit(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit owned by ``user_id``."""
        ...

    def list_habits(self, *, user_id: int, is_active: Optional[bool] = None) -> list[Habit]:
        """List a user's habits by sort order, newest first within equal orders."""
        ...

    def next_sort_order(self, *, user_id: int) -> int:
        """Return the sort order a newly created habit should get."""
        ...

    def create_habit(self, habit: Habit, *, user_id: int) -> Habit:
        """Persist a new habit."""
        ...

    def update_habits(self, habits: Sequence[Habit], *, user_id: int) -> list[Habit]:
        """Persist changes to one or more habits in a single unit of work."""
        ...

    def delete_habit(self, habit_id: int, *, user_id: int) -> bool:
        """Delete a habit and its completions. Returns False when nothing matched."""
        ...

    # Completion operations
    def load_completions(
        self, habit_id: int, *, since: Optional[date] = None
    ) -> list[HabitCompletion]:
        """Return completions for a habit, optionally only those on or after ``since``."""
        ...

    def load_completions_for(self, habit_ids: Iterable[int]) -> dict[int, list[HabitCompletion]]:
        """Return completions grouped by habit id, with an entry for every id."""
        ...

    def get_completion(self, habit_id: int, completed_date: date) -> Optional[HabitCompletion]:
        """Return the completion for a habit on a day, if any."""
        ...

    def insert_completion(
        self, habit_id: int, completed_date: date, completed_at: datetime
    ) -> HabitCompletion:
        """Insert a completion; raises DuplicateCompletionError if the day is taken."""
        ...

    def delete_completion(self, habit_id: int, completed_date: date) -> bool:
        """Delete the completion for a day. Returns False when none existed."""
        ...
