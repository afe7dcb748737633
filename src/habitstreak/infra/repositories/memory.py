"""In-process habit store for offline/guest sessions.

Shares the habit and completion models with the SQL store, so the same
service layer computes streaks and rates for both. Identifiers are minted
per store instance.
"""

from __future__ import annotations

import itertools
import threading
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ...domain.repositories.habit import DuplicateCompletionError
from ...models.habit import Habit, HabitCompletion


class InMemoryHabitRepository:
    """Dictionary-backed habit repository."""

    def __init__(self) -> None:
        self._habits: dict[int, Habit] = {}
        self._completions: dict[tuple[int, date], HabitCompletion] = {}
        self._habit_ids = itertools.count(1)
        self._completion_ids = itertools.count(1)
        self._lock = threading.Lock()

    def _owned(self, habit_id: int, user_id: int) -> Optional[Habit]:
        habit = self._habits.get(habit_id)
        if habit is None or habit.user_id != user_id:
            return None
        return habit

    def get_habit(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        with self._lock:
            return self._owned(habit_id, user_id)

    def list_habits(self, *, user_id: int, is_active: Optional[bool] = None) -> list[Habit]:
        with self._lock:
            habits = list(self._habits.values())
        rows = [
            habit
            for habit in habits
            if habit.user_id == user_id and (is_active is None or habit.is_active == is_active)
        ]
        # Newest first within a sort order, then stable sort by sort order.
        rows.sort(key=lambda habit: habit.created_at, reverse=True)
        rows.sort(key=lambda habit: habit.sort_order)
        return rows

    def next_sort_order(self, *, user_id: int) -> int:
        with self._lock:
            orders = [habit.sort_order for habit in self._habits.values() if habit.user_id == user_id]
        return max(orders, default=-1) + 1

    def create_habit(self, habit: Habit, *, user_id: int) -> Habit:
        with self._lock:
            habit.id = next(self._habit_ids)
            habit.user_id = user_id
            self._habits[habit.id] = habit
        return habit

    def update_habits(self, habits: Sequence[Habit], *, user_id: int) -> list[Habit]:
        with self._lock:
            for habit in habits:
                if habit.id is None or self._owned(habit.id, user_id) is None:
                    raise KeyError(f"Habit {habit.id} is not stored for user {user_id}")
                self._habits[habit.id] = habit
        return list(habits)

    def delete_habit(self, habit_id: int, *, user_id: int) -> bool:
        with self._lock:
            if self._owned(habit_id, user_id) is None:
                return False
            del self._habits[habit_id]
            for key in [key for key in self._completions if key[0] == habit_id]:
                del self._completions[key]
            return True

    # Completion operations
    def load_completions(
        self, habit_id: int, *, since: Optional[date] = None
    ) -> list[HabitCompletion]:
        with self._lock:
            items = list(self._completions.items())
        rows = [
            completion
            for (owner_id, day), completion in items
            if owner_id == habit_id and (since is None or day >= since)
        ]
        rows.sort(key=lambda completion: completion.completed_date)
        return rows

    def load_completions_for(self, habit_ids: Iterable[int]) -> dict[int, list[HabitCompletion]]:
        return {habit_id: self.load_completions(habit_id) for habit_id in habit_ids}

    def get_completion(self, habit_id: int, completed_date: date) -> Optional[HabitCompletion]:
        with self._lock:
            return self._completions.get((habit_id, completed_date))

    def insert_completion(
        self, habit_id: int, completed_date: date, completed_at: datetime
    ) -> HabitCompletion:
        key = (habit_id, completed_date)
        with self._lock:
            if key in self._completions:
                raise DuplicateCompletionError(habit_id, completed_date)
            completion = HabitCompletion.for_day(habit_id, completed_date, completed_at)
            completion.id = next(self._completion_ids)
            self._completions[key] = completion
        return completion

    def delete_completion(self, habit_id: int, completed_date: date) -> bool:
        with self._lock:
            return self._completions.pop((habit_id, completed_date), None) is not None
