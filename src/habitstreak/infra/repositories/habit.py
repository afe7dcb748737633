"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...domain.repositories.habit import DuplicateCompletionError
from ...models.habit import Habit, HabitCompletion
from ...models.user import User


def _is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_habit(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_habits(self, *, user_id: int, is_active: Optional[bool] = None) -> list[Habit]:
        """List a user's habits, optionally filtered by the active flag."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .order_by(Habit.sort_order, Habit.created_at.desc())  # type: ignore[union-attr]
            )
            if is_active is not None:
                statement = statement.where(Habit.is_active == is_active)

            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def next_sort_order(self, *, user_id: int) -> int:
        with self.session_factory() as session:
            current = session.exec(
                select(func.max(Habit.sort_order)).where(Habit.user_id == user_id)
            ).one()
            return 0 if current is None else current + 1

    def ensure_user(self, user_id: int) -> User:
        """Return the owner row for ``user_id``, creating it on first use."""
        try:
            with self.session_factory() as session:
                user = session.get(User, user_id)
                if user is None:
                    user = User(id=user_id, username=f"user-{user_id}")
                    session.add(user)
                    session.flush()
                session.expunge(user)
                return user
        except IntegrityError:
            # A concurrent request created the same owner first.
            with self.session_factory() as session:
                user = session.get(User, user_id)
                if user is None:
                    raise
                session.expunge(user)
                return user

    def create_habit(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        self.ensure_user(user_id)
        with self.session_factory() as session:
            habit.user_id = user_id
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update_habits(self, habits: Sequence[Habit], *, user_id: int) -> list[Habit]:
        """Persist edits to existing habits in one transaction."""
        with self.session_factory() as session:
            for habit in habits:
                habit.user_id = user_id
                session.add(habit)
            session.commit()
            for habit in habits:
                session.refresh(habit)
                session.expunge(habit)
            return list(habits)

    def delete_habit(self, habit_id: int, *, user_id: int) -> bool:
        """Delete a habit by ID; its completions go with it."""
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if habit is None:
                return False
            session.delete(habit)
            session.commit()
            return True

    # Completion operations
    def load_completions(
        self, habit_id: int, *, since: Optional[date] = None
    ) -> list[HabitCompletion]:
        with self.session_factory() as session:
            statement = (
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .order_by(HabitCompletion.completed_date)  # type: ignore[arg-type]
            )
            if since is not None:
                statement = statement.where(HabitCompletion.completed_date >= since)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def load_completions_for(self, habit_ids: Iterable[int]) -> dict[int, list[HabitCompletion]]:
        ids = list(habit_ids)
        grouped: dict[int, list[HabitCompletion]] = {habit_id: [] for habit_id in ids}
        if not ids:
            return grouped

        with self.session_factory() as session:
            statement = (
                select(HabitCompletion)
                .where(HabitCompletion.habit_id.in_(ids))  # type: ignore[attr-defined]
                .order_by(HabitCompletion.completed_date)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()

        for row in rows:
            grouped.setdefault(row.habit_id, []).append(row)
        return grouped

    def get_completion(self, habit_id: int, completed_date: date) -> Optional[HabitCompletion]:
        with self.session_factory() as session:
            obj = session.exec(
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completed_date == completed_date)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def insert_completion(
        self, habit_id: int, completed_date: date, completed_at: datetime
    ) -> HabitCompletion:
        """Insert a completion, surfacing a unique-constraint hit as DuplicateCompletionError."""
        completion = HabitCompletion.for_day(habit_id, completed_date, completed_at)
        with self.session_factory() as session:
            session.add(completion)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if _is_unique_violation(exc):
                    raise DuplicateCompletionError(habit_id, completed_date) from exc
                raise
            session.refresh(completion)
            session.expunge(completion)
            return completion

    def delete_completion(self, habit_id: int, completed_date: date) -> bool:
        with self.session_factory() as session:
            completion = session.exec(
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completed_date == completed_date)
            ).first()
            if completion is None:
                return False
            session.delete(completion)
            session.commit()
            return True
