"""Habit tracking data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Habit(SQLModel, table=True):
    """A user-defined habit tracked once per calendar day."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True, ondelete="CASCADE")
    title: str = Field(nullable=False, max_length=200)
    is_active: bool = Field(default=True, nullable=False)
    sort_order: int = Field(default=0, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    completions: list["HabitCompletion"] = Relationship(
        sa_relationship=relationship(
            "HabitCompletion",
            back_populates="habit",
            cascade="all, delete-orphan",
        ),
    )

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="habits"))

    @property
    def created_date(self) -> date:
        """Calendar day the habit was created on."""
        return self.created_at.date()


class HabitCompletion(SQLModel, table=True):
    """A record that a habit was performed on one calendar day."""

    __tablename__: ClassVar[str] = "habit_completion"
    __table_args__ = (
        UniqueConstraint("habit_id", "completed_date", name="uq_habit_completion_day"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True, ondelete="CASCADE")
    completed_at: datetime = Field(default_factory=utcnow, nullable=False)
    completed_date: date = Field(nullable=False, index=True)
    year: int = Field(default=0, nullable=False)
    month: int = Field(default=0, nullable=False)
    week: int = Field(default=0, nullable=False)

    habit: "Habit" = Relationship(
        sa_relationship=relationship("Habit", back_populates="completions"),
    )

    @classmethod
    def for_day(cls, habit_id: int, completed_date: date, completed_at: datetime) -> "HabitCompletion":
        """Build a completion with the denormalized calendar columns filled in."""

        return cls(
            habit_id=habit_id,
            completed_at=completed_at,
            completed_date=completed_date,
            year=completed_date.year,
            month=completed_date.month,
            week=completed_at.isocalendar()[1],
        )
