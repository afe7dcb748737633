"""Habit request payload models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

TITLE_MAX_LENGTH = 200


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")


class CreateHabitForm(_Payload):
    """Payload for creating a habit."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)


class UpdateHabitForm(_Payload):
    """Payload for renaming or (de)activating a habit."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    is_active: bool = Field(default=True, alias="isActive")


class ReorderHabitsForm(_Payload):
    """Payload listing habit ids in their new display order."""

    habit_ids: list[int] = Field(alias="habitIds")

    @field_validator("habit_ids")
    @classmethod
    def reject_duplicates(cls, value: list[int]) -> list[int]:
        if len(set(value)) != len(value):
            raise ValueError("Habit IDs must be unique.")
        return value


def validation_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Flatten a pydantic error into ``{field: [messages]}``."""

    structured: dict[str, list[str]] = {}
    for error in exc.errors(include_url=False):
        loc = error.get("loc", ())
        key = str(loc[0]) if loc else "__root__"
        structured.setdefault(key, []).append(error.get("msg", "Invalid value"))
    return structured


__all__ = [
    "CreateHabitForm",
    "ReorderHabitsForm",
    "UpdateHabitForm",
    "validation_errors",
]
