"""Repository protocol definitions for domain layer."""

from .habit import DuplicateCompletionError, HabitRepository

__all__ = [
    "DuplicateCompletionError",
    "HabitRepository",
]
