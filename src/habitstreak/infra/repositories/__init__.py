"""Concrete repository implementations."""

from .habit import SQLModelHabitRepository
from .memory import InMemoryHabitRepository

__all__ = [
    "InMemoryHabitRepository",
    "SQLModelHabitRepository",
]
