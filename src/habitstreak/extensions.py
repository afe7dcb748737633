"""Database and service wiring for the Flask app."""

from __future__ import annotations

from typing import Any

from flask import Flask, current_app

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import InMemoryHabitRepository, SQLModelHabitRepository
from .logging_config import get_logger
from .services.habits import HabitService

EXTENSION_KEY = "habitstreak"

logger = get_logger(__name__)


def init_db(app: Flask) -> None:
    """Create the habit store selected by configuration and attach a service to the app."""

    config: BaseConfig = app.config["HABITSTREAK_CONFIG"]
    state: dict[str, Any] = {}

    if config.STORE_BACKEND == "memory":
        repository = InMemoryHabitRepository()
    elif config.STORE_BACKEND == "sql":
        engine, session_factory = bootstrap_database(config)
        state["engine"] = engine
        state["session_factory"] = session_factory
        repository = SQLModelHabitRepository(session_factory)
    else:
        raise ValueError(f"Unknown HABITSTREAK_STORE backend: {config.STORE_BACKEND!r}")

    state["repository"] = repository
    state["habit_service"] = HabitService(repository)
    app.extensions[EXTENSION_KEY] = state
    logger.info("Habit store ready", extra={"backend": config.STORE_BACKEND})


def get_habit_service() -> HabitService:
    """Return the habit service bound to the current app."""

    state = current_app.extensions.get(EXTENSION_KEY)
    if not state:  # pragma: no cover - exercised only on misconfigured apps
        raise RuntimeError("Habit store not initialized")
    return state["habit_service"]
