"""HabitStreak application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask

from . import cli as _cli
from .config import BaseConfig, DevConfig, TestConfig, resolve_config
from .logging_config import setup_logging


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths to register on the app."""

    yield "habitstreak.blueprints.habits"


def create_app(config_name: str | None = None, *, config: BaseConfig | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_obj = config or resolve_config(config_name)()
    app.config.from_object(config_obj)
    app.config["HABITSTREAK_CONFIG"] = config_obj

    setup_logging(config_obj)
    _register_blueprints(app)

    # Import init_db lazily so importing the package does not build engines.
    from .extensions import init_db

    init_db(app)
    _cli.init_app(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app"]
