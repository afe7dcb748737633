"""Flask CLI commands for HabitStreak."""

from __future__ import annotations

import json

import click


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("habitstreak-init-db")
    def habitstreak_init_db() -> None:
        """Create database tables for the configured store."""

        from .infra.database import create_db_engine, init_database

        config = app.config["HABITSTREAK_CONFIG"]
        if config.STORE_BACKEND != "sql":
            click.echo("In-memory store configured; nothing to initialize.")
            return
        init_database(create_db_engine(config))
        click.echo(f"Schema ready at {config.DATABASE_URL}")

    @app.cli.command("habitstreak-stats")
    @click.argument("habit_id", type=int)
    @click.option("--user-id", type=int, required=True, help="Owner of the habit")
    @click.option("--days", type=int, default=None, help="Trailing window length in days")
    @click.option("--local-date", default=None, help="Override today (YYYY-MM-DD)")
    def habitstreak_stats(habit_id: int, user_id: int, days: int | None, local_date: str | None) -> None:
        """Print streak and completion statistics for a habit as JSON."""

        from .extensions import get_habit_service
        from .services.habits import Rejected

        config = app.config["HABITSTREAK_CONFIG"]
        window = config.clamp_window_days(days)
        result = get_habit_service().stats(
            habit_id, user_id=user_id, window_days=window, local_date=local_date
        )
        if isinstance(result, Rejected):
            raise click.ClickException(result.message)
        click.echo(json.dumps(result.to_dict(), indent=2))
