"""Resolution of the caller's notion of "today"."""

from __future__ import annotations

from datetime import date, datetime

from ..logging_config import get_logger

logger = get_logger(__name__)

LocalDate = date | str | None


def parse_local_date(value: LocalDate) -> date | None:
    """Return ``value`` as a calendar date, or None when it is missing or malformed.

    Only the syntax is checked. A well-formed date far in the past or future is
    accepted as-is.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        logger.debug("Ignoring unparseable local date", extra={"local_date": text})
        return None


def resolve_today(client_local_date: LocalDate = None) -> date:
    """Return the client's local date when usable, else the server's local date."""

    parsed = parse_local_date(client_local_date)
    if parsed is not None:
        return parsed
    return date.today()


__all__ = ["LocalDate", "parse_local_date", "resolve_today"]
