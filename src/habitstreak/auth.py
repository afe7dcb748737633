"""Resolution of the authenticated user for API requests.

Identity is established upstream (gateway or session layer), which forwards
the user id in a header. This module only reads that trusted value.
"""

from __future__ import annotations

from flask import abort, request

USER_ID_HEADER = "X-User-Id"


def require_user_id() -> int:
    """Return the caller's user id or abort with 401."""

    raw = request.headers.get(USER_ID_HEADER, "").strip()
    if not raw.isdigit() or int(raw) <= 0:
        abort(401)
    return int(raw)
