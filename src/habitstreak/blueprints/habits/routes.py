"""Habit API routes."""

from __future__ import annotations

from typing import Optional

from flask import abort, current_app, jsonify, make_response, request
from pydantic import ValidationError

from ...auth import require_user_id
from ...extensions import get_habit_service
from ...services.habits import Rejected, RejectionReason, completion_to_dict
from . import bp
from .forms import CreateHabitForm, ReorderHabitsForm, UpdateHabitForm, validation_errors


def _local_date() -> Optional[str]:
    return request.args.get("localDate") or None


def _is_active_filter() -> Optional[bool]:
    raw = request.args.get("isActive", "")
    lowered = raw.strip().lower()
    if not lowered:
        return None
    if lowered in {"true", "1"}:
        return True
    if lowered in {"false", "0"}:
        return False
    abort(make_response(jsonify({"message": "isActive must be true or false"}), 400))


def _window_days() -> int:
    """Return the ``days`` query value clamped to the configured maximum."""

    config = current_app.config["HABITSTREAK_CONFIG"]
    return config.clamp_window_days(request.args.get("days", type=int))


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _rejection(rejected: Rejected):
    status = 404 if rejected.reason is RejectionReason.NOT_FOUND else 400
    return jsonify({"message": rejected.message, "reason": rejected.reason.value}), status


@bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    return jsonify({"message": "Invalid request payload", "errors": validation_errors(exc)}), 400


@bp.get("")
def list_habits():
    """List the caller's habits with today's status."""

    summaries = get_habit_service().list_habits(
        user_id=require_user_id(),
        is_active=_is_active_filter(),
        local_date=_local_date(),
    )
    return jsonify([summary.to_dict() for summary in summaries])


@bp.get("/<int:habit_id>")
def get_habit(habit_id: int):
    result = get_habit_service().get_habit(
        habit_id, user_id=require_user_id(), local_date=_local_date()
    )
    if isinstance(result, Rejected):
        return _rejection(result)
    return jsonify(result.to_dict())


@bp.post("")
def create_habit():
    user_id = require_user_id()
    form = CreateHabitForm.model_validate(_json_body())
    summary = get_habit_service().create_habit(
        user_id=user_id, title=form.title, local_date=_local_date()
    )
    return jsonify(summary.to_dict()), 201


@bp.put("/<int:habit_id>")
def update_habit(habit_id: int):
    user_id = require_user_id()
    form = UpdateHabitForm.model_validate(_json_body())
    result = get_habit_service().update_habit(
        habit_id,
        user_id=user_id,
        title=form.title,
        is_active=form.is_active,
        local_date=_local_date(),
    )
    if isinstance(result, Rejected):
        return _rejection(result)
    return jsonify(result.to_dict())


@bp.delete("/<int:habit_id>")
def delete_habit(habit_id: int):
    rejected = get_habit_service().delete_habit(habit_id, user_id=require_user_id())
    if rejected is not None:
        return _rejection(rejected)
    return "", 204


@bp.post("/reorder")
def reorder_habits():
    user_id = require_user_id()
    form = ReorderHabitsForm.model_validate(_json_body())
    result = get_habit_service().reorder_habits(
        user_id=user_id, habit_ids=form.habit_ids, local_date=_local_date()
    )
    if isinstance(result, Rejected):
        return _rejection(result)
    return jsonify([summary.to_dict() for summary in result])


@bp.post("/<int:habit_id>/complete")
def complete_habit(habit_id: int):
    """Mark a habit done for the caller's local day."""

    result = get_habit_service().complete(
        habit_id, user_id=require_user_id(), local_date=_local_date()
    )
    if isinstance(result, Rejected):
        return _rejection(result)
    return jsonify(result.to_dict())


@bp.delete("/<int:habit_id>/complete")
def uncomplete_habit(habit_id: int):
    """Undo today's completion for a habit."""

    result = get_habit_service().uncomplete(
        habit_id, user_id=require_user_id(), local_date=_local_date()
    )
    if isinstance(result, Rejected):
        return _rejection(result)
    return jsonify(result.to_dict())


@bp.get("/<int:habit_id>/completions")
def list_completions(habit_id: int):
    result = get_habit_service().list_completions(
        habit_id,
        user_id=require_user_id(),
        days=_window_days(),
        local_date=_local_date(),
    )
    if isinstance(result, Rejected):
        return _rejection(result)
    return jsonify([completion_to_dict(completion) for completion in result])


@bp.get("/<int:habit_id>/stats")
def habit_stats(habit_id: int):
    result = get_habit_service().stats(
        habit_id,
        user_id=require_user_id(),
        window_days=_window_days(),
        local_date=_local_date(),
    )
    if isinstance(result, Rejected):
        return _rejection(result)
    return jsonify(result.to_dict())


@bp.get("/daily-rate")
def daily_rate():
    """Share of active habits completed today, read by the accountability pages."""

    rate = get_habit_service().daily_completion_rate(
        user_id=require_user_id(), local_date=_local_date()
    )
    return jsonify(rate.to_dict())
