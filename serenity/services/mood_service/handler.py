"""Mood Service HTTP handler: the daily mood log."""
import logging
from datetime import datetime, timezone

from flask import Blueprint, g, jsonify, request

from serenity.services.auth_service import Authenticator
from serenity.shared.utils import optional_text, parse_int_in_range
from serenity.shared.utils.responses import server_error
from .repository import MoodRepository

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 7
MAX_LIMIT = 90
MAX_NOTE_LENGTH = 1000


class MoodValidationError(Exception):
    pass


def parse_mood_entry(data) -> dict:
    """Validate a POST /mood body into stored fields.

    Raises:
        MoodValidationError: With a field-specific message
    """
    if not isinstance(data, dict) or data.get("mood") is None:
        raise MoodValidationError("Mood is required")

    try:
        fields = {"mood": parse_int_in_range(data["mood"], 1, 10, "Mood")}
        for name in ("energy", "stress"):
            value = data.get(name)
            fields[name] = None if value is None else parse_int_in_range(value, 1, 10, name.capitalize())
    except ValueError as e:
        raise MoodValidationError(str(e))

    sleep = data.get("sleep")
    if sleep is not None:
        if isinstance(sleep, bool) or not isinstance(sleep, (int, float)) or not 0 <= sleep <= 24:
            raise MoodValidationError("Sleep must be between 0 and 24 hours")
    fields["sleep"] = sleep

    date = data.get("date")
    if date is None:
        date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    else:
        try:
            datetime.strptime(date, "%Y-%m-%d")
        except (TypeError, ValueError):
            raise MoodValidationError("Date must be YYYY-MM-DD")
    fields["date"] = date
    fields["note"] = optional_text(data.get("note"), MAX_NOTE_LENGTH) or ""
    return fields


def create_mood_blueprint(moods: MoodRepository, authenticator: Authenticator) -> Blueprint:
    """Build the /mood blueprint."""
    bp = Blueprint("mood", __name__, url_prefix="/mood")

    @bp.route("", methods=["POST"])
    @authenticator.require_auth
    def record_mood():
        """Log a mood entry.

        Request Body:
            {"mood": 1-10, "note": "...", "energy": 1-10, "stress": 1-10, "sleep": 7.5, "date": "2026-10-19"}
        """
        try:
            try:
                fields = parse_mood_entry(request.get_json(silent=True))
            except MoodValidationError as e:
                return jsonify({"error": str(e)}), 400

            entry_id = moods.record(g.user.uid, fields)
            return jsonify({
                "message": "Mood entry saved",
                "entry": moods.find_by_id(entry_id),
            }), 201

        except Exception as e:
            return server_error(e, "MOOD_RECORD_FAILED", "Failed to save mood entry")

    @bp.route("", methods=["GET"])
    @authenticator.require_auth
    def list_moods():
        """Recent entries, newest first. Query: limit (default 7, max 90)."""
        try:
            try:
                limit = parse_int_in_range(request.args.get("limit", DEFAULT_LIMIT), 1, MAX_LIMIT, "limit")
            except ValueError as e:
                return jsonify({"error": str(e)}), 400

            entries = moods.recent(g.user.uid, limit)
            return jsonify({"entries": entries, "count": len(entries)}), 200

        except Exception as e:
            return server_error(e, "MOOD_FETCH_FAILED", "Failed to fetch mood entries")

    return bp
