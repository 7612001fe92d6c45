"""Activity Service HTTP handler."""
import logging

from flask import Blueprint, g, jsonify, request

from serenity.services.auth_service import Authenticator
from serenity.shared.utils import optional_text, parse_int_in_range
from serenity.shared.utils.responses import server_error
from .catalog import CATALOG_BY_ID
from .planner import ActivityPlanner
from .repository import ActivityRepository

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DAYS = 7
MAX_HISTORY_DAYS = 90
MAX_NOTES_LENGTH = 1000


def create_activity_blueprint(
    planner: ActivityPlanner,
    activities: ActivityRepository,
    authenticator: Authenticator,
) -> Blueprint:
    """Build the /activities blueprint."""
    bp = Blueprint("activities", __name__, url_prefix="/activities")

    @bp.route("/today", methods=["GET"])
    @authenticator.require_auth
    def today():
        try:
            return jsonify(planner.today(g.user.uid)), 200
        except Exception as e:
            return server_error(e, "ACTIVITIES_FETCH_FAILED", "Failed to fetch activities")

    @bp.route("/complete", methods=["POST"])
    @authenticator.require_auth
    def complete():
        """Mark an activity done today.

        Request Body:
            {"activityId": "breathing-exercise", "notes": "felt calmer"}
        """
        try:
            data = request.get_json(silent=True) or {}
            activity_id = data.get("activityId")
            if not activity_id:
                return jsonify({"error": "Activity ID is required"}), 400
            if activity_id not in CATALOG_BY_ID:
                return jsonify({"error": "Unknown activity"}), 400

            notes = optional_text(data.get("notes"), MAX_NOTES_LENGTH) or ""
            activities.complete(g.user.uid, activity_id, notes)
            return jsonify({"message": "Activity marked as completed"}), 200

        except Exception as e:
            return server_error(e, "ACTIVITY_COMPLETE_FAILED", "Failed to complete activity")

    @bp.route("/history", methods=["GET"])
    @authenticator.require_auth
    def history():
        """Completions in the last ?days= days (default 7, max 90)."""
        try:
            try:
                days = parse_int_in_range(
                    request.args.get("days", DEFAULT_HISTORY_DAYS), 1, MAX_HISTORY_DAYS, "days"
                )
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            return jsonify(activities.history(g.user.uid, days)), 200

        except Exception as e:
            return server_error(e, "ACTIVITY_HISTORY_FAILED", "Failed to fetch activity history")

    return bp
