"""Journal Service HTTP handler."""
import logging

from flask import Blueprint, g, jsonify, request

from serenity.services.auth_service import Authenticator
from serenity.shared.database import NotFoundError, OwnershipError
from serenity.shared.utils import clean_tags, parse_int_in_range
from serenity.shared.utils.responses import server_error
from .prompts import ReflectionPromptGenerator
from .repository import JournalRepository

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _mood_score(value):
    """None passes through; anything else must be 1-10."""
    if value is None:
        return None
    return parse_int_in_range(value, 1, 10, "Mood score")


def create_journal_blueprint(
    journal: JournalRepository,
    reflection: ReflectionPromptGenerator,
    authenticator: Authenticator,
) -> Blueprint:
    """Build the /journal blueprint."""
    bp = Blueprint("journal", __name__, url_prefix="/journal")

    @bp.route("", methods=["POST"])
    @authenticator.require_auth
    def create_entry():
        """Create an entry.

        Request Body:
            {"title": "...", "content": "...", "moodScore": 1-10, "tags": [...], "isFavorite": false}
        """
        try:
            data = request.get_json(silent=True) or {}
            title = data.get("title")
            content = data.get("content")
            if not isinstance(title, str) or not title.strip() or not isinstance(content, str) or not content:
                return jsonify({"error": "Title and content are required"}), 400

            try:
                mood_score = _mood_score(data.get("moodScore"))
            except ValueError as e:
                return jsonify({"error": str(e)}), 400

            entry_id = journal.create_entry(g.user.uid, {
                "title": title.strip(),
                "content": content,
                "moodScore": mood_score,
                "tags": clean_tags(data.get("tags")),
                "isFavorite": data.get("isFavorite") is True,
            })
            return jsonify({
                "message": "Journal entry created successfully",
                "entryId": entry_id,
                "entry": journal.find_by_id(entry_id),
            }), 201

        except Exception as e:
            return server_error(e, "JOURNAL_CREATE_FAILED", "Internal server error")

    @bp.route("", methods=["GET"])
    @authenticator.require_auth
    def list_entries():
        """Query: limit (default 10), tag, mood (low | medium | high)."""
        try:
            try:
                limit = parse_int_in_range(request.args.get("limit", DEFAULT_LIMIT), 1, MAX_LIMIT, "limit")
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            tag = request.args.get("tag") or None
            mood = request.args.get("mood") or None

            entries = journal.list_entries(g.user.uid, limit=limit, tag=tag, mood=mood)
            return jsonify({
                "entries": entries,
                "count": len(entries),
                "filters": {"limit": limit, "tag": tag, "mood": mood},
            }), 200

        except Exception as e:
            return server_error(e, "JOURNAL_FETCH_FAILED", "Internal server error")

    @bp.route("/<entry_id>", methods=["PUT"])
    @authenticator.require_auth
    def update_entry(entry_id):
        """Partial update; only provided fields change. moodScore may be null."""
        try:
            data = request.get_json(silent=True) or {}
            updates = {}

            if "title" in data:
                if not isinstance(data["title"], str) or not data["title"].strip():
                    return jsonify({"error": "Title cannot be empty"}), 400
                updates["title"] = data["title"].strip()
            if "content" in data:
                if not isinstance(data["content"], str) or not data["content"]:
                    return jsonify({"error": "Content cannot be empty"}), 400
                updates["content"] = data["content"]
            if "moodScore" in data:
                try:
                    updates["moodScore"] = _mood_score(data["moodScore"])
                except ValueError:
                    return jsonify({"error": "Mood score must be between 1 and 10 or null"}), 400
            if "tags" in data:
                updates["tags"] = clean_tags(data["tags"])
            if "isFavorite" in data:
                updates["isFavorite"] = data["isFavorite"] is True

            entry = journal.update_entry(entry_id, g.user.uid, updates)
            return jsonify({"message": "Journal entry updated successfully", "entry": entry}), 200

        except NotFoundError:
            return jsonify({"error": "Journal entry not found"}), 404
        except OwnershipError:
            return jsonify({"error": "You do not have permission to update this entry"}), 403
        except Exception as e:
            return server_error(e, "JOURNAL_UPDATE_FAILED", "Internal server error", entry_id=entry_id)

    @bp.route("/<entry_id>", methods=["DELETE"])
    @authenticator.require_auth
    def delete_entry(entry_id):
        try:
            journal.delete_entry(entry_id, g.user.uid)
            return jsonify({"message": "Journal entry deleted successfully", "entryId": entry_id}), 200
        except NotFoundError:
            return jsonify({"error": "Journal entry not found"}), 404
        except OwnershipError:
            return jsonify({"error": "You do not have permission to delete this entry"}), 403
        except Exception as e:
            return server_error(e, "JOURNAL_DELETE_FAILED", "Internal server error", entry_id=entry_id)

    @bp.route("/prompts", methods=["GET"])
    @authenticator.require_auth
    def reflection_prompts():
        """Three reflection questions; falls back to fixed ones (generated: false)."""
        return jsonify(reflection.generate(g.user.uid).to_dict()), 200

    return bp
