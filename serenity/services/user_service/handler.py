"""User Service HTTP handler: profile, password and data deletion."""
import logging

from firebase_admin import auth
from flask import Blueprint, g, jsonify, request

from serenity.services.auth_service import Authenticator, IdentityProvider
from serenity.shared.database import BulkDeleteError
from serenity.shared.utils import hash_pii, optional_text
from serenity.shared.utils.responses import server_error
from .repository import CHAT_CONVERSATIONS, JOURNAL_ENTRIES, AccountDataManager, UserRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128


def _bulk_delete_failed(error: BulkDeleteError):
    return jsonify({
        "error": "Failed to delete all records. Please try again.",
        "deletedCount": error.deleted_count,
    }), 500


def create_user_blueprint(
    users: UserRepository,
    account_data: AccountDataManager,
    identity: IdentityProvider,
    authenticator: Authenticator,
) -> Blueprint:
    """Build the /user blueprint."""
    bp = Blueprint("user", __name__, url_prefix="/user")

    @bp.route("/profile", methods=["GET"])
    @authenticator.require_auth
    def get_profile():
        try:
            return jsonify(users.get_profile(g.user)), 200
        except Exception as e:
            return server_error(e, "PROFILE_FETCH_FAILED", "Internal server error")

    @bp.route("/profile", methods=["PUT"])
    @authenticator.require_auth
    def update_profile():
        """Update profile fields; only the ones sent are touched.

        Request Body:
            {"name": "...", "bio": "...", "avatarUrl": "...", "preferences": {...}}
        """
        try:
            data = request.get_json(silent=True) or {}
            updates = {}

            name = optional_text(data.get("name"))
            if name:
                updates["name"] = name
            for field in ("bio", "avatarUrl"):
                if isinstance(data.get(field), str):
                    updates[field] = data[field].strip()
            if isinstance(data.get("preferences"), dict):
                updates["preferences"] = data["preferences"]

            if not updates:
                return jsonify({"error": "No valid fields to update"}), 400

            if name:
                try:
                    identity.update_display_name(g.user.uid, name)
                except Exception as e:
                    logger.error(
                        "DISPLAY_NAME_SYNC_FAILED",
                        extra={"user_id_hash": hash_pii(g.user.uid), "error": str(e)}
                    )

            profile = users.save_profile(g.user, updates)
            return jsonify({"message": "Profile updated successfully", "profile": profile}), 200

        except Exception as e:
            return server_error(e, "PROFILE_UPDATE_FAILED", "Internal server error")

    @bp.route("/password", methods=["PUT"])
    @authenticator.require_auth
    def update_password():
        data = request.get_json(silent=True) or {}
        password = data.get("newPassword")

        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            return jsonify({"error": "Password must be at least 6 characters long"}), 400
        if len(password) > MAX_PASSWORD_LENGTH:
            return jsonify({"error": "Password must be less than 128 characters"}), 400

        try:
            identity.update_password(g.user.uid, password)
        except ValueError:
            return jsonify({"error": "Password is too weak"}), 400
        except Exception as e:
            return server_error(e, "PASSWORD_UPDATE_FAILED", "Failed to update password")

        return jsonify({
            "message": "Password updated successfully",
            "notice": "Please sign in again with your new password",
        }), 200

    @bp.route("/conversations", methods=["DELETE"])
    @authenticator.require_auth
    def delete_conversations():
        try:
            deleted = account_data.delete_collection(g.user.uid, CHAT_CONVERSATIONS)
        except BulkDeleteError as e:
            return _bulk_delete_failed(e)
        except Exception as e:
            return server_error(e, "CONVERSATIONS_DELETE_FAILED", "Internal server error")

        message = "All chat history deleted successfully" if deleted else "No chat history found"
        return jsonify({"message": message, "deletedCount": deleted}), 200

    @bp.route("/journals", methods=["DELETE"])
    @authenticator.require_auth
    def delete_journals():
        try:
            deleted = account_data.delete_collection(g.user.uid, JOURNAL_ENTRIES)
        except BulkDeleteError as e:
            return _bulk_delete_failed(e)
        except Exception as e:
            return server_error(e, "JOURNALS_DELETE_FAILED", "Internal server error")

        message = "All journal entries deleted successfully" if deleted else "No journal entries found"
        return jsonify({"message": message, "deletedCount": deleted}), 200

    @bp.route("/account", methods=["DELETE"])
    @authenticator.require_auth
    def delete_account():
        """Irreversibly delete the account and all of its data.

        Request Body:
            {"confirmEmail": "user@example.com"}
        """
        data = request.get_json(silent=True) or {}
        confirm_email = data.get("confirmEmail")
        if not confirm_email or confirm_email != g.user.email:
            return jsonify({
                "error": "Email confirmation does not match",
                "message": "Please provide your email address to confirm account deletion",
            }), 400

        try:
            account_data.delete_account(g.user.uid)
        except auth.UserNotFoundError:
            return jsonify({"error": "User not found in authentication system"}), 404
        except BulkDeleteError as e:
            return _bulk_delete_failed(e)
        except Exception as e:
            return server_error(
                e, "ACCOUNT_DELETE_FAILED",
                "Failed to delete account. Please try again or contact support."
            )

        return jsonify({
            "message": "Account deleted successfully",
            "notice": "All your data has been permanently removed",
        }), 200

    return bp
