"""Auth Service HTTP handler.

Exchanges a provider-issued ID token for a signed session token.
"""
import logging

from flask import Blueprint, jsonify, request

from serenity.shared.utils import hash_pii
from serenity.shared.utils.responses import server_error
from .identity import IdentityProvider
from .tokens import SessionTokenIssuer, TokenError

logger = logging.getLogger(__name__)


def create_auth_blueprint(issuer: SessionTokenIssuer, identity: IdentityProvider) -> Blueprint:
    """Build the /auth blueprint."""
    bp = Blueprint("auth", __name__, url_prefix="/auth")

    @bp.route("/session", methods=["POST"])
    def create_session():
        """Issue a session token.

        Request Body:
            {"idToken": "<provider ID token>"}

        Response:
            {"token": "<jwt>", "expiresAt": "2026-10-20T12:00:00Z"}
        """
        try:
            data = request.get_json(silent=True) or {}
            id_token = data.get("idToken")
            if not id_token or not isinstance(id_token, str):
                return jsonify({"error": "idToken is required"}), 400

            try:
                uid = identity.verify_id_token(id_token)
            except TokenError:
                return jsonify({"error": "Invalid token"}), 401

            if identity.get_user(uid) is None:
                return jsonify({"error": "User not found"}), 401

            session = issuer.issue(uid)
            logger.info("SESSION_CREATED", extra={"user_id_hash": hash_pii(uid)})
            return jsonify(session.to_dict()), 200

        except Exception as e:
            return server_error(e, "SESSION_CREATE_FAILED", "Failed to create session")

    return bp
