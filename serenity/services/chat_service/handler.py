"""Chat Service HTTP handler.

POST /generate is the only chat endpoint. Every message passes through
SafetyRouter, which screens for crisis language before any LLM call.
"""
import logging
from typing import Any, Dict, List, Optional

from flask import Blueprint, g, jsonify, request

from serenity.services.auth_service import Authenticator
from serenity.services.llm_service import LLMGenerationError
from serenity.shared.models import ChatRequest, Message
from serenity.shared.utils import ANONYMOUS_USER, hash_pii
from serenity.shared.utils.responses import server_error
from .router import SafetyRouter

logger = logging.getLogger(__name__)

MAX_HISTORY_MESSAGES = 50
MAX_MESSAGE_CHARS = 4000
MAX_MULTIMODAL_ENTRIES = 20
MAX_MULTIMODAL_PHRASE_CHARS = 500


class ChatValidationError(Exception):
    """Request body is malformed; message is returned with 400."""
    pass


def parse_chat_request(data: Optional[Dict[str, Any]], user_id: str) -> ChatRequest:
    """Validate the /generate body.

    Raises:
        ChatValidationError: On a missing or oversized message, or malformed history
    """
    if not isinstance(data, dict):
        raise ChatValidationError("Request body required")

    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        raise ChatValidationError("Message is required")
    if len(message) > MAX_MESSAGE_CHARS:
        raise ChatValidationError(f"Message must be at most {MAX_MESSAGE_CHARS} characters")

    raw_history = data.get("messages") or []
    if not isinstance(raw_history, list):
        raise ChatValidationError("messages must be a list")
    if len(raw_history) > MAX_HISTORY_MESSAGES:
        raw_history = raw_history[-MAX_HISTORY_MESSAGES:]

    history: List[Message] = []
    for index, entry in enumerate(raw_history):
        try:
            turn = Message.from_dict(entry)
        except ValueError as e:
            raise ChatValidationError(f"messages[{index}]: {e}")
        if len(turn.content) > MAX_MESSAGE_CHARS:
            raise ChatValidationError(
                f"messages[{index}]: content must be at most {MAX_MESSAGE_CHARS} characters"
            )
        history.append(turn)

    facial_emotion = data.get("facialEmotion")
    multimodal_data = data.get("multiModalData")
    if multimodal_data is not None and not (
        isinstance(multimodal_data, list) and all(isinstance(e, dict) for e in multimodal_data)
    ):
        raise ChatValidationError("multiModalData must be a list of objects")
    if multimodal_data:
        if len(multimodal_data) > MAX_MULTIMODAL_ENTRIES:
            raise ChatValidationError(f"multiModalData must have at most {MAX_MULTIMODAL_ENTRIES} entries")
        for entry in multimodal_data:
            phrase = entry.get("phrase") or entry.get("text") or ""
            if len(str(phrase)) + len(str(entry.get("emotion", ""))) > MAX_MULTIMODAL_PHRASE_CHARS:
                raise ChatValidationError(
                    f"multiModalData phrases must be at most {MAX_MULTIMODAL_PHRASE_CHARS} characters"
                )

    return ChatRequest(
        message=message,
        history=history,
        user_id=user_id,
        facial_emotion=facial_emotion if isinstance(facial_emotion, dict) else None,
        multimodal_data=multimodal_data,
    )


def create_chat_blueprint(router: SafetyRouter, authenticator: Authenticator) -> Blueprint:
    """Build the chat blueprint."""
    bp = Blueprint("chat", __name__)

    @bp.route("/generate", methods=["POST"])
    @authenticator.optional_auth
    def generate():
        """Generate a companion reply.

        Request Body:
            {
                "message": "I had a rough day",
                "messages": [{"role": "user" | "assistant", "content": "..."}],
                "userId": "uid" (optional, must match the token when both are sent),
                "facialEmotion": {"dominant": "Sad"} (optional),
                "multiModalData": [{"phrase": "...", "emotion": "..."}] (optional)
            }

        Response:
            {
                "reply": "...",
                "crisis": false,
                "timestamp": "2026-10-19T10:00:00Z",
                "helplines": {...} (crisis only),
                "buttons": [...] (when the reply suggests an activity)
            }
        """
        try:
            data = request.get_json(silent=True)
            claimed_user_id = data.get("userId") if isinstance(data, dict) else None

            if g.user is not None:
                if claimed_user_id and claimed_user_id != g.user.uid:
                    logger.warning(
                        "CHAT_USER_ID_MISMATCH",
                        extra={"user_id_hash": hash_pii(g.user.uid)}
                    )
                    return jsonify({"error": "userId does not match the authenticated user"}), 403
                user_id = g.user.uid
            else:
                if claimed_user_id and claimed_user_id != ANONYMOUS_USER:
                    logger.warning("CHAT_UNAUTHENTICATED_USER_ID_IGNORED")
                user_id = ANONYMOUS_USER

            try:
                chat_request = parse_chat_request(data, user_id)
            except ChatValidationError as e:
                logger.warning("CHAT_REQUEST_INVALID", extra={"reason": str(e)})
                return jsonify({"error": str(e)}), 400

            result = router.handle(chat_request)
            return jsonify(result.to_dict()), 200

        except LLMGenerationError as e:
            return jsonify({"error": str(e)}), 500
        except Exception as e:
            return server_error(e, "CHAT_GENERATE_FAILED", "Something went wrong")

    return bp
