"""JSON error responses shared by every blueprint."""
import logging
from typing import Any

from flask import jsonify

from serenity.shared.database.connection import StoreUnavailableError

logger = logging.getLogger(__name__)


def server_error(error: Exception, event: str, message: str, **context: Any):
    """Log an unexpected failure and build its response.

    A store that was never configured maps to 503 with the store's own
    message; anything else is a 500 carrying message.
    """
    if isinstance(error, StoreUnavailableError):
        logger.error("STORE_UNAVAILABLE", extra={"event": event, **context})
        return jsonify({"error": str(error)}), 503

    logger.error(
        event,
        extra={"error": str(error), "error_type": type(error).__name__, **context}
    )
    return jsonify({"error": message}), 500
