"""Request authentication for Flask views.

require_auth rejects the request with 401 unless a valid session token
for an existing account is presented. optional_auth lets anonymous
callers through but still rejects a token that is present and invalid.
On success the caller is bound to flask.g.user.
"""
import logging
from functools import wraps
from typing import Callable, Optional

from flask import g, jsonify, request

from .identity import AuthUser, IdentityProvider
from .tokens import SessionTokenIssuer, TokenError, TokenExpiredError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthenticationError(Exception):
    """Request could not be authenticated; message is returned with 401."""
    pass


class IdentityUnavailableError(Exception):
    """Identity provider lookup failed; message is returned with 503."""
    pass


class Authenticator:
    """Resolves the Authorization header to an AuthUser."""

    def __init__(self, issuer: SessionTokenIssuer, identity: IdentityProvider):
        self.issuer = issuer
        self.identity = identity

    def authenticate(self, header: Optional[str]) -> AuthUser:
        """Verify a bearer header.

        Raises:
            AuthenticationError: With the client-facing 401 message
            IdentityUnavailableError: If the account lookup itself fails
        """
        if not header or not header.startswith(BEARER_PREFIX):
            raise AuthenticationError("No token provided")

        token = header[len(BEARER_PREFIX):].strip()
        if not token:
            raise AuthenticationError("No token provided")

        try:
            uid = self.issuer.verify(token)
        except TokenExpiredError:
            raise AuthenticationError("Token expired")
        except TokenError:
            raise AuthenticationError("Invalid token")

        try:
            user = self.identity.get_user(uid)
        except Exception as e:
            logger.error(
                "IDENTITY_LOOKUP_FAILED",
                extra={"error": str(e), "error_type": type(e).__name__, "path": request.path}
            )
            raise IdentityUnavailableError("Authentication service unavailable") from e
        if user is None:
            raise AuthenticationError("User not found")
        return user

    def require_auth(self, view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                g.user = self.authenticate(request.headers.get("Authorization"))
            except AuthenticationError as e:
                return self._reject(str(e))
            except IdentityUnavailableError as e:
                return jsonify({"error": str(e)}), 503
            return view(*args, **kwargs)
        return wrapper

    def optional_auth(self, view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            header = request.headers.get("Authorization")
            if not header:
                g.user = None
                return view(*args, **kwargs)
            try:
                g.user = self.authenticate(header)
            except AuthenticationError as e:
                return self._reject(str(e))
            except IdentityUnavailableError as e:
                return jsonify({"error": str(e)}), 503
            return view(*args, **kwargs)
        return wrapper

    def _reject(self, message: str):
        logger.warning(
            "AUTHENTICATION_FAILED",
            extra={"reason": message, "path": request.path}
        )
        return jsonify({"error": message}), 401

