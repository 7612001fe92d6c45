"""Auth Service: signed session tokens and request authentication.

Usage:
    authenticator = Authenticator(SessionTokenIssuer(secret), IdentityProvider(connection))

    @bp.route("/journal")
    @authenticator.require_auth
    def list_entries():
        uid = g.user.uid
"""

from .decorators import AuthenticationError, Authenticator, IdentityUnavailableError
from .handler import create_auth_blueprint
from .identity import AuthUser, IdentityProvider
from .tokens import SessionToken, SessionTokenIssuer, TokenError, TokenExpiredError

__all__ = [
    "AuthenticationError",
    "Authenticator",
    "IdentityUnavailableError",
    "create_auth_blueprint",
    "AuthUser",
    "IdentityProvider",
    "SessionToken",
    "SessionTokenIssuer",
    "TokenError",
    "TokenExpiredError",
]
