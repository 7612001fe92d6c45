"""Document store connection handle.

Creates the Firebase app and the Firestore client once at process
start. The resulting FirestoreConnection is passed explicitly to every
repository and handler; there is no module-level client.
"""
import logging
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials
from firebase_admin import firestore as admin_firestore
from google.cloud import firestore

from serenity.config import FirebaseConfig

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"


class StoreUnavailableError(Exception):
    """The document store has not been configured or initialized."""
    pass


class FirestoreConnection:
    """Owns the Firebase app and its Firestore client.

    The same Firebase app backs the identity provider, so the auth
    service reads it from here instead of initializing its own.
    """

    def __init__(self, config: FirebaseConfig, app_name: str = "serenity"):
        """Initialize connection holder.

        Args:
            config: Service-account configuration
            app_name: Firebase app name, unique per process
        """
        self.config = config
        self.app_name = app_name
        self._app: Optional[firebase_admin.App] = None
        self._db: Optional[firestore.Client] = None

        logger.info(
            "FIRESTORE_CONNECTION_CREATED",
            extra={"project_id": config.project_id, "app_name": app_name}
        )

    @classmethod
    def from_client(cls, db: Any, app: Any = None) -> "FirestoreConnection":
        """Wrap an already constructed client (emulator, tests)."""
        connection = cls(FirebaseConfig(project_id="external"), app_name="external")
        connection._db = db
        connection._app = app
        return connection

    def initialize(self) -> None:
        """Create the Firebase app and Firestore client.

        Call this during application startup.

        Raises:
            StoreUnavailableError: If credentials are incomplete
        """
        if self._db is not None:
            return

        if not self.config.is_complete():
            logger.error(
                "FIRESTORE_CREDENTIALS_MISSING",
                extra={"project_id": self.config.project_id}
            )
            raise StoreUnavailableError("Firebase credentials are not configured")

        try:
            cred = credentials.Certificate({
                "type": "service_account",
                "project_id": self.config.project_id,
                "client_email": self.config.client_email,
                "private_key": self.config.private_key,
                "token_uri": TOKEN_URI,
            })
            self._app = firebase_admin.initialize_app(cred, name=self.app_name)
            self._db = admin_firestore.client(self._app)
        except Exception as e:
            logger.error("FIRESTORE_INIT_FAILED", extra={"error": str(e)})
            raise

        logger.info(
            "FIRESTORE_CONNECTION_INITIALIZED",
            extra={"project_id": self.config.project_id}
        )

    @property
    def db(self) -> firestore.Client:
        if self._db is None:
            raise StoreUnavailableError("Database not available. Please check Firebase configuration.")
        return self._db

    @property
    def app(self) -> Optional[firebase_admin.App]:
        return self._app

    @property
    def is_ready(self) -> bool:
        return self._db is not None

    def health_check(self) -> Dict[str, Any]:
        """Check store connectivity with a cheap collection listing."""
        if self._db is None:
            return {"status": "not_initialized", "healthy": False}

        try:
            next(iter(self._db.collections()), None)
            return {"status": "connected", "healthy": True}
        except Exception as e:
            logger.error("FIRESTORE_HEALTH_CHECK_FAILED", extra={"error": str(e)})
            return {"status": "error", "healthy": False, "error": str(e)}

    def close(self) -> None:
        """Release the Firebase app. Call during shutdown."""
        if self._app is not None and self.app_name != "external":
            firebase_admin.delete_app(self._app)
            logger.info("FIRESTORE_CONNECTION_CLOSED")
        self._app = None
        self._db = None
