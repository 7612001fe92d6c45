"""Application configuration loaded from the environment."""
import os
from dataclasses import dataclass
from typing import Optional


# Chat model used when LLM_MODEL_NAME is unset
DEFAULT_MODELS = {
    "gemini": "gemini-2.5-flash",
    "openai": "gpt-4o-mini",
}


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class FirebaseConfig:
    """Service-account credentials for the store and identity provider."""
    project_id: str
    client_email: str = ""
    private_key: str = ""

    @classmethod
    def from_env(cls) -> "FirebaseConfig":
        """Create config from environment variables.

        Environment variables:
            FIREBASE_PROJECT_ID: Project id
            FIREBASE_CLIENT_EMAIL: Service-account email
            FIREBASE_PRIVATE_KEY: PEM key; literal "\\n" sequences are unescaped
        """
        return cls(
            project_id=os.getenv("FIREBASE_PROJECT_ID", ""),
            client_email=os.getenv("FIREBASE_CLIENT_EMAIL", ""),
            private_key=os.getenv("FIREBASE_PRIVATE_KEY", "").replace("\\n", "\n"),
        )

    def is_complete(self) -> bool:
        return bool(self.project_id and self.client_email and self.private_key)


@dataclass(frozen=True)
class AppConfig:
    """Top-level settings for the HTTP service."""
    firebase: FirebaseConfig
    session_token_secret: str
    pii_salt: str
    session_token_ttl_hours: int = 24
    llm_provider: str = "gemini"
    llm_model_name: str = "gemini-2.5-flash"
    moderation_model_name: str = "gemini-2.0-flash"
    llm_api_key: Optional[str] = None
    chat_temperature: float = 0.8
    chat_max_tokens: int = 512
    activities_route: str = "/activities"
    background_workers: int = 4
    moderation_enabled: bool = True
    port: int = 8080

    def __post_init__(self):
        if not self.session_token_secret or len(self.session_token_secret) < 32:
            raise ValueError("SESSION_TOKEN_SECRET must be at least 32 characters")
        if not self.pii_salt or len(self.pii_salt) < 32:
            raise ValueError("PII_HASH_SALT must be at least 32 characters")
        if self.session_token_ttl_hours <= 0:
            raise ValueError("SESSION_TOKEN_TTL_HOURS must be positive")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        provider = os.getenv("LLM_PROVIDER", "gemini").lower()
        if provider == "openai":
            api_key = os.getenv("OPENAI_API_KEY")
        else:
            api_key = os.getenv("GEMINI_API_KEY")

        return cls(
            firebase=FirebaseConfig.from_env(),
            session_token_secret=os.getenv("SESSION_TOKEN_SECRET", ""),
            pii_salt=os.getenv("PII_HASH_SALT", ""),
            session_token_ttl_hours=int(os.getenv("SESSION_TOKEN_TTL_HOURS", "24")),
            llm_provider=provider,
            llm_model_name=os.getenv("LLM_MODEL_NAME") or DEFAULT_MODELS.get(provider, DEFAULT_MODELS["gemini"]),
            moderation_model_name=os.getenv("MODERATION_MODEL_NAME", "gemini-2.0-flash"),
            llm_api_key=api_key,
            chat_temperature=float(os.getenv("CHAT_TEMPERATURE", "0.8")),
            chat_max_tokens=int(os.getenv("CHAT_MAX_TOKENS", "512")),
            activities_route=os.getenv("ACTIVITIES_ROUTE", "/activities"),
            background_workers=int(os.getenv("BACKGROUND_WORKERS", "4")),
            moderation_enabled=_flag("MODERATION_ENABLED", "true"),
            port=int(os.getenv("PORT", "8080")),
        )
