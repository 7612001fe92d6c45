"""Serenity HTTP application.

Wires the store connection, LLM backends, repositories and services
together once at start-up and registers one blueprint per service.

Usage:
    config = AppConfig.from_env()
    app = create_app(build_services(config))
"""
import logging
from dataclasses import dataclass
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from serenity.config import AppConfig
from serenity.services.activity_service import (
    ActivityPlanner,
    ActivityRepository,
    create_activity_blueprint,
)
from serenity.services.auth_service import (
    Authenticator,
    IdentityProvider,
    SessionTokenIssuer,
    create_auth_blueprint,
)
from serenity.services.chat_service import (
    ContextAssembler,
    ConversationLogger,
    ResponseGenerator,
    SafetyRouter,
    WellnessSummarizer,
    create_chat_blueprint,
)
from serenity.services.community_service import (
    ContentModerator,
    PostRepository,
    create_community_blueprint,
)
from serenity.services.journal_service import (
    JournalRepository,
    ReflectionPromptGenerator,
    create_journal_blueprint,
)
from serenity.services.llm_service import BaseLLM, LLMConfig, LLMProvider, create_llm
from serenity.services.mood_service import MoodRepository, create_mood_blueprint
from serenity.services.safety_service import CrisisDetector
from serenity.services.user_service import (
    AccountDataManager,
    UserRepository,
    create_user_blueprint,
)
from serenity.shared.database import FirestoreConnection, StoreUnavailableError
from serenity.shared.utils import BackgroundTasks, configure_pii_salt

logger = logging.getLogger(__name__)

SERVICE_NAME = "serenity"

# Output cap for moderation verdicts and reflection prompts
AUX_LLM_MAX_TOKENS = 500


@dataclass
class Services:
    """Everything the blueprints depend on, built once per process."""
    connection: FirestoreConnection
    tasks: BackgroundTasks
    authenticator: Authenticator
    issuer: SessionTokenIssuer
    identity: IdentityProvider
    router: SafetyRouter
    posts: PostRepository
    moderator: ContentModerator
    journal: JournalRepository
    reflection: ReflectionPromptGenerator
    moods: MoodRepository
    activities: ActivityRepository
    planner: ActivityPlanner
    users: UserRepository
    account_data: AccountDataManager


def _create_llms(config: AppConfig):
    """Chat model plus the auxiliary model for moderation and prompts.

    Raises:
        ValueError: If the provider is unknown or its API key is missing
    """
    provider = LLMProvider(config.llm_provider)

    chat_llm = create_llm(LLMConfig(
        provider=provider,
        model_name=config.llm_model_name,
        api_key=config.llm_api_key,
        max_tokens=config.chat_max_tokens,
        temperature=config.chat_temperature,
    ))

    # The moderation model name is a Gemini model; other providers reuse the chat model
    aux_model = config.moderation_model_name if provider == LLMProvider.GEMINI else config.llm_model_name
    aux_llm = create_llm(LLMConfig(
        provider=provider,
        model_name=aux_model,
        api_key=config.llm_api_key,
        max_tokens=AUX_LLM_MAX_TOKENS,
    ))
    return chat_llm, aux_llm


def build_services(
    config: AppConfig,
    connection: Optional[FirestoreConnection] = None,
    chat_llm: Optional[BaseLLM] = None,
    aux_llm: Optional[BaseLLM] = None,
) -> Services:
    """Construct every service from configuration.

    A store without credentials does not stop start-up: store-backed
    endpoints answer 503 and /ready reports not ready.

    Args:
        config: Application configuration
        connection: Pre-built connection (emulator, tests)
        chat_llm: Pre-built chat backend (tests)
        aux_llm: Pre-built moderation/prompt backend (tests)
    """
    configure_pii_salt(config.pii_salt)

    if connection is None:
        connection = FirestoreConnection(config.firebase)
        try:
            connection.initialize()
        except StoreUnavailableError:
            logger.warning("STARTING_WITHOUT_STORE")

    if chat_llm is None or aux_llm is None:
        default_chat, default_aux = _create_llms(config)
        chat_llm = chat_llm or default_chat
        aux_llm = aux_llm or default_aux

    tasks = BackgroundTasks(max_workers=config.background_workers)
    issuer = SessionTokenIssuer(config.session_token_secret, config.session_token_ttl_hours)
    identity = IdentityProvider(connection)

    router = SafetyRouter(
        detector=CrisisDetector(),
        context_assembler=ContextAssembler(connection),
        generator=ResponseGenerator(
            chat_llm,
            activities_route=config.activities_route,
            temperature=config.chat_temperature,
            max_tokens=config.chat_max_tokens,
        ),
        conversation_logger=ConversationLogger(connection),
        summarizer=WellnessSummarizer(chat_llm, connection, tasks),
    )

    moods = MoodRepository(connection)
    activities = ActivityRepository(connection)
    users = UserRepository(connection)

    logger.info(
        "SERVICES_BUILT",
        extra={
            "llm_provider": config.llm_provider,
            "llm_model": config.llm_model_name,
            "store_ready": connection.is_ready,
            "moderation_enabled": config.moderation_enabled,
        }
    )

    return Services(
        connection=connection,
        tasks=tasks,
        authenticator=Authenticator(issuer, identity),
        issuer=issuer,
        identity=identity,
        router=router,
        posts=PostRepository(connection),
        moderator=ContentModerator(aux_llm, enabled=config.moderation_enabled),
        journal=JournalRepository(connection),
        reflection=ReflectionPromptGenerator(aux_llm, connection),
        moods=moods,
        activities=activities,
        planner=ActivityPlanner(activities, moods),
        users=users,
        account_data=AccountDataManager(connection, users, identity),
    )


def create_app(services: Services) -> Flask:
    """Build the Flask app with every blueprint registered."""
    app = Flask(__name__)
    CORS(app)

    auth = services.authenticator
    app.register_blueprint(create_auth_blueprint(services.issuer, services.identity))
    app.register_blueprint(create_chat_blueprint(services.router, auth))
    app.register_blueprint(create_community_blueprint(services.posts, services.moderator, auth))
    app.register_blueprint(create_journal_blueprint(services.journal, services.reflection, auth))
    app.register_blueprint(create_mood_blueprint(services.moods, auth))
    app.register_blueprint(create_activity_blueprint(services.planner, services.activities, auth))
    app.register_blueprint(
        create_user_blueprint(services.users, services.account_data, services.identity, auth)
    )

    @app.route("/health", methods=["GET"])
    def health():
        """Liveness check.

        Returns:
            200 with service status
        """
        return jsonify({"status": "healthy", "service": SERVICE_NAME}), 200

    @app.route("/ready", methods=["GET"])
    def ready():
        """Readiness check - verifies the store handle is configured.

        Returns:
            200 if ready, 503 if not
        """
        if not services.connection.is_ready:
            return jsonify({"status": "not_ready", "reason": "store_not_configured"}), 503
        return jsonify({"status": "ready"}), 200

    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app_config = AppConfig.from_env()

    app = create_app(build_services(app_config))
    app.run(host="0.0.0.0", port=app_config.port, debug=False)
