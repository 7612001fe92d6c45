"""Safety router: the per-turn orchestrator.

Every message is screened by the crisis detector BEFORE any LLM call.
A crisis verdict returns the fixed crisis payload and the LLM is never
invoked. Otherwise: assemble context, enrich the message, generate,
log the exchange and schedule a summary refresh.
"""
import logging
from typing import Optional

from serenity.services.safety_service import CrisisDetector, CrisisResponseConfig
from serenity.shared.models import ChatRequest, ChatResult, ConversationRecord, Message, Role
from serenity.shared.utils import hash_pii, hash_text_for_audit, utc_now_iso
from .context import ContextAssembler
from .conversation_logger import ConversationLogger
from .generator import ResponseGenerator
from .prompts import facial_emotion_note, format_multimodal_block
from .summarizer import WellnessSummarizer

logger = logging.getLogger(__name__)


def enrich_message(request: ChatRequest) -> str:
    """Append check-in transcript data or a facial-cue note to the message.

    Multi-modal data wins over the facial note when both are present.
    """
    if request.multimodal_data:
        return request.message + format_multimodal_block(request.multimodal_data)
    return request.message + facial_emotion_note(request.facial_emotion)


class SafetyRouter:
    """Routes one chat turn through the safety gate and the LLM pipeline."""

    def __init__(
        self,
        detector: CrisisDetector,
        context_assembler: ContextAssembler,
        generator: ResponseGenerator,
        conversation_logger: ConversationLogger,
        summarizer: WellnessSummarizer,
        crisis_config: Optional[CrisisResponseConfig] = None,
    ):
        self.detector = detector
        self.context_assembler = context_assembler
        self.generator = generator
        self.conversation_logger = conversation_logger
        self.summarizer = summarizer
        self.crisis_config = crisis_config or CrisisResponseConfig()

    def handle(self, request: ChatRequest) -> ChatResult:
        """Process one turn.

        Args:
            request: Validated chat request

        Returns:
            ChatResult; crisis results carry helplines, others may carry buttons

        Raises:
            LLMGenerationError: If generation fails on the non-crisis path
        """
        verdict = self.detector.detect(request.message)

        if verdict.is_crisis:
            result = ChatResult(
                reply=self.crisis_config.reply,
                crisis=True,
                timestamp=utc_now_iso(),
                helplines=dict(self.crisis_config.helplines),
            )
            logger.critical(
                "CRISIS_DETECTED_LLM_BYPASSED",
                extra={
                    "user_id_hash": hash_pii(request.user_id),
                    "matched_phrases": list(verdict.matched_phrases),
                    "message_hash": hash_text_for_audit(request.message),
                    "pattern_version": self.crisis_config.pattern_version,
                }
            )
            self._log_exchange(request, result)
            return result

        context = self.context_assembler.assemble(request.user_id)
        current = Message(Role.USER, enrich_message(request))
        conversation = list(request.history) + [current]

        generated = self.generator.generate(conversation, context)

        result = ChatResult(
            reply=generated.text,
            crisis=False,
            timestamp=utc_now_iso(),
            buttons=generated.buttons,
        )
        self._log_exchange(request, result)

        # Raw message for the summary; the enrichment blocks are model-only
        transcript = list(request.history) + [
            Message(Role.USER, request.message),
            Message(Role.ASSISTANT, generated.text),
        ]
        self.summarizer.schedule(request.user_id, transcript, context.wellness_summary)

        logger.info(
            "CHAT_TURN_COMPLETED",
            extra={
                "user_id_hash": hash_pii(request.user_id),
                "message_length": len(request.message),
                "history_length": len(request.history),
                "enriched": current.content != request.message,
            }
        )
        return result

    def _log_exchange(self, request: ChatRequest, result: ChatResult) -> None:
        self.conversation_logger.log(ConversationRecord(
            user_id=request.user_id,
            input_message=request.message,
            output_response=result.reply,
            crisis=result.crisis,
            timestamp=result.timestamp,
        ))
