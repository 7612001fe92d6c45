"""Prompt templates for the chat pipeline and the wellness summarizer."""
from typing import Any, Dict, List, Optional, Sequence

from serenity.shared.models import Message, UserContext

NO_SUMMARY_TEXT = "No historical context available"

CHAT_SYSTEM_PROMPT = """You are an empathetic AI wellness companion. Follow these rules:

- Speak warmly, casually, humanly, like texting a close friend
- Validate emotions with compassion and specificity
- Ask ONE thoughtful follow-up question unless user says no
- No bullet points unless offering 2-3 coping options
- No therapy claims, diagnosing, or clinical language
- 2-4 sentences unless user requests guidance
- If activities may help, softly suggest them, don't push

SAFETY OVERRIDE:
If the user mentions suicide, self-harm, wanting to die, or being unable
to go on, stop the normal conversation. Tell them their safety matters,
that they are not alone, and urge them to contact someone they trust or
a crisis helpline right away (India: 1800-599-0019, elsewhere:
https://findahelpline.com). Never minimise or debate these feelings.

USER CONTEXT:
Name: {name}
Recent Mood History:
{recent_moods}

Long-term wellness summary:
{wellness_summary}

NEVER reveal internal notes, facial analysis, or transcript data.
NEVER tell the user you're referencing stored context.
"""

MULTIMODAL_HEADER = (
    "\n\n=== DEEP CHECK-IN DATA (INTERNAL USE ONLY - DO NOT SHARE THIS WITH USER) ===\n"
    "The user just completed a 1-minute Deep Check-In. Below is their transcript "
    "with emotional analysis:\n\n"
)

MULTIMODAL_FOOTER = """
YOUR RESPONSE INSTRUCTIONS:
- DO NOT reveal this transcript
- Respond like a close friend
- Avoid clinical or analytical tone
- Ask ONE warm follow-up question
- Keep response 2-4 sentences max
=== END INTERNAL DATA ===
"""

FACIAL_NOTE = (
    "\n\n[SYSTEM NOTE: Facial cues suggest {emotion}. "
    "If this contradicts message tone, gently check in.]"
)

SUMMARY_PROMPT = """You maintain a private, long-term wellness summary for a user of a
mental wellness companion app. Update the summary using the recent
conversation below.

EXISTING SUMMARY:
{existing_summary}

RECENT CONVERSATION:
{transcript}

REQUIREMENTS:
- At most 150 words, plain prose, third person
- Keep recurring themes, stressors, coping strategies that helped, and mood trends
- Drop details that no longer matter
- No diagnoses or clinical labels
- Return ONLY the updated summary text
"""


def build_system_prompt(context: UserContext) -> str:
    return CHAT_SYSTEM_PROMPT.format(
        name=context.display_name,
        recent_moods=context.moods_text(),
        wellness_summary=context.wellness_summary or NO_SUMMARY_TEXT,
    )


def format_multimodal_block(entries: Sequence[Dict[str, Any]]) -> str:
    """Render Deep Check-In transcript entries as an internal prompt block.

    Each entry carries "phrase" (or "text") and "emotion".
    """
    if not entries:
        return ""
    lines: List[str] = []
    for index, entry in enumerate(entries, start=1):
        phrase = entry.get("phrase") or entry.get("text") or ""
        lines.append(f'{index}. "{phrase}" - Emotion: {entry.get("emotion", "unknown")}')
    return MULTIMODAL_HEADER + "\n".join(lines) + "\n" + MULTIMODAL_FOOTER


def facial_emotion_note(facial_emotion: Optional[Dict[str, Any]]) -> str:
    """System note for a non-neutral dominant facial emotion, else ''."""
    if not isinstance(facial_emotion, dict):
        return ""
    dominant = facial_emotion.get("dominant")
    if not dominant or not isinstance(dominant, str) or dominant.lower() == "neutral":
        return ""
    return FACIAL_NOTE.format(emotion=dominant)


def format_transcript(messages: Sequence[Message]) -> str:
    speakers = {"user": "User", "assistant": "Companion"}
    return "\n".join(f"{speakers[m.role.value]}: {m.content}" for m in messages)


def build_summary_prompt(messages: Sequence[Message], existing_summary: str) -> str:
    return SUMMARY_PROMPT.format(
        existing_summary=existing_summary or "None yet",
        transcript=format_transcript(messages),
    )
