"""
Assistant bridge and conversation.

The bridge turns the most recent entries into a text context and asks the
completion service about them. It never raises: every failure becomes a
localized apology. The conversation tracks the message history and the
loading flag around one outstanding request.
"""

import asyncio
import logging
from typing import Protocol

from glucose_log.domain.conversation import ChatMessage, MessageRole
from glucose_log.domain.entry import UNIT, GlucoseEntry, Language
from glucose_log.domain.messages import message
from glucose_log.services.app_state import AppState
from glucose_log.services.views import most_recent
from glucose_log.utils.timezone_utils import format_timestamp

logger = logging.getLogger(__name__)

CONTEXT_SIZE = 20

SYSTEM_INSTRUCTION = """\
Role: You are a health and logging assistant built into a blood-glucose log.
Your job is to help people with diabetes or pre-diabetes understand their
blood-glucose readings through precise analysis and motivating feedback.

Tone: Professional and reliable; base advice on the data (for example
"drink water when glucose is high" or "eat fast-acting carbohydrates when it
is low"). Be motivating and acknowledge good trends.

Keep every answer to at most three sentences.
Only discuss blood glucose.
Always answer in the language the user writes in (Danish or English).
"""


class CompletionClient(Protocol):
    """Anything that can turn instructions plus a prompt into text."""

    def complete(self, instructions: str, prompt: str) -> str: ...


def build_context(entries: list[GlucoseEntry], limit: int = CONTEXT_SIZE) -> str:
    """
    Render the most recent entries as one line each.

    Args:
        entries: All entries.
        limit: Maximum number of entries to include.

    Returns:
        Newline-joined "<timestamp>: <value> mmol/L" lines, newest first.
    """
    return "\n".join(
        f"{format_timestamp(e.timestamp)}: {e.value} {UNIT}" for e in most_recent(entries, limit)
    )


def build_prompt(query: str, context: str) -> str:
    """Combine the data context and the user's question."""
    return f"User data (most recent measurements):\n{context}\n\nUser question: {query}\n"


class AssistantBridge:
    """Read-only bridge between the entry log and the completion service."""

    def __init__(self, client: CompletionClient, context_size: int = CONTEXT_SIZE) -> None:
        """
        Initialize assistant bridge.

        Args:
            client: Completion client.
            context_size: Number of recent entries sent as context.
        """
        self.client = client
        self.context_size = context_size

    def ask(self, query: str, entries: list[GlucoseEntry], language: Language) -> str:
        """
        Ask the assistant a question about the entries.

        Args:
            query: Free-text question.
            entries: Snapshot of entries; never modified.
            language: Display language for fallback messages.

        Returns:
            Response text, or a localized fallback message on failure.
        """
        prompt = build_prompt(query, build_context(entries, self.context_size))

        try:
            text = self.client.complete(SYSTEM_INSTRUCTION, prompt)
        except Exception as e:
            logger.error(f"Assistant request failed: {e}")
            return message(language, "assistant_error")

        if not text or not text.strip():
            logger.warning("Assistant returned an empty response")
            return message(language, "assistant_no_response")

        return text


class Conversation:
    """
    Message history for one assistant session.

    A submission appends the user message at once and the reply once the
    request settles; is_loading stays True in between and blocks further
    submissions.
    """

    def __init__(self, bridge: AssistantBridge, state: AppState) -> None:
        self.bridge = bridge
        self.state = state
        self.messages: list[ChatMessage] = []
        self.is_loading = False

    async def submit(self, text: str) -> bool:
        """
        Send a question and wait for the reply.

        Args:
            text: User input.

        Returns:
            False if the input was blank or a request is already outstanding.
        """
        query = text.strip()
        if not query or self.is_loading:
            return False

        self.messages.append(ChatMessage(role=MessageRole.USER, content=query))
        self.is_loading = True
        try:
            answer = await asyncio.to_thread(
                self.bridge.ask, query, self.state.entries, self.state.language
            )
        finally:
            self.is_loading = False

        self.messages.append(ChatMessage(role=MessageRole.ASSISTANT, content=answer))
        return True
