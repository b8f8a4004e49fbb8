"""
Tutor chat.

For each user message:
  1. Stores the message
  2. Takes the last settings.chat_history_window messages as conversation
  3. Ranks notes against the message for context (best-effort)
  4. Asks the LLM and stores the reply
"""
from __future__ import annotations

import logging

import aiosqlite

from studymate.config import settings
from studymate.db.sqlite import create_message, list_messages
from studymate.models.chat import ChatMessage, Role
from studymate.services.llm_service import chat_text
from studymate.services.retrieval import relevant_context

logger = logging.getLogger(__name__)

BASE_PROMPT = (
    "You are an intelligent learning tutor. Help the user learn effectively, "
    "explain concepts clearly, and encourage active learning."
)

FALLBACK_REPLY = "I apologize, but I couldn't generate a response. Please try again."


def build_system_prompt(context: str) -> str:
    if not context:
        return BASE_PROMPT
    return (
        "You are an intelligent learning tutor. Help the user learn effectively. "
        "Here is relevant context from their notes and flashcards:\n\n"
        f"{context}\n\n"
        "Use this context to provide better, more personalized responses."
    )


def format_conversation(history: list[ChatMessage]) -> str:
    return "Conversation:\n" + "\n\n".join(m.content for m in history)


async def respond(db: aiosqlite.Connection, message: str) -> str:
    """Run one chat turn. Raises LLMUnavailableError if no reply can be generated."""
    await create_message(db, Role.USER, message)

    history = (await list_messages(db))[-settings.chat_history_window :]
    context = await relevant_context(db, message)

    reply = await chat_text(build_system_prompt(context), format_conversation(history))
    reply = reply.strip() or FALLBACK_REPLY

    await create_message(db, Role.ASSISTANT, reply)
    logger.info("Chat reply generated (context: %s)", "yes" if context else "no")
    return reply
