"""
Flashcard generation service.

For a passage of study text:
  1. Calls the LLM via llm_service.chat_json()
  2. Parses {"flashcards": [{"front", "back", "tags"}]}
  3. Inserts each valid card with a fresh repetition state

LLMUnavailableError propagates to the caller; malformed cards are logged and skipped.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime

import aiosqlite
from pydantic import ValidationError

from studymate.db.sqlite import create_flashcard
from studymate.models.flashcard import Flashcard, FlashcardCreate
from studymate.services.llm_service import LLMUnavailableError, chat_json
from studymate.services.scheduler import new_repetition_state

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 6000
MAX_CARDS = 20

SYSTEM_PROMPT = (
    "You are an expert at creating effective learning flashcards. "
    "Generate flashcards from the given content. Each flashcard should:\n"
    "- Have a clear, concise question on the front\n"
    "- Have a complete, accurate answer on the back\n"
    "- Include relevant tags for categorization\n"
    "Respond ONLY with valid JSON in exactly this structure:\n"
    '{"flashcards": [{"front": "question", "back": "answer", "tags": ["tag1", "tag2"]}]}'
)


def _user_prompt(content: str) -> str:
    return f"Generate flashcards from this content:\n\n{content[:MAX_CONTENT_CHARS]}"


def parse_cards(result: object) -> list[FlashcardCreate]:
    """Validate the LLM payload, dropping cards with a blank side."""
    cards: list[FlashcardCreate] = []
    if not isinstance(result, dict):
        logger.warning("Generated payload is not an object: %r", type(result).__name__)
        return cards
    raw_cards = result.get("flashcards")
    if not isinstance(raw_cards, list):
        return cards
    for raw in raw_cards[:MAX_CARDS]:
        if not isinstance(raw, dict):
            continue
        tags = raw.get("tags") or []
        if not isinstance(tags, list):
            tags = []
        try:
            cards.append(
                FlashcardCreate(
                    front=str(raw.get("front") or "").strip(),
                    back=str(raw.get("back") or "").strip(),
                    tags=[str(t).strip() for t in tags if str(t).strip()],
                )
            )
        except ValidationError:
            logger.warning("Skipping malformed generated card: %r", raw)
    return cards


async def generate_flashcards(
    db: aiosqlite.Connection,
    content: str,
    now: datetime,
) -> list[Flashcard]:
    """
    Generate and store flashcards for a passage.
    Returns the inserted cards (possibly empty).
    Raises LLMUnavailableError if the model can't be reached or replies with invalid JSON.
    """
    try:
        result = await chat_json(SYSTEM_PROMPT, _user_prompt(content), max_tokens=1024)
    except json.JSONDecodeError as e:
        raise LLMUnavailableError(f"LLM returned invalid JSON: {e}") from e

    created: list[Flashcard] = []
    for card in parse_cards(result):
        created.append(
            await create_flashcard(db, card, new_repetition_state(now), commit=False)
        )
    await db.commit()

    logger.info("Generated %d flashcards", len(created))
    return created
