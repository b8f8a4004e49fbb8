from __future__ import annotations

import logging
from datetime import datetime

import aiosqlite
from pydantic import ValidationError

from studymate.db.sqlite import get_flashcard, save_review
from studymate.models.flashcard import Flashcard
from studymate.services.scheduler import (
    InvalidInputError,
    review_flashcard,
    validate_quality,
)

logger = logging.getLogger(__name__)


class FlashcardNotFoundError(Exception):
    """Raised when a review references a flashcard id that does not exist."""


async def submit_review(
    db: aiosqlite.Connection,
    card_id: str,
    quality: int,
    now: datetime,
) -> Flashcard:
    """
    Load a card, run the scheduler, persist the new state and its ReviewEvent.

    Quality is checked before the card is even loaded; nothing is written
    unless the whole transition succeeds.
    """
    validate_quality(quality)

    card = await get_flashcard(db, card_id)
    if card is None:
        raise FlashcardNotFoundError(card_id)

    try:
        state = card.state
    except ValidationError as e:
        raise InvalidInputError(f"stored repetition state is malformed: {e}") from e

    new_state, event = review_flashcard(card_id, state, quality, now)
    updated = await save_review(db, new_state, event)
    if updated is None:
        # Deleted between load and update
        raise FlashcardNotFoundError(card_id)

    logger.info(
        "Card %s reviewed q=%d: interval %d -> %d, reps %d -> %d, ease %.2f -> %.2f",
        card_id,
        quality,
        state.interval,
        new_state.interval,
        state.repetitions,
        new_state.repetitions,
        state.ease_factor,
        new_state.ease_factor,
    )
    return updated
