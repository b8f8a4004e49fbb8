"""
SM-2 spaced-repetition scheduler.

Pure state transitions for a single flashcard:

    state = new_repetition_state(now)
    state, event = review_flashcard(card_id, state, quality=4, now=now)

Quality is the recall rating 0-5 (0 = blackout, 5 = perfect). Reviews with
quality >= 3 pass and grow the interval 1 -> 6 -> interval * ease; anything
lower is a lapse that resets the streak and retries tomorrow. The ease factor
follows the classic SM-2 adjustment in both branches and never drops below
MIN_EASE_FACTOR.

No I/O happens here: callers load the state, call in, and persist the result.
"""
from __future__ import annotations

import math
import uuid
from datetime import datetime, timedelta

from studymate.models.flashcard import RepetitionState, ReviewEvent

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5

_FIRST_INTERVAL = 1
_SECOND_INTERVAL = 6
# Keeps next_review_at inside datetime range and the column inside SQLite INTEGER
MAX_INTERVAL_DAYS = 36500


class InvalidInputError(Exception):
    """Raised when a review cannot be applied (bad quality or missing state)."""


def new_repetition_state(now: datetime) -> RepetitionState:
    """State of a freshly created card: due immediately, never reviewed."""
    return RepetitionState(
        ease_factor=DEFAULT_EASE_FACTOR,
        interval=0,
        repetitions=0,
        next_review_at=now,
        last_reviewed_at=None,
    )


def is_due(state: RepetitionState, now: datetime) -> bool:
    return now >= state.next_review_at


def validate_quality(quality: object) -> int:
    # bool is an int subclass; True/False are not ratings
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInputError(f"quality must be an integer, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidInputError(
            f"quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
        )
    return quality


def round_half_up(value: float) -> int:
    """Round half away from zero (12.5 -> 13), unlike Python's banker's round()."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def next_ease_factor(ease_factor: float, quality: int) -> float:
    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def schedule_review(
    state: RepetitionState | None,
    quality: int,
    now: datetime,
) -> RepetitionState:
    """
    Compute the state that follows a review of the given quality.

    The interval of a passing review uses the ease factor carried into this
    review; the ease update is applied afterwards.
    Raises InvalidInputError before anything is computed if the input is bad.
    """
    quality = validate_quality(quality)
    if state is None:
        raise InvalidInputError("repetition state is missing")

    if quality >= PASSING_QUALITY:
        if state.repetitions == 0:
            interval = _FIRST_INTERVAL
        elif state.repetitions == 1:
            interval = _SECOND_INTERVAL
        else:
            interval = min(
                MAX_INTERVAL_DAYS, round_half_up(state.interval * state.ease_factor)
            )
        repetitions = state.repetitions + 1
    else:
        # Lapse: restart the streak, keep (decayed) ease
        interval = _FIRST_INTERVAL
        repetitions = 0

    return RepetitionState(
        ease_factor=next_ease_factor(state.ease_factor, quality),
        interval=interval,
        repetitions=repetitions,
        next_review_at=now + timedelta(days=interval),
        last_reviewed_at=now,
    )


def review_flashcard(
    flashcard_id: str,
    state: RepetitionState | None,
    quality: int,
    now: datetime,
) -> tuple[RepetitionState, ReviewEvent]:
    """Apply a review and build the ReviewEvent recording it.

    The event carries the input quality and the same `now` as the new state.
    """
    new_state = schedule_review(state, quality, now)
    event = ReviewEvent(
        id=str(uuid.uuid4()),
        flashcard_id=flashcard_id,
        quality=quality,
        reviewed_at=now,
    )
    return new_state, event
