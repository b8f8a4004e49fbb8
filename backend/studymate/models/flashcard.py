from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RepetitionState(BaseModel):
    """SM-2 scheduling state of a single flashcard."""

    model_config = ConfigDict(frozen=True)

    ease_factor: float = Field(default=2.5, ge=1.3)
    interval: int = Field(default=0, ge=0)          # days until next review
    repetitions: int = Field(default=0, ge=0)       # consecutive passes since last lapse
    next_review_at: datetime
    last_reviewed_at: datetime | None = None


class ReviewEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    flashcard_id: str
    quality: int
    reviewed_at: datetime


class Flashcard(BaseModel):
    id: str
    front: str
    back: str
    tags: list[str] = []
    ease_factor: float
    interval: int
    repetitions: int
    next_review_at: datetime
    last_reviewed_at: datetime | None
    created_at: datetime

    @property
    def state(self) -> RepetitionState:
        return RepetitionState(
            ease_factor=self.ease_factor,
            interval=self.interval,
            repetitions=self.repetitions,
            next_review_at=self.next_review_at,
            last_reviewed_at=self.last_reviewed_at,
        )


class FlashcardCreate(BaseModel):
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    tags: list[str] = []

    @field_validator("front", "back")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class FlashcardList(BaseModel):
    items: list[Flashcard]
    total: int


class ReviewRequest(BaseModel):
    flashcard_id: str = Field(
        validation_alias=AliasChoices("flashcardId", "flashcard_id"), min_length=1
    )
    # Range is checked by the scheduler so bad grades never reach the ease curve
    quality: int = Field(strict=True)


class GenerateRequest(BaseModel):
    content: str = Field(min_length=1)


class GenerateResult(BaseModel):
    items: list[Flashcard]
    total: int
