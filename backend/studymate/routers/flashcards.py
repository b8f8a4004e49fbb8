"""
Flashcards & spaced repetition router.

Endpoints:
  GET    /flashcards            — list all cards, soonest review first
  POST   /flashcards            — create a card with a fresh SM-2 state
  GET    /flashcards/due        — cards due for review now
  POST   /flashcards/review     — submit a 0-5 quality, run SM-2, record the review
  POST   /flashcards/generate   — LLM-generate cards from a passage
  GET    /flashcards/{id}       — single card
  DELETE /flashcards/{id}       — delete card
"""
from __future__ import annotations

import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Query

from studymate.config import settings
from studymate.db.sqlite import (
    create_flashcard,
    delete_flashcard,
    get_db,
    get_due_flashcards,
    get_flashcard,
    list_flashcards,
    utcnow,
)
from studymate.models.flashcard import (
    Flashcard,
    FlashcardCreate,
    FlashcardList,
    GenerateRequest,
    GenerateResult,
    ReviewRequest,
)
from studymate.services.flashcard_generator import generate_flashcards
from studymate.services.llm_service import LLMUnavailableError
from studymate.services.review import FlashcardNotFoundError, submit_review
from studymate.services.scheduler import InvalidInputError, new_repetition_state

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=FlashcardList)
async def list_cards(
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    db: aiosqlite.Connection = Depends(get_db),
) -> FlashcardList:
    items, total = await list_flashcards(db, offset=offset, limit=limit)
    return FlashcardList(items=items, total=total)


@router.post("", response_model=Flashcard, status_code=201)
async def create_card(
    body: FlashcardCreate,
    db: aiosqlite.Connection = Depends(get_db),
) -> Flashcard:
    return await create_flashcard(db, body, new_repetition_state(utcnow()))


@router.get("/due", response_model=FlashcardList)
async def get_due(
    limit: int = Query(default=settings.due_limit_default, ge=1, le=100),
    db: aiosqlite.Connection = Depends(get_db),
) -> FlashcardList:
    """Return cards due for review now, most overdue first."""
    items = await get_due_flashcards(db, utcnow(), limit=limit)
    return FlashcardList(items=items, total=len(items))


@router.post("/review", response_model=Flashcard)
async def review_card(
    body: ReviewRequest,
    db: aiosqlite.Connection = Depends(get_db),
) -> Flashcard:
    """Submit a review quality (0-5) for a flashcard and return its new schedule."""
    try:
        return await submit_review(db, body.flashcard_id, body.quality, utcnow())
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except FlashcardNotFoundError:
        raise HTTPException(status_code=404, detail="Flashcard not found")


@router.post("/generate", response_model=GenerateResult, status_code=201)
async def generate_cards(
    body: GenerateRequest,
    db: aiosqlite.Connection = Depends(get_db),
) -> GenerateResult:
    try:
        items = await generate_flashcards(db, body.content, utcnow())
    except LLMUnavailableError as e:
        logger.warning("Flashcard generation unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Flashcard generation unavailable")
    return GenerateResult(items=items, total=len(items))


@router.get("/{card_id}", response_model=Flashcard)
async def get_card(
    card_id: str,
    db: aiosqlite.Connection = Depends(get_db),
) -> Flashcard:
    card = await get_flashcard(db, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Flashcard not found")
    return card


@router.delete("/{card_id}", status_code=204)
async def remove_card(
    card_id: str,
    db: aiosqlite.Connection = Depends(get_db),
) -> None:
    deleted = await delete_flashcard(db, card_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Flashcard not found")
