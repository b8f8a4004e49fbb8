"""
Note retrieval on top of the ranker.

Two call sites share the same ranking and differ only in floor and size:
  - chat context injection: settings.chat_context_min_score / chat_context_limit
  - search:                 settings.search_min_score / search_limit
"""
from __future__ import annotations

import logging

import aiosqlite

from studymate.config import settings
from studymate.db.sqlite import list_notes, update_note_embedding
from studymate.models.note import Note, SearchResult
from studymate.services.embeddings import EmbeddingUnavailableError, embed_text
from studymate.services.ranker import RankedCandidate, SimilarityCandidate, rank

logger = logging.getLogger(__name__)


def note_text(title: str, content: str) -> str:
    """Text that gets embedded for a note."""
    return f"{title} {content}"


def note_candidates(notes: list[Note]) -> list[SimilarityCandidate]:
    return [SimilarityCandidate(id=n.id, vector=n.embedding, metadata=n) for n in notes]


async def rank_notes(
    db: aiosqlite.Connection,
    query_vector: list[float],
    min_score: float,
    limit: int,
) -> list[RankedCandidate]:
    notes = await list_notes(db)
    return rank(query_vector, note_candidates(notes), min_score, limit)


async def search_notes(db: aiosqlite.Connection, query: str) -> list[SearchResult]:
    """Semantic search over notes. Raises EmbeddingUnavailableError if the query can't be embedded."""
    query_vector = await embed_text(query)
    ranked = await rank_notes(
        db, query_vector, settings.search_min_score, settings.search_limit
    )
    return [
        SearchResult(
            id=r.candidate.id,
            title=r.candidate.metadata.title,
            content=r.candidate.metadata.content,
            similarity=r.score,
            tags=r.candidate.metadata.tags,
        )
        for r in ranked
    ]


def format_context(ranked: list[RankedCandidate]) -> str:
    """Render chat context notes as prompt text; empty string when nothing is relevant."""
    if not ranked:
        return ""
    lines = [
        f"- {r.candidate.metadata.title}: "
        f"{r.candidate.metadata.content[: settings.context_snippet_chars]}"
        for r in ranked
    ]
    return "Relevant notes:\n" + "\n".join(lines)


async def relevant_context(db: aiosqlite.Connection, message: str) -> str:
    """Best-effort note context for a chat message; never raises for embedding failures."""
    try:
        query_vector = await embed_text(message)
    except EmbeddingUnavailableError as e:
        logger.warning("No semantic context for chat message: %s", e)
        return ""
    ranked = await rank_notes(
        db, query_vector, settings.chat_context_min_score, settings.chat_context_limit
    )
    return format_context(ranked)


async def embed_note(db: aiosqlite.Connection, note: Note) -> bool:
    """Compute and store a note's embedding. Returns False (and logs) if embedding fails."""
    try:
        vector = await embed_text(note_text(note.title, note.content))
    except EmbeddingUnavailableError as e:
        logger.warning("Note %s stored without embedding: %s", note.id, e)
        return False
    await update_note_embedding(db, note.id, vector)
    logger.info("Note %s embedded (%d dims)", note.id, len(vector))
    return True
