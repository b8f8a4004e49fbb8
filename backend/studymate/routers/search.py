import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from studymate.db.sqlite import get_db
from studymate.models.note import SearchRequest, SearchResult
from studymate.services.embeddings import EmbeddingUnavailableError
from studymate.services.retrieval import search_notes

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=list[SearchResult])
async def search(body: SearchRequest, db: aiosqlite.Connection = Depends(get_db)):
    """Semantic search over notes. An empty list means no matches."""
    try:
        return await search_notes(db, body.query)
    except EmbeddingUnavailableError as e:
        logger.warning("Search unavailable: %s", e)
        raise HTTPException(status_code=503, detail="Search is unavailable")
