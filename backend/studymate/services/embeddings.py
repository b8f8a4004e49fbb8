"""
Text embedding provider.

Uses ChromaDB's bundled ONNX all-MiniLM-L6-v2 embedding function (downloaded on
first use, runs locally). The model is loaded lazily and shared process-wide;
encoding runs in a worker thread.

Usage:
    vector = await embed_text("What is a mitochondrion?")
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from studymate.config import settings

logger = logging.getLogger(__name__)

_embedding_function: Any | None = None


class EmbeddingUnavailableError(Exception):
    """Raised when the embedding model cannot be loaded or fails to encode."""


def _get_embedding_function() -> Any:
    global _embedding_function
    if _embedding_function is None:
        try:
            from chromadb.utils.embedding_functions import DefaultEmbeddingFunction

            _embedding_function = DefaultEmbeddingFunction()
        except Exception as e:
            raise EmbeddingUnavailableError(f"Failed to load embedding model: {e}") from e
    return _embedding_function


def _encode(texts: list[str]) -> list[list[float]]:
    embed = _get_embedding_function()
    try:
        vectors = embed(texts)
    except Exception as e:
        raise EmbeddingUnavailableError(f"Embedding failed: {e}") from e
    result = [[float(x) for x in v] for v in vectors]
    for v in result:
        if len(v) != settings.embedding_dim:
            logger.warning(
                "Embedding dimension %d differs from configured %d",
                len(v),
                settings.embedding_dim,
            )
            break
    return result


async def embed_text(text: str) -> list[float]:
    """Embed a single text. Raises EmbeddingUnavailableError on any failure."""
    vectors = await asyncio.to_thread(_encode, [text])
    if not vectors or not vectors[0]:
        raise EmbeddingUnavailableError("Embedding model returned no vector")
    return vectors[0]
