"""
LLM inference service for StudyMate.

Talks to a local Ollama server (POST {ollama_url}/api/chat, non-streaming).

Usage:
    reply = await chat_text(system_prompt, user_prompt)
    result_dict = await chat_json(system_prompt, user_prompt)
"""
from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from studymate.config import settings

logger = logging.getLogger(__name__)


class LLMUnavailableError(Exception):
    """Raised when the Ollama server is unreachable or returns an error."""


async def _chat(
    system_prompt: str,
    user_prompt: str,
    max_tokens: int,
    json_mode: bool,
) -> str:
    payload: dict[str, Any] = {
        "model": settings.ollama_model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "stream": False,
        "options": {"num_predict": max_tokens},
    }
    if json_mode:
        payload["format"] = "json"

    try:
        async with httpx.AsyncClient() as client:
            res = await client.post(
                f"{settings.ollama_url}/api/chat",
                json=payload,
                timeout=settings.llm_timeout,
            )
            res.raise_for_status()
            return res.json()["message"]["content"]
    except (httpx.HTTPError, KeyError, ValueError) as e:
        logger.warning("Ollama inference failed: %s", e)
        raise LLMUnavailableError(f"Ollama request failed: {e}") from e


async def chat_text(
    system_prompt: str,
    user_prompt: str,
    max_tokens: int = 1024,
) -> str:
    """Send a chat request and return the reply text."""
    return await _chat(system_prompt, user_prompt, max_tokens, json_mode=False)


async def chat_json(
    system_prompt: str,
    user_prompt: str,
    max_tokens: int = 1024,
) -> dict:
    """
    Send a chat request to the LLM expecting JSON output.

    Returns a parsed dict.
    Raises LLMUnavailableError if Ollama is unreachable.
    Raises json.JSONDecodeError if the model returns invalid JSON (caller handles).
    """
    content = await _chat(system_prompt, user_prompt, max_tokens, json_mode=True)
    return json.loads(content)
