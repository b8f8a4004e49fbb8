import json
from datetime import datetime, timezone

import pytest

from studymate.db.sqlite import list_flashcards
from studymate.services import flashcard_generator
from studymate.services.flashcard_generator import generate_flashcards, parse_cards
from studymate.services.llm_service import LLMUnavailableError

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class TestParseCards:
    def test_valid_cards(self):
        cards = parse_cards(
            {"flashcards": [{"front": " Q ", "back": "A", "tags": ["bio", " ", "cells"]}]}
        )
        assert len(cards) == 1
        assert cards[0].front == "Q"
        assert cards[0].tags == ["bio", "cells"]

    def test_drops_blank_and_malformed(self):
        cards = parse_cards(
            {
                "flashcards": [
                    {"front": "", "back": "A"},
                    {"front": "Q", "back": None},
                    "not a card",
                    {"front": "Q2", "back": "A2", "tags": "oops"},
                ]
            }
        )
        assert [(c.front, c.tags) for c in cards] == [("Q2", [])]

    def test_missing_key(self):
        assert parse_cards({}) == []

    @pytest.mark.parametrize(
        "payload",
        [
            [{"front": "Q", "back": "A"}],
            {"flashcards": {"front": "Q", "back": "A"}},
            {"flashcards": "Q: A"},
            None,
        ],
    )
    def test_unexpected_shapes_yield_nothing(self, payload):
        assert parse_cards(payload) == []


async def test_generate_stores_cards_with_fresh_state(db, monkeypatch):
    async def fake_chat_json(system_prompt, user_prompt, max_tokens=1024):
        assert "Mitochondria" in user_prompt
        return {
            "flashcards": [
                {"front": "What makes ATP?", "back": "Mitochondria", "tags": ["bio"]},
                {"front": "Cell unit?", "back": "The cell", "tags": []},
            ]
        }

    monkeypatch.setattr(flashcard_generator, "chat_json", fake_chat_json)

    created = await generate_flashcards(db, "Mitochondria produce ATP.", NOW)

    assert len(created) == 2
    assert all(c.repetitions == 0 and c.interval == 0 for c in created)
    assert all(c.next_review_at == NOW for c in created)
    _, total = await list_flashcards(db)
    assert total == 2


async def test_invalid_json_is_reported_as_unavailable(db, monkeypatch):
    async def bad_chat_json(*args, **kwargs):
        raise json.JSONDecodeError("Expecting value", "nope", 0)

    monkeypatch.setattr(flashcard_generator, "chat_json", bad_chat_json)

    with pytest.raises(LLMUnavailableError):
        await generate_flashcards(db, "text", NOW)


async def test_list_payload_creates_no_cards(db, monkeypatch):
    async def list_chat_json(*args, **kwargs):
        return [{"front": "Q", "back": "A"}]

    monkeypatch.setattr(flashcard_generator, "chat_json", list_chat_json)

    assert await generate_flashcards(db, "text", NOW) == []
