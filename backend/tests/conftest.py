import os

import httpx
import pytest

# Keep tests away from the real data directory and quiet
os.environ.setdefault("STUDYMATE_LOG_LEVEL", "WARNING")

from studymate import app  # noqa: E402
from studymate.db.sqlite import get_db, init_sqlite  # noqa: E402

VOCAB = ["cell", "mitochondria", "energy", "python", "loop", "history"]


async def fake_embed_text(text: str) -> list[float]:
    """Bag-of-words vector over a tiny vocabulary; unrelated text gets a zero vector."""
    words = [w.strip(".,?!:").lower() for w in text.split()]
    return [float(words.count(v)) for v in VOCAB]


@pytest.fixture
async def db(tmp_path):
    await init_sqlite(tmp_path)
    async for conn in get_db():
        yield conn


@pytest.fixture
def fake_embeddings(monkeypatch):
    monkeypatch.setattr("studymate.services.retrieval.embed_text", fake_embed_text)
    return fake_embed_text


@pytest.fixture
async def client(tmp_path, fake_embeddings):
    await init_sqlite(tmp_path)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
