import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from studymate.config import settings
from studymate.models.chat import ChatMessage, Role
from studymate.models.flashcard import (
    Flashcard,
    FlashcardCreate,
    RepetitionState,
    ReviewEvent,
)
from studymate.models.note import Note, NoteCreate

_db_path: Path | None = None

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA foreign_keys=ON;

CREATE TABLE IF NOT EXISTS messages (
    id          TEXT PRIMARY KEY,
    role        TEXT NOT NULL,
    content     TEXT NOT NULL,
    created_at  TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_messages_time ON messages(created_at);

CREATE TABLE IF NOT EXISTS notes (
    id          TEXT PRIMARY KEY,
    title       TEXT NOT NULL,
    content     TEXT NOT NULL,
    tags        TEXT NOT NULL DEFAULT '[]',
    embedding   TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_notes_time ON notes(created_at);

CREATE TABLE IF NOT EXISTS flashcards (
    id               TEXT PRIMARY KEY,
    front            TEXT NOT NULL,
    back             TEXT NOT NULL,
    tags             TEXT NOT NULL DEFAULT '[]',
    ease_factor      REAL NOT NULL DEFAULT 2.5,
    interval         INTEGER NOT NULL DEFAULT 0,
    repetitions      INTEGER NOT NULL DEFAULT 0,
    next_review_at   TEXT NOT NULL,
    last_reviewed_at TEXT,
    created_at       TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_flashcards_review ON flashcards(next_review_at);

CREATE TABLE IF NOT EXISTS reviews (
    id           TEXT PRIMARY KEY,
    flashcard_id TEXT NOT NULL REFERENCES flashcards(id) ON DELETE CASCADE,
    quality      INTEGER NOT NULL,
    reviewed_at  TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_reviews_card ON reviews(flashcard_id);
CREATE INDEX IF NOT EXISTS idx_reviews_time ON reviews(reviewed_at);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    assert _db_path is not None, "SQLite not initialized"
    async with aiosqlite.connect(_db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys=ON")
        yield db


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def _ts(value: datetime) -> str:
    # Fixed-width UTC ISO strings so SQL comparisons order correctly
    return value.astimezone(timezone.utc).isoformat(timespec="seconds")


# --- Messages ---


async def create_message(
    db: aiosqlite.Connection, role: Role, content: str
) -> ChatMessage:
    message = ChatMessage(
        id=str(uuid.uuid4()), role=role, content=content, created_at=utcnow()
    )
    await db.execute(
        "INSERT INTO messages (id, role, content, created_at) VALUES (?, ?, ?, ?)",
        (message.id, message.role.value, message.content, _ts(message.created_at)),
    )
    await db.commit()
    return message


async def list_messages(db: aiosqlite.Connection) -> list[ChatMessage]:
    # rowid breaks ties between messages stored within the same second
    cursor = await db.execute("SELECT * FROM messages ORDER BY created_at ASC, rowid ASC")
    rows = await cursor.fetchall()
    return [ChatMessage(**dict(r)) for r in rows]


# --- Notes ---


def _row_to_note(row: aiosqlite.Row) -> Note:
    d = dict(row)
    d["tags"] = json.loads(d["tags"] or "[]")
    d["embedding"] = json.loads(d["embedding"]) if d["embedding"] else None
    return Note(**d)


async def create_note(db: aiosqlite.Connection, note: NoteCreate) -> Note:
    note_id = str(uuid.uuid4())
    now = _ts(utcnow())
    await db.execute(
        """INSERT INTO notes (id, title, content, tags, created_at, updated_at)
           VALUES (?, ?, ?, ?, ?, ?)""",
        (note_id, note.title, note.content, json.dumps(note.tags), now, now),
    )
    await db.commit()
    return await get_note(db, note_id)  # type: ignore[return-value]


async def get_note(db: aiosqlite.Connection, note_id: str) -> Note | None:
    cursor = await db.execute("SELECT * FROM notes WHERE id = ?", (note_id,))
    row = await cursor.fetchone()
    return _row_to_note(row) if row else None


async def list_notes(db: aiosqlite.Connection) -> list[Note]:
    """All notes, newest first. Includes stored embeddings (None if not computed)."""
    cursor = await db.execute("SELECT * FROM notes ORDER BY created_at DESC, rowid DESC")
    rows = await cursor.fetchall()
    return [_row_to_note(r) for r in rows]


async def update_note_embedding(
    db: aiosqlite.Connection, note_id: str, embedding: list[float]
) -> None:
    await db.execute(
        "UPDATE notes SET embedding = ?, updated_at = ? WHERE id = ?",
        (json.dumps(embedding), _ts(utcnow()), note_id),
    )
    await db.commit()


async def delete_note(db: aiosqlite.Connection, note_id: str) -> bool:
    cursor = await db.execute("DELETE FROM notes WHERE id = ?", (note_id,))
    await db.commit()
    return (cursor.rowcount or 0) > 0


# --- Flashcards ---


def _row_to_flashcard(row: aiosqlite.Row) -> Flashcard:
    d = dict(row)
    d["tags"] = json.loads(d["tags"] or "[]")
    return Flashcard(**d)


async def create_flashcard(
    db: aiosqlite.Connection,
    card: FlashcardCreate,
    state: RepetitionState,
    commit: bool = True,
) -> Flashcard:
    card_id = str(uuid.uuid4())
    await db.execute(
        """INSERT INTO flashcards
           (id, front, back, tags, ease_factor, interval, repetitions,
            next_review_at, last_reviewed_at, created_at)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            card_id,
            card.front,
            card.back,
            json.dumps(card.tags),
            state.ease_factor,
            state.interval,
            state.repetitions,
            _ts(state.next_review_at),
            _ts(state.last_reviewed_at) if state.last_reviewed_at else None,
            _ts(utcnow()),
        ),
    )
    if commit:
        await db.commit()
    return await get_flashcard(db, card_id)  # type: ignore[return-value]


async def get_flashcard(db: aiosqlite.Connection, card_id: str) -> Flashcard | None:
    cursor = await db.execute("SELECT * FROM flashcards WHERE id = ?", (card_id,))
    row = await cursor.fetchone()
    return _row_to_flashcard(row) if row else None


async def list_flashcards(
    db: aiosqlite.Connection,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[Flashcard], int]:
    cursor = await db.execute(
        "SELECT * FROM flashcards ORDER BY next_review_at ASC LIMIT ? OFFSET ?",
        (limit, offset),
    )
    rows = await cursor.fetchall()
    count_cursor = await db.execute("SELECT COUNT(*) FROM flashcards")
    count_row = await count_cursor.fetchone()
    total = count_row[0] if count_row else 0
    return [_row_to_flashcard(r) for r in rows], total


async def get_due_flashcards(
    db: aiosqlite.Connection,
    now: datetime,
    limit: int = 20,
) -> list[Flashcard]:
    """Return cards with next_review_at <= now, most overdue first."""
    cursor = await db.execute(
        """SELECT * FROM flashcards
           WHERE next_review_at <= ?
           ORDER BY next_review_at ASC
           LIMIT ?""",
        (_ts(now), limit),
    )
    rows = await cursor.fetchall()
    return [_row_to_flashcard(r) for r in rows]


async def save_review(
    db: aiosqlite.Connection,
    state: RepetitionState,
    event: ReviewEvent,
) -> Flashcard | None:
    """Persist a reviewed state and append its ReviewEvent in one transaction."""
    cursor = await db.execute(
        """UPDATE flashcards
           SET ease_factor = ?, interval = ?, repetitions = ?,
               next_review_at = ?, last_reviewed_at = ?
           WHERE id = ?""",
        (
            state.ease_factor,
            state.interval,
            state.repetitions,
            _ts(state.next_review_at),
            _ts(state.last_reviewed_at) if state.last_reviewed_at else None,
            event.flashcard_id,
        ),
    )
    if (cursor.rowcount or 0) == 0:
        await db.rollback()
        return None
    await db.execute(
        "INSERT INTO reviews (id, flashcard_id, quality, reviewed_at) VALUES (?, ?, ?, ?)",
        (event.id, event.flashcard_id, event.quality, _ts(event.reviewed_at)),
    )
    await db.commit()
    return await get_flashcard(db, event.flashcard_id)


async def list_reviews_for_flashcard(
    db: aiosqlite.Connection, card_id: str
) -> list[ReviewEvent]:
    cursor = await db.execute(
        "SELECT * FROM reviews WHERE flashcard_id = ? ORDER BY reviewed_at ASC",
        (card_id,),
    )
    rows = await cursor.fetchall()
    return [ReviewEvent(**dict(r)) for r in rows]


async def delete_flashcard(db: aiosqlite.Connection, card_id: str) -> bool:
    cursor = await db.execute("DELETE FROM flashcards WHERE id = ?", (card_id,))
    await db.commit()
    return (cursor.rowcount or 0) > 0


# --- Dashboard ---


async def count_flashcards(db: aiosqlite.Connection, due_before: datetime | None = None) -> int:
    if due_before is None:
        cursor = await db.execute("SELECT COUNT(*) FROM flashcards")
    else:
        cursor = await db.execute(
            "SELECT COUNT(*) FROM flashcards WHERE next_review_at <= ?",
            (_ts(due_before),),
        )
    row = await cursor.fetchone()
    return row[0] if row else 0


async def count_notes(db: aiosqlite.Connection) -> int:
    cursor = await db.execute("SELECT COUNT(*) FROM notes")
    row = await cursor.fetchone()
    return row[0] if row else 0


async def recent_review_times(db: aiosqlite.Connection, limit: int = 30) -> list[datetime]:
    cursor = await db.execute(
        "SELECT reviewed_at FROM reviews ORDER BY reviewed_at DESC LIMIT ?", (limit,)
    )
    rows = await cursor.fetchall()
    return [datetime.fromisoformat(r[0]) for r in rows]
