from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class Note(BaseModel):
    id: str
    title: str
    content: str
    tags: list[str] = []
    embedding: list[float] | None = None  # None = not embedded yet
    created_at: datetime
    updated_at: datetime

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)


class NoteCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    tags: list[str] = []

    @field_validator("title", "content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class NoteOut(BaseModel):
    """Note as returned over HTTP; the raw vector stays server-side."""

    id: str
    title: str
    content: str
    tags: list[str]
    has_embedding: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_note(cls, note: Note) -> NoteOut:
        return cls(
            id=note.id,
            title=note.title,
            content=note.content,
            tags=note.tags,
            has_embedding=note.has_embedding,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )


class NoteList(BaseModel):
    items: list[NoteOut]
    total: int


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)

    @field_validator("query")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class SearchResult(BaseModel):
    id: str
    type: Literal["note"] = "note"
    title: str
    content: str
    similarity: float
    tags: list[str]
