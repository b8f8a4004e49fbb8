from studymate.models.chat import ChatMessage, ChatRequest, ChatResponse, Role
from studymate.models.dashboard import DashboardStats
from studymate.models.flashcard import (
    Flashcard,
    FlashcardCreate,
    FlashcardList,
    GenerateRequest,
    GenerateResult,
    RepetitionState,
    ReviewEvent,
    ReviewRequest,
)
from studymate.models.note import (
    Note,
    NoteCreate,
    NoteList,
    NoteOut,
    SearchRequest,
    SearchResult,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "DashboardStats",
    "Flashcard",
    "FlashcardCreate",
    "FlashcardList",
    "GenerateRequest",
    "GenerateResult",
    "Note",
    "NoteCreate",
    "NoteList",
    "NoteOut",
    "RepetitionState",
    "ReviewEvent",
    "ReviewRequest",
    "Role",
    "SearchRequest",
    "SearchResult",
]
