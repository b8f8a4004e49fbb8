import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from studymate.db.sqlite import get_db, list_messages
from studymate.models.chat import ChatMessage, ChatRequest, ChatResponse
from studymate.services.chat import respond
from studymate.services.llm_service import LLMUnavailableError

router = APIRouter()


@router.get("/messages", response_model=list[ChatMessage])
async def get_messages(db: aiosqlite.Connection = Depends(get_db)):
    return await list_messages(db)


@router.post("/chat", response_model=ChatResponse)
async def send_message(body: ChatRequest, db: aiosqlite.Connection = Depends(get_db)):
    try:
        reply = await respond(db, body.message)
    except LLMUnavailableError:
        raise HTTPException(status_code=503, detail="Chat model unavailable")
    return ChatResponse(response=reply)
