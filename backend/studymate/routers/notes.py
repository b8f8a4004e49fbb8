import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from studymate.db.sqlite import create_note, delete_note, get_db, get_note, list_notes
from studymate.models.note import NoteCreate, NoteList, NoteOut
from studymate.services.retrieval import embed_note

router = APIRouter()


@router.get("", response_model=NoteList)
async def list_all(db: aiosqlite.Connection = Depends(get_db)):
    notes = await list_notes(db)
    return NoteList(items=[NoteOut.from_note(n) for n in notes], total=len(notes))


@router.post("", response_model=NoteOut, status_code=201)
async def create(body: NoteCreate, db: aiosqlite.Connection = Depends(get_db)):
    note = await create_note(db, body)
    # Embedding is best-effort; the note is searchable once it has one
    if await embed_note(db, note):
        note = await get_note(db, note.id) or note
    return NoteOut.from_note(note)


@router.get("/{note_id}", response_model=NoteOut)
async def get_one(note_id: str, db: aiosqlite.Connection = Depends(get_db)):
    note = await get_note(db, note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteOut.from_note(note)


@router.delete("/{note_id}", status_code=204)
async def delete_one(note_id: str, db: aiosqlite.Connection = Depends(get_db)):
    deleted = await delete_note(db, note_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Note not found")
