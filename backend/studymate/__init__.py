from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studymate.config import settings
from studymate.db import init_all_databases


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_all_databases(settings.data_dir)
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title="StudyMate Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from studymate.routers import chat, dashboard, flashcards, health, notes, search

    application.include_router(health.router)
    application.include_router(chat.router, prefix="/api", tags=["chat"])
    application.include_router(
        flashcards.router, prefix="/api/flashcards", tags=["flashcards"]
    )
    application.include_router(notes.router, prefix="/api/notes", tags=["notes"])
    application.include_router(search.router, prefix="/api/search", tags=["search"])
    application.include_router(
        dashboard.router, prefix="/api/dashboard", tags=["dashboard"]
    )

    return application


app = create_app()
