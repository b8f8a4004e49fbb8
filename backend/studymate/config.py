from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / ".studymate" / "data"
    sqlite_filename: str = "studymate.db"
    log_level: str = "WARNING"

    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2:3b"
    llm_timeout: float = 120.0
    embedding_dim: int = 384  # all-MiniLM-L6-v2 default

    # Relevance ranking call sites
    chat_context_min_score: float = 0.3
    chat_context_limit: int = 3
    chat_history_window: int = 10
    context_snippet_chars: int = 200
    search_min_score: float = 0.3
    search_limit: int = 10

    due_limit_default: int = 20

    model_config = {"env_prefix": "STUDYMATE_"}


settings = Settings()
