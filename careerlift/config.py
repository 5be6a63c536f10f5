from pydantic_settings import BaseSettings
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
import os


@dataclass(frozen=True)
class GeminiConfig:
    api_key: str
    model: str
    timeout_seconds: float = 60.0


@dataclass(frozen=True)
class VertexConfig:
    api_key: str
    model: str
    project: str = ""
    location: str = "global"
    data_store: str = ""
    timeout_seconds: float = 20.0


class Settings(BaseSettings):
    # Gemini (analysis, extraction, discovery)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash-preview-09-2025"

    # Vertex AI (optional course search, grounded on a data store when set)
    vertex_api_key: str = ""
    vertex_model: str = "gemini-2.5-flash-lite"
    vertex_project: str = ""
    vertex_location: str = "global"
    vertex_data_store: str = ""

    # Test Mode
    test_mode: bool = False

    # Namespace for stored analyses (/artifacts/{app_id}/users/{user_id}/career_analyses)
    app_id: str = "careerlift-default-app"

    # Database - Railway provides DATABASE_URL, fallback to SQLite for local
    database_url: Optional[str] = None

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024

    # App Settings
    app_name: str = "CareerLift AI"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"

    # API Settings
    backend_host: str = "0.0.0.0"
    backend_port: int = int(os.getenv("PORT", "4000"))

    class Config:
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # DATABASE_URL is read into database_url; fallback to local SQLite
        url = self.database_url or "sqlite+aiosqlite:///./careerlift.db"
        # SQLAlchemy async needs postgresql+asyncpg://
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        self.database_url = url

    def gemini_config(self) -> Optional[GeminiConfig]:
        """Gemini provider settings, or None when no API key is configured."""
        if not self.gemini_api_key:
            return None
        return GeminiConfig(api_key=self.gemini_api_key, model=self.gemini_model)

    def vertex_config(self) -> Optional[VertexConfig]:
        """Vertex provider settings, or None when no API key is configured."""
        if not self.vertex_api_key:
            return None
        return VertexConfig(
            api_key=self.vertex_api_key,
            model=self.vertex_model,
            project=self.vertex_project,
            location=self.vertex_location or "global",
            data_store=self.vertex_data_store,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
