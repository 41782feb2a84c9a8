"""Application configuration loaded from environment variables and .env"""
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Process-wide settings.

    Per-user preferences (API key, model, export defaults) live in the
    ``settings`` table, not here.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "BookGen"
    app_version: str = "1.0.0"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    debug: bool = False
    cors_origins: List[str] = ["http://localhost:5173"]

    # Database
    database_url: str = "sqlite+aiosqlite:///data/bookgen.db"
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False
    log_file_path: str = "logs/bookgen.log"
    log_max_bytes: int = 10 * 1024 * 1024
    log_backup_count: int = 5

    # Text generation
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "openai/gpt-4o-mini"
    generation_temperature: float = 0.7
    generation_max_tokens: int = 4000
    generation_timeout_seconds: float = 120.0
    http_referer: str = "http://localhost:8000"
    app_title: str = "BookGen AI - Nonfiction Book Generator"

    # Export
    pdf_render_timeout_ms: int = 60000

    # Identity used when a request carries none (local development only)
    dev_user_id: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"invalid log level: {v}")
        return level

    @field_validator("generation_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("generation_timeout_seconds must be > 0")
        return v


settings = Settings()
