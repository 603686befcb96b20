# filemanager/config.py
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Sandbox: initial working root (created at startup if missing)
    WORKSPACE_DIR: Path = Path.home() / "ai-file-manager-workspace"

    # Text-generation backend
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_TEMPERATURE: float = 0.7
    GEMINI_MAX_OUTPUT_TOKENS: int = 2048

    # Chat
    HISTORY_LIMIT: int = 100

    # HTTP transport
    HTTP_HOST: str = "127.0.0.1"
    HTTP_PORT: int = 3000
    CORS_ALLOWED_ORIGINS: str = "*"
    STATIC_DIR: Path = Path("./public")

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]
