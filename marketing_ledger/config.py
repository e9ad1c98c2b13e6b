"""
Application configuration using Pydantic Settings.

Values are read from environment variables first, then from an optional
.env file, then from the defaults below. Secrets never live in source:
the .env file is gitignored and .env.example is the template.

Usage:
    from marketing_ledger.config import settings
    print(settings.DATABASE_URL)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the marketing ledger service.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to sign JWT tokens
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Meetat Marketing Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # All marketing routes are mounted under this prefix
    API_PREFIX: str = "/marketing"

    # --- Database ---
    # SQLite for local use; any backend with SELECT ... FOR UPDATE in production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/marketing.db"

    # --- Authentication ---
    # REQUIRED: No default, forces the operator to set a real secret
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    # JSON lines for log shippers; plain text is easier to read locally
    LOG_JSON: bool = True

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL: {value}")
        return level


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
