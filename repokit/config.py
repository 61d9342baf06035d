import re
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "repokit"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True

    # --- Database (SQLModel, async driver) ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./app.db"
    DB_NAME: str = "app_db"  # Logical name used in logs and errors
    DB_ECHO: bool = False

    @property
    def SYNC_DATABASE_URL(self) -> str:
        # Strip async driver markers (Alembic runs on a blocking engine)
        url = re.sub(r"^(sqlite)\+aiosqlite://", r"\1://", self.DATABASE_URL)
        url = re.sub(r"^(mysql)\+aiomysql://", r"\1+pymysql://", url)
        return re.sub(r"^(postgresql)\+asyncpg://", r"\1://", url)

    # --- Migrations (Alembic) ---
    ALEMBIC_CONFIG: str = "alembic.ini"
    ALEMBIC_SCRIPT_LOCATION: Optional[str] = None  # Overrides script_location from the ini file
    ALLOW_MIGRATION: bool = True

    # --- Logging ---
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


# Singleton settings instance
settings = Settings()
