"""Environment-driven configuration for the Timesheet app.

Every setting the application reads lives on ``AppSettings``. Values come from
the process environment first and ``.env`` / ``.env.local`` files second, so a
development checkout boots without any extra setup while deployments override
what they need.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Timesheet"
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[1])
    DATA_DIR: Path = Field(default_factory=lambda: Path.cwd() / "data")
    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None
    # Wall-clock zone used for the datetime-local form fields and table display.
    TZ: str = "UTC"

    APP_SECRET: str = "dev-insecure-secret-change-me"
    SESSION_COOKIE_NAME: str = "ts_session"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 30
    SESSION_HTTPS_ONLY: bool = False

    JWT_SECRET: str = "change-me"
    JWT_ACCESS_TTL_MIN: int = 15
    JWT_REFRESH_TTL_DAYS: int = 7

    DB_URL: str = Field(
        default="sqlite:///data/timesheet.db",
        validation_alias=AliasChoices("DATABASE_URL", "DB_URL"),
    )

    PAGE_SIZE: int = 10
    SEARCH_DEBOUNCE_MS: int = 300

    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    @field_validator("PAGE_SIZE")
    @classmethod
    def _positive_page_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("PAGE_SIZE must be at least 1")
        return value

    @property
    def templates_dir(self) -> Path:
        return self.TEMPLATES_DIR if self.TEMPLATES_DIR is not None else self.BASE_DIR / "templates"

    @property
    def static_dir(self) -> Path:
        return self.STATIC_DIR if self.STATIC_DIR is not None else self.BASE_DIR / "static"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    if settings.DB_URL.startswith("sqlite:///") and not settings.DB_URL.startswith("sqlite:////"):
        # Relative SQLite paths resolve against the working directory.
        db_path = Path(settings.DB_URL.removeprefix("sqlite:///"))
        if db_path.parent != Path("."):
            db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    if settings.TEMPLATES_DIR is None:
        settings.TEMPLATES_DIR = settings.BASE_DIR / "templates"
    if settings.STATIC_DIR is None:
        settings.STATIC_DIR = settings.BASE_DIR / "static"
    return settings


# Importing ``settings`` anywhere gives the configured values without rebuilding
# the object each time.
settings = get_settings()
