"""Runtime configuration read from the environment or a ``.env`` file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from clinker_quiz.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from clinker_quiz.constants.storage_constants import DEFAULT_STORAGE_FILENAME


class Settings(BaseSettings):
    """Settings are read from ``CLINKER_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLINKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    STORAGE_PATH: Path = Field(default_factory=lambda: Path.home() / ".clinker_quiz" / DEFAULT_STORAGE_FILENAME)
    HOST: str = DEFAULT_HOST
    PORT: int = DEFAULT_PORT
    LOG_LEVEL: str = "INFO"
    START_API_SERVER: bool = True

    # Base for share links; defaults to the local API server.
    PUBLIC_BASE_URL: str | None = None

    # Optional administrator seeded into the account store at startup.
    ADMIN_NAME: str = "Administrator"
    ADMIN_EMAIL: str | None = None
    ADMIN_PASSWORD: str | None = None

    @property
    def share_base_url(self) -> str:
        if self.PUBLIC_BASE_URL:
            return self.PUBLIC_BASE_URL.rstrip("/") + "/"
        return f"http://{self.HOST}:{self.PORT}/"

    @property
    def admin_configured(self) -> bool:
        return bool(self.ADMIN_EMAIL and self.ADMIN_PASSWORD)


@lru_cache
def get_settings() -> Settings:
    return Settings()
