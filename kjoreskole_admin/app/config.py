from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_VERSION = "0.1.0"

PAGE_SIZE_OPTIONS = (10, 25, 50, 100)
DEFAULT_PAGE_SIZE = 25
PAGE_WINDOW_DELTA = 2
ELLIPSIS = -1


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="KJORESKOLE_", extra="ignore")

    API_BASE_URL: str = "http://localhost:3001/api"
    API_TOKEN: str | None = None
    TIMEOUT_SECONDS: float = Field(default=20.0, gt=0)
    VERIFY_SSL: bool = True
    RETRY_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    RETRY_BACKOFF_MS: int = Field(default=150, ge=0)
    EXPORT_DIR: str = "./out/exports"
    CONTEXT_PATH: str = "./out/listing-context.json"
    LOG_LEVEL: str = "INFO"


def load_settings(env_file: str | None = ".env") -> Settings:
    return Settings(_env_file=env_file)
