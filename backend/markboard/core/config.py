import json
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    PROJECT_NAME: str = "Markboard API"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"
    # No default: the server must not start without a database
    DATABASE_URL: str
    # Comma-separated in the environment, see assemble_cors_origins
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:5000",
        "http://127.0.0.1:5000",
    ]

    # Web Push (VAPID). Push is disabled unless both keys are set.
    VAPID_PUBLIC_KEY: Optional[str] = None
    VAPID_PRIVATE_KEY: Optional[str] = None
    VAPID_SUBJECT: str = "mailto:admin@example.com"
    PUSH_TIMEOUT_SECONDS: float = 10.0
    PUSH_TTL_SECONDS: int = 1800

    # Expiry sweep
    SWEEP_INTERVAL_SECONDS: float = 10.0
    SWEEP_TIMEOUT_SECONDS: float = 30.0

    # Rate limiting
    MARKS_RATE_LIMIT: str = "30/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: List[str] | str) -> List[str]:
        """Allow both comma-separated strings and list inputs."""
        if isinstance(value, str) and value.strip().startswith("["):
            return json.loads(value)
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("VAPID_PUBLIC_KEY", "VAPID_PRIVATE_KEY", mode="before")
    @classmethod
    def blank_key_is_none(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def push_enabled(self) -> bool:
        return bool(self.VAPID_PUBLIC_KEY and self.VAPID_PRIVATE_KEY)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
