"""Application configuration via Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

UnmappedPolicy = Literal["emit", "skip", "fail"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_json: bool = Field(
        default=False,
        description="Render log events as JSON lines instead of the console format",
    )

    # Tracker HTTP client
    http_timeout: float = Field(default=30.0, description="Tracker request timeout in seconds")
    error_body_limit: int = Field(
        default=500,
        ge=0,
        description="Max characters of a tracker response body kept in error messages",
    )

    # Findings whose repository has no team mapping
    unmapped_policy: UnmappedPolicy = Field(default="emit")


@lru_cache
def get_settings() -> Settings:
    return Settings()
