"""Runtime settings powered by ``pydantic-settings``."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration shared by the coordinator and its SQLAlchemy collaborator."""

    model_config = SettingsConfigDict(
        env_prefix="UNITOFWORK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(default="sqlite+aiosqlite:///./unitofwork.db")
    db_echo: bool = Field(default=False)
    db_lock_timeout_seconds: float = Field(default=5.0, ge=0)
    log_level: str = Field(default="INFO")
    teardown_error_policy: Literal["log", "raise"] = Field(default="log")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        if not isinstance(value, str):
            return "INFO"
        return value.upper()

    @field_validator("teardown_error_policy", mode="before")
    @classmethod
    def _normalise_teardown_policy(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
