"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every knob has a default that works with the docker-compose database
    - get_settings() is cached (lru_cache), one instance per process
    - The name word limit is at least 1; log format is json or text

Design Decisions:
    - The name word limit is policy, not a rule constant: registries and
      request schemas read it from here
    - Identity header names are configurable because the upstream auth layer owns them
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from persona_graph.core.domain_types import DEFAULT_NAME_MAX_WORDS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Store
    database_url: str = "postgresql+asyncpg://persona:persona@db:5432/persona_graph"
    database_pool_size: int = Field(20, ge=1)
    database_max_overflow: int = Field(10, ge=0)

    # Persona policy
    persona_name_max_words: int = Field(DEFAULT_NAME_MAX_WORDS, ge=1)

    # Identity
    account_header: str = "X-Account-Username"
    session_header: str = "X-Session-Id"

    # HTTP
    cors_origins: list[str] = ["http://localhost:5173"]

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_asyncpg_driver(cls, v: str) -> str:
        """postgresql:// URLs from hosting providers need the asyncpg driver name."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
