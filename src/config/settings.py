# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is unusable for the requested operation."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM ===
    llm_provider: Literal["anthropic", "openai"] = "anthropic"
    llm_model: str = "claude-sonnet-4-20250514"
    llm_temperature: float = 0.6
    llm_max_tokens: int = 1000

    # Provider API keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # === Generation ===
    generation_timeout_s: float = 60.0
    channel_buffer_size: int = 32

    # === Recipe cache ===
    cache_backend: Literal["memory", "json", "sqlite", "redis"] = "memory"
    cache_max_entries: int = 0
    cache_root: Path = Path("~/.alchemy4d/cache")
    cache_redis_url: str = ""

    # === Server ===
    host: str = "0.0.0.0"
    port: int = 3001
    allowed_origins: str = "http://localhost:5173"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("generation_timeout_s")
    @classmethod
    def validate_generation_timeout(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("generation_timeout_s must be > 0")
        return v

    @field_validator("channel_buffer_size")
    @classmethod
    def validate_channel_buffer_size(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("channel_buffer_size must be >= 1")
        return v

    @field_validator("cache_max_entries")
    @classmethod
    def validate_cache_max_entries(cls, v: int) -> int:  # noqa: N805
        """0 means unbounded."""
        if v < 0:
            raise ValueError("cache_max_entries must be >= 0")
        return v

    # --- Helpers ---

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    def require_api_key(self) -> str:
        """Return the API key of the configured provider.

        Raises:
            ConfigurationError: If the key is not set.
        """
        key = self.anthropic_api_key if self.llm_provider == "anthropic" else self.openai_api_key
        if not key:
            raise ConfigurationError(
                f"{self.llm_provider.upper()}_API_KEY is required for LLM_PROVIDER={self.llm_provider}"
            )
        return key


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or the CLI).

    Returns:
        Validated Settings instance.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
