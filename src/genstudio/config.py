"""Configuration management for the generation studio."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE = "https://ideanai.bismoservices.com"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="GENSTUDIO_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_base: str = Field(default=DEFAULT_API_BASE, description="Base URL of the generation backend")
    api_token: Optional[str] = Field(None, description="Bearer token for the generation backend")
    timeout_seconds: float = Field(default=30.0, description="HTTP timeout in seconds")

    # Session Configuration
    required_field_count: int = Field(default=3, ge=0, description="Leading framework fields that must be filled")
    top_p: float = Field(default=0.9, description="Nucleus sampling value sent with every generation")
    section_temperature: float = Field(default=0.8, description="Temperature for section regeneration")
    section_max_tokens: int = Field(default=500, description="Token budget for section regeneration")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load settings from the environment and an optional .env file."""

    if env_file is None:
        return Settings()
    return Settings(_env_file=env_file)  # type: ignore[call-arg]
