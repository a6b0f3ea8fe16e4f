"""Configuration management for clawprep."""

import re
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_DIR = "/root/.openclaw"
DEFAULT_CONTEXT_WINDOW = 32768

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class Settings(BaseSettings):
    """Startup settings loaded from environment variables.

    The Ollama variables are read without a prefix because the container
    template exposes them under those names.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Config file location
    config_dir: Path = Field(
        default=Path(DEFAULT_CONFIG_DIR),
        validation_alias="TEST_CONFIG_DIR",
    )
    config_filename: str = Field(
        default="openclaw.json",
        validation_alias="OPENCLAW_CONFIG_FILE",
    )

    # Ollama provider
    ollama_base_url: str | None = Field(
        default=None,
        validation_alias="OLLAMA_BASE_URL",
    )
    ollama_api_key: str | None = Field(
        default=None,
        validation_alias="OLLAMA_API_KEY",
    )
    ollama_model: str | None = Field(
        default=None,
        validation_alias="OLLAMA_MODEL",
    )
    ollama_context_window: int = Field(
        default=DEFAULT_CONTEXT_WINDOW,
        validation_alias="OLLAMA_CONTEXT_WINDOW",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias="CLAWPREP_LOG_LEVEL",
    )
    log_json: bool = Field(
        default=False,
        validation_alias="CLAWPREP_LOG_JSON",
    )

    @field_validator("ollama_base_url", "ollama_api_key", "ollama_model", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("config_filename", mode="before")
    @classmethod
    def _default_filename(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "openclaw.json"
        return value

    @field_validator("ollama_context_window", mode="before")
    @classmethod
    def _lenient_context_window(cls, value: object) -> int:
        return parse_context_window(value)

    @property
    def config_file(self) -> Path:
        """Full path of the persisted configuration document."""
        return self.config_dir / self.config_filename


def parse_context_window(value: object, default: int = DEFAULT_CONTEXT_WINDOW) -> int:
    """Read a context window size the way a lenient integer parse would.

    Leading digits are used and trailing text is ignored. Anything that
    yields no positive integer falls back to ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value if value > 0 else default
    if isinstance(value, float):
        return int(value) if value >= 1 else default
    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    parsed = int(match.group(1))
    return parsed if parsed > 0 else default


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
