"""
Research cache configuration.

Resolution order (highest priority first):
  1. Environment variables   (RESEARCH_CACHE_CACHE__TTL_HOURS=...)
  2. YAML config file        (research_cache.yaml)
  3. Defaults defined here
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from research_cache.schemas.cost import CostTier


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogFormat(StrEnum):
    JSON = "json"
    CONSOLE = "console"


class LoggingSettings(BaseModel):
    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON


class CacheSettings(BaseModel):
    enabled: bool = True
    directory: Path = Path("cache")
    ttl_hours: float = Field(24.0, gt=0)
    cleanup_interval_seconds: float = Field(3600.0, gt=0)


class PerplexitySettings(BaseModel):
    api_key: str = ""
    api_base_url: str = "https://api.perplexity.ai"
    default_model: str = "sonar-reasoning-pro"
    default_effort: CostTier = CostTier.MEDIUM
    timeout_seconds: float = 60.0


class Settings(BaseSettings):
    """Root settings: env vars over YAML over defaults."""

    model_config = SettingsConfigDict(
        env_prefix="RESEARCH_CACHE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    cache: CacheSettings = Field(default_factory=CacheSettings)
    perplexity: PerplexitySettings = Field(default_factory=PerplexitySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Convenience aliases for flat env vars (PERPLEXITY_API_KEY, RESEARCH_CACHE_LOG_LEVEL)
    perplexity_api_key: str = Field("", validation_alias="perplexity_api_key")
    log_level: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML data arrives as init kwargs; environment must win over it
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    def model_post_init(self, __context: Any) -> None:
        # Allow flat env vars to override nested ones
        if self.perplexity_api_key:
            self.perplexity.api_key = self.perplexity_api_key
        if self.log_level:
            self.logging.level = LogLevel(self.log_level.upper())


def _load_yaml_config() -> dict[str, Any]:
    """Load YAML config file if it exists."""
    search_paths = [
        Path("research_cache.yaml"),
        Path("config/research_cache.yaml"),
        Path("/etc/research-cache/research_cache.yaml"),
    ]
    for path in search_paths:
        if path.is_file():
            with open(path) as f:
                return yaml.safe_load(f) or {}
    return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    yaml_data = _load_yaml_config()
    return Settings(**yaml_data)
