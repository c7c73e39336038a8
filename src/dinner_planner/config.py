"""
Dinner Planner - Configuration and settings.

Settings are read from the environment (and a local .env file) the first
time they are accessed, never at import time.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

Language = Literal["en", "ru"]


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str
    openai_model: str = "gpt-4.1-mini"
    generation_temperature: float = 0.5

    # Supabase
    supabase_url: str
    supabase_service_role_key: str

    # Application
    planner_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    default_lang: Language = "ru"

    @property
    def is_development(self) -> bool:
        return self.planner_env == "development"

    @property
    def is_production(self) -> bool:
        return self.planner_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
