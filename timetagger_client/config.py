"""
Configuration settings for the TimeTagger client.

Uses Pydantic Settings to load environment variables for the API endpoint,
credentials, transport options and logging.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API
    timetagger_url: str = Field("http://localhost/timetagger/api/v2/", alias="TIMETAGGER_URL")
    timetagger_api_key: str = Field("", alias="TIMETAGGER_API_KEY")
    timetagger_timeout: float = Field(30.0, alias="TIMETAGGER_TIMEOUT")
    timetagger_verify_tls: bool = Field(True, alias="TIMETAGGER_VERIFY_TLS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def masked_api_key(self) -> str:
        """Return the API key with all but the last four characters hidden."""
        key = self.timetagger_api_key
        if not key:
            return "<unset>"
        if len(key) <= 4:
            return "*" * len(key)
        return "*" * (len(key) - 4) + key[-4:]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
