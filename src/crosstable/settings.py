"""Settings for CrossTable client."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class CrossTableSettings(BaseSettings):
    """CrossTable configuration settings."""

    # Credentials
    API_KEY: Optional[str] = None

    # Service
    API_BASE_URL: str = "http://api.v3.factual.com/"
    API_TIMEOUT: float = 30.0
    MULTI_PATH: str = "multi"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = CrossTableSettings()
