"""
Settings for the chat/weather backend.

Credentials come from the process environment, optionally pre-loaded from a
local ``.env.local`` file at startup.
"""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Upstream credentials
    openai_api_key: str = ""
    open_weather_map_api_key: str = ""

    # Upstream endpoints
    openai_base_url: str = "https://api.openai.com/v1"
    open_weather_map_base_url: str = "https://api.openweathermap.org/data/2.5"
    upstream_timeout: float = 100.0  # seconds

    # Server settings
    environment: str = Field("development", validation_alias="APP_ENVIRONMENT")
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


def load_env_file(path: str | Path = ".env.local") -> bool:
    """Load ``KEY=value`` lines from a local env file into the process environment.

    A missing file is fine. Values in the file win over already set variables.
    """
    return load_dotenv(dotenv_path=Path(path), override=True)


def get_settings() -> Settings:
    """Build settings from the current environment.

    Not cached: every request sees the environment as it is right now.
    """
    return Settings()
