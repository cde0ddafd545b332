"""Engine settings read from the environment (prefix ARCHETYPE_) or a .env file."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    DEFAULT_TEMPLATE: str = "fastapi-sqlalchemy"
    OUTPUT_DIR: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="ARCHETYPE_",
        env_file=".env",
        extra="ignore",
    )


def get_settings() -> EngineSettings:
    return EngineSettings()
