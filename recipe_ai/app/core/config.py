import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parents[1] / "services" / "ai" / "prompts"


class Settings(BaseSettings):
    database_url: str = Field("sqlite:///./recipe_ai.db", alias="DATABASE_URL")
    auth_secret_key: str = Field("change-me", alias="AUTH_SECRET_KEY")
    auth_algorithm: str = Field("HS256", alias="AUTH_ALGORITHM")
    prompts_dir: Path = Field(DEFAULT_PROMPTS_DIR, alias="PROMPTS_DIR")
    ai_request_timeout_seconds: float = Field(120.0, alias="AI_REQUEST_TIMEOUT_SECONDS")
    ai_connect_timeout_seconds: float = Field(10.0, alias="AI_CONNECT_TIMEOUT_SECONDS")
    ai_connection_test_timeout_seconds: float = Field(10.0, alias="AI_CONNECTION_TEST_TIMEOUT_SECONDS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
