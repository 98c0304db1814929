"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "FitPlan AI Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://fitplan@localhost:5432/fitplan"
    require_secrets_on_startup: bool = True
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "fitplan"

    # Clerk delivers account events through Svix.
    clerk_webhook_secret: str | None = None
    # Unset means no replay window: deliveries are not rejected for age.
    webhook_tolerance_seconds: int | None = None

    nvidia_api_key: str | None = None
    llm_base_url: str = "https://integrate.api.nvidia.com/v1"
    llm_model: str = "meta/llama-4-maverick-17b-128e-instruct"
    llm_timeout_seconds: float = 30.0
    workout_temperature: float = 0.4
    workout_max_tokens: int = 900
    diet_temperature: float = 0.4
    diet_max_tokens: int = 700


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
