"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - Empty vendor keys mean "not configured"; callers raise ServiceNotConfiguredError

Design Decisions:
    - Defaults provided for all non-secret settings so the API boots locally
      without Stripe/Resend/OpenAI credentials
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Firebase
    firebase_project_id: str | None = None
    firebase_credentials_path: str | None = None
    firebase_storage_bucket: str | None = None

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_currency: str = "usd"
    membership_tier_prices: dict[str, float] = {
        "basic": 10,
        "premium": 25,
        "champion": 50,
    }

    # Public site
    app_name: str = "Diaspora Connect"
    base_url: str = "http://localhost:3000"

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # Resend
    resend_api_key: str = ""
    email_from: str = "DC <onboarding@resend.dev>"

    # OpenAI
    openai_api_key: str = ""
    openai_max_retries: int = 3
    openai_timeout_seconds: int = 60
    openai_base_delay_ms: int = 1000
    openai_max_delay_ms: int = 60_000
    chat_model: str = "gpt-3.5-turbo"
    chat_temperature: float = 0.7
    chat_max_tokens: int = 500

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
