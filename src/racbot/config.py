"""Configuration management for racbot."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from racbot.errors import ApiKeyNotConfiguredError, TransportNotConfiguredError

DEFAULT_PERSONA = (
    "You are Echo Whisperer, an expert at analyzing bitcoin predictions and providing insights to users."
)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="RACBOT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Policy engine
    api_key: str | None = Field(None, description="API key for the LLM provider")
    model: str = Field(default="openrouter:openai/gpt-4o-mini", description="provider:model for the policy engine")
    api_base: str | None = Field(None, description="Optional API base URL")
    max_tokens: int = Field(default=1024, description="Maximum tokens per policy response")
    model_timeout_seconds: float | None = Field(default=90, description="Timeout for one policy call in seconds")
    persona: str = Field(default=DEFAULT_PERSONA, description="Persona text handed to every new session")

    # Transport
    telegram_token: str | None = Field(None, description="Telegram bot token")
    telegram_allow_from: str = Field(default="", description="Comma separated user ids or usernames")

    # Action backends
    prediction_api_base: str = Field(default="https://echo.racfathers.io", description="Prediction service base URL")
    rug_pull_api_url: str = Field(
        default="https://echo.racfathers.io/rugpull", description="Rug pull analysis endpoint"
    )
    http_timeout_seconds: float = Field(default=20, description="Timeout for action HTTP calls in seconds")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    @property
    def allow_from(self) -> set[str]:
        return {item.strip() for item in self.telegram_allow_from.split(",") if item.strip()}

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ApiKeyNotConfiguredError("API key is not configured. Set RACBOT_API_KEY.")
        return self.api_key

    def require_telegram_token(self) -> str:
        if not self.telegram_token:
            raise TransportNotConfiguredError("Telegram token is not configured. Set RACBOT_TELEGRAM_TOKEN.")
        return self.telegram_token


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment and `.env`, applying explicit overrides."""

    settings = Settings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings
