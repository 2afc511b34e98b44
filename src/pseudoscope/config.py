from __future__ import annotations

from pydantic import Field, SecretStr, conint, confloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_MODEL,
    DEFAULT_REPORTER,
    OPENAI_CHAT_COMPLETIONS_URL,
    PLACEHOLDER_API_KEY,
    Limits,
)
from .models import RetryPolicy


class AnalyzerConfig(BaseSettings):
    """Configuration loaded from PSEUDOSCOPE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PSEUDOSCOPE_",
        frozen=True,
        extra="ignore",
        protected_namespaces=(),  # Allow the 'model' field
    )

    openai_api_key: SecretStr = Field(
        default="",
        description="OpenAI API key used as the bearer token for chat completions.",
    )
    model: str = Field(default=DEFAULT_MODEL, description="Chat completions model id")
    api_url: str = Field(default=OPENAI_CHAT_COMPLETIONS_URL)

    max_total_length: conint(ge=1) = Field(
        default=Limits.MAX_TOTAL_LENGTH,
        description="Initial character budget shared by request and response text",
    )
    max_retries: conint(ge=1) = Field(default=Limits.MAX_RETRIES)
    retry_delay_seconds: confloat(ge=0) = Field(default=Limits.RETRY_DELAY_SECONDS)
    request_timeout_seconds: conint(ge=1) = Field(default=Limits.REQUEST_TIMEOUT_SECONDS)

    reporter: str = Field(default=DEFAULT_REPORTER, description="Reporter name stamped on findings")

    @field_validator("model", "api_url", "reporter", mode="before")
    @classmethod
    def _strip(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip()
        return value

    def has_api_key(self) -> bool:
        """False for an empty key or the unedited placeholder."""
        key = self.openai_api_key.get_secret_value().strip()
        return bool(key) and key != PLACEHOLDER_API_KEY

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            retry_delay_seconds=self.retry_delay_seconds,
            initial_budget=self.max_total_length,
        )
