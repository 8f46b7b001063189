from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkflowDefaults(BaseSettings):
    """Settings a process needs without provider credentials (the trigger)."""

    DELAY_THRESHOLD_MINUTES: int = Field(30, ge=0)
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


class Settings(WorkflowDefaults):
    """Process-wide settings, read from the environment (and `.env`)."""

    # Provider credentials
    OPENAI_API_KEY: str = Field(..., min_length=1, description="Generation provider key")
    SENDGRID_API_KEY: str = Field(..., min_length=1, description="Notification provider key")
    ORS_API_KEY: str = Field(..., min_length=1, description="OpenRouteService key")

    # Notification
    SENDGRID_FROM_EMAIL: str = "noreply@example.com"
    NOTIFICATION_SUBJECT: str = "Freight Delivery Delay Notice"

    # Message generation
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.7
    MESSAGE_SIGNATURE: str = "The Dispatch Team"

    # Retry budget inside each activity
    RETRY_MAX_ATTEMPTS: int = Field(3, ge=1)
    RETRY_BASE_DELAY_MS: int = Field(500, ge=0)

    HTTP_TIMEOUT_SECONDS: float = Field(10.0, gt=0)

    @property
    def retry_base_delay_seconds(self) -> float:
        return self.RETRY_BASE_DELAY_MS / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and validate settings once; raises if a credential is missing."""
    return Settings()


@lru_cache(maxsize=1)
def get_workflow_defaults() -> WorkflowDefaults:
    """Credential-free subset of the settings."""
    return WorkflowDefaults()
