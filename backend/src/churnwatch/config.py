"""Application configuration using pydantic-settings."""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Dashboard client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHURNWATCH_",
        case_sensitive=False,
    )

    # Analytics API
    api_base_url: str = Field(
        default="http://localhost:8000/api/churn",
        description="Base URL of the churn analytics API",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to every request against the analytics API",
    )

    # Queue retrieval
    page_size: int = Field(default=50, gt=0, description="Rows per page in single-page queue mode")
    queue_batch_size: int = Field(default=100, gt=0, description="Rows per request in the batched queue walk")
    queue_cap: int = Field(default=1000, gt=0, description="Safety bound on rows loaded by the batched walk")
    debounce_seconds: float = Field(
        default=0.35,
        ge=0,
        description="Delay before a filter change triggers a queue fetch",
    )

    # Application Configuration
    app_env: str = Field(default="development", description="Application environment (development/staging/production)")
    log_level: str = Field(default="INFO", description="Logging level")

    # Presentation
    display_currency: str = Field(default="BRL", description="Currency used when formatting MRR for display")


# Global settings instance
settings = Settings()
