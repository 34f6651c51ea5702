"""Application settings using Pydantic for environment-based configuration."""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STRIPE_KEY_PREFIXES = ("sk_test_", "sk_live_", "rk_test_", "rk_live_")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Stripe Configuration
    stripe_secret_key: str = Field(..., description="Stripe secret API key (sk_test_...)")
    stripe_api_version: Optional[str] = Field(
        default=None, description="Pinned Stripe API version (account default if unset)"
    )

    # Airtable Configuration
    airtable_api_key: str = Field(..., description="Airtable personal access token")
    airtable_base_id: str = Field(default="appUNIsu8KgvOlmi0", description="Airtable base ID")
    airtable_table_name: str = Field(default="Failed Payments", description="Airtable table name")
    airtable_api_url: str = Field(
        default="https://api.airtable.com/v0", description="Airtable REST API root"
    )

    # Mail Configuration
    gmail_user: str = Field(..., description="Mail account used to send alerts")
    gmail_app_password: str = Field(..., description="Mail account app password")
    smtp_host: str = Field(default="smtp.gmail.com", description="SMTP host")
    smtp_port: int = Field(default=465, description="SMTP port (implicit TLS)")
    alert_email: Optional[str] = Field(
        default=None, description="Alert recipient (defaults to the mail account)"
    )

    # Application Configuration
    app_name: str = Field(default="payment-failure-monitor", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="INFO", description="Logging level")
    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=3000, description="API port")
    activity_log_capacity: int = Field(
        default=100, gt=0, description="Activity log entries kept in memory"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("stripe_secret_key")
    @classmethod
    def validate_stripe_key(cls, v: str) -> str:
        """Validate the Stripe secret key prefix."""
        if not v.startswith(STRIPE_KEY_PREFIXES):
            raise ValueError(
                "Invalid Stripe secret key format. Must start with one of: "
                + ", ".join(STRIPE_KEY_PREFIXES)
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @property
    def alert_recipient(self) -> str:
        """Address that receives failure alerts."""
        return self.alert_email or self.gmail_user


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once at startup; there is no hot reload.
    """
    return Settings()
