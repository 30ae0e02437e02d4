"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Configures all application settings from environment variables with
validation and defaults. Supports .env files for local development.
"""

import re
from typing import TYPE_CHECKING

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from webhook_relay.delivery.retry import RetryPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Webhook Relay", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    # AWS settings
    aws_region: str = Field(default="us-east-1", description="AWS region")
    stage: str = Field(default="dev", description="Deployment stage")

    # DynamoDB settings
    events_table_name: str = Field(
        default="webhook-relay-events",
        description="Name of the DynamoDB webhook events table"
    )
    endpoints_table_name: str = Field(
        default="webhook-relay-endpoints",
        description="Name of the DynamoDB webhook endpoints table"
    )

    # SQS settings
    delivery_queue_url: str = Field(
        default="",
        description="URL of the SQS queue feeding the delivery worker"
    )

    # Delivery settings
    delivery_timeout: int = Field(
        default=30,
        ge=1,
        le=30,
        description="Hard HTTP timeout in seconds for one delivery attempt"
    )
    user_agent: str = Field(
        default="webhook_relay/1.0",
        min_length=1,
        description="User-Agent header sent with every delivery"
    )

    # Retry settings
    max_attempts: int = Field(
        default=10,
        ge=1,
        description="Delivery attempts before giving up on an event"
    )
    retry_jitter_min: int = Field(
        default=30,
        ge=0,
        description="Lower bound (inclusive) of the retry jitter in seconds"
    )
    retry_jitter_max: int = Field(
        default=600,
        ge=1,
        description="Upper bound (exclusive) of the retry jitter in seconds"
    )

    # Metrics settings
    metrics_enabled: bool = Field(default=True, description="Publish CloudWatch metrics")
    metrics_namespace: str = Field(default="WebhookRelay", description="CloudWatch namespace")

    @field_validator('events_table_name', 'endpoints_table_name')
    @classmethod
    def validate_table_names(cls, v: str) -> str:
        """Validate DynamoDB table names."""
        if not v or not isinstance(v, str):
            raise ValueError("Table name must be a non-empty string")

        # Allow alphanumeric, hyphens, underscores
        if not re.match(r'^[a-zA-Z0-9_-]+$', v):
            raise ValueError(
                "Table name must contain only letters, numbers, hyphens, and underscores"
            )

        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @model_validator(mode='after')
    def validate_jitter_range(self) -> 'Settings':
        if self.retry_jitter_min >= self.retry_jitter_max:
            raise ValueError("retry_jitter_min must be lower than retry_jitter_max")
        return self

    def retry_policy(self) -> "RetryPolicy":
        """Build the retry policy handed to the delivery scheduler."""
        from webhook_relay.delivery.retry import RetryPolicy

        return RetryPolicy(
            max_attempts=self.max_attempts,
            jitter_min=self.retry_jitter_min,
            jitter_max=self.retry_jitter_max
        )


# Global settings instance
settings = Settings()
