"""Configuration management using Pydantic Settings.

NO try-catch blocks - let Pydantic raise ValidationError on bad env values.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkflowSettings(BaseSettings):
    """Workflow configuration - loads from environment variables or .env file."""

    # AWS
    aws_region: str = Field(default="us-east-1", description="AWS region")
    aws_profile: str | None = Field(default=None, description="AWS profile name")
    endpoint_url: str | None = Field(default=None, description="Override SQS endpoint (e.g. LocalStack)")

    # Queue naming
    queue_name_prefix: str = Field(default="test-queue", description="Prefix for the primary queue name")
    dlq_name_prefix: str = Field(default="deadletter-queue", description="Prefix for the dead-letter queue name")

    # Queue attributes
    visibility_timeout: int = Field(default=10, description="Primary queue visibility timeout (seconds)")
    receive_wait_time: int = Field(default=20, description="Long-poll wait time (seconds, 0-20)")
    max_receive_count: int = Field(default=5, description="Deliveries before a message moves to the DLQ")

    # Lifecycle
    max_messages: int = Field(default=10, ge=1, le=10, description="Messages fetched per receive")
    message_body: str = Field(default="hello world", description="Body of the demonstration message")
    list_queues: bool = Field(default=True, description="List visible queues during the workflow")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Singleton instance
settings = WorkflowSettings()
