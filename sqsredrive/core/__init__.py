"""Core models, errors and configuration for sqsredrive."""

from sqsredrive.core.config import settings
from sqsredrive.core.models import Message, QueueConfig, QueueHandle, RedrivePolicy

__all__ = ["settings", "Message", "QueueConfig", "QueueHandle", "RedrivePolicy"]
