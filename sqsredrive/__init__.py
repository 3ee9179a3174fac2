"""sqsredrive - SQS queue provisioning, dead-letter redrive and message lifecycle."""

__version__ = "1.0.0"

from sqsredrive.core.config import settings
from sqsredrive.core.models import Message, QueueConfig, QueueHandle, RedrivePolicy

__all__ = ["settings", "Message", "QueueConfig", "QueueHandle", "RedrivePolicy", "__version__"]
