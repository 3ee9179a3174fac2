"""Queue monitoring."""

from sqsredrive.core.models import QueueHandle, QueueStats
from sqsredrive.sqs.client import SQSClient

COUNT_ATTRIBUTES = [
    "ApproximateNumberOfMessages",
    "ApproximateNumberOfMessagesNotVisible",
    "ApproximateNumberOfMessagesDelayed",
]


class QueueMonitor:
    """Monitor queue status."""

    def __init__(self, client: SQSClient):
        self.client = client

    def get_stats(self, queue: QueueHandle) -> QueueStats:
        """
        Get approximate message counts for one queue.

        Raises:
            TransportError: If get attributes fails
        """
        attrs = self.client.get_queue_attributes(queue.url, COUNT_ATTRIBUTES)
        return QueueStats(
            available=int(attrs.get("ApproximateNumberOfMessages", 0)),
            in_flight=int(attrs.get("ApproximateNumberOfMessagesNotVisible", 0)),
            delayed=int(attrs.get("ApproximateNumberOfMessagesDelayed", 0)),
        )

    def get_status(self, queue: QueueHandle, dlq: QueueHandle | None = None) -> dict:
        """
        Get current queue status.

        Returns:
            Dictionary with main_queue and dlq statistics
        """
        return {
            "main_queue": self.get_stats(queue),
            "dlq": self.get_stats(dlq) if dlq else None,
        }
