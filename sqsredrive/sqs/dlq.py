"""Dead Letter Queue operations.

Errors from the lifecycle controller propagate; only per-message send
failures during a redrive are counted instead of raised.
"""

import logging

from sqsredrive.core.errors import AckError, SendError
from sqsredrive.core.models import Message, QueueHandle
from sqsredrive.sqs.lifecycle import MessageLifecycle

logger = logging.getLogger(__name__)


class DLQManager:
    """Inspect DLQ messages and move them back to a source queue."""

    def __init__(self, lifecycle: MessageLifecycle):
        self.lifecycle = lifecycle

    def peek(self, dlq: QueueHandle, max_messages: int = 10) -> list[Message]:
        """
        Receive messages from the DLQ without deleting them.

        They become visible again once the DLQ's visibility timeout expires.
        """
        messages = self.lifecycle.receive(dlq, wait_time_seconds=1, max_messages=max_messages)
        for message in messages:
            logger.info(f"DLQ message {message.message_id} (received {message.receive_count}x): {message.body}")
        return messages

    def redrive(
        self,
        dlq: QueueHandle,
        target: QueueHandle,
        max_messages: int | None = None,
    ) -> dict:
        """
        Move DLQ messages back to a target queue.

        Each message is sent to the target first and only then acknowledged on
        the DLQ, so a failed send leaves it in the DLQ.

        Args:
            dlq: Dead-letter queue to drain
            target: Queue to resubmit messages to
            max_messages: Maximum number of messages to move (None for all)

        Returns:
            Dictionary with 'moved', 'failed' and 'already_handled' counts
            (already_handled: resubmitted, but the DLQ handle had gone stale)

        Raises:
            TransportError: If receiving from or deleting on the DLQ fails
        """
        moved = 0
        failed = 0
        already_handled = 0

        while max_messages is None or moved + failed + already_handled < max_messages:
            handled = moved + failed + already_handled
            batch_size = 10 if max_messages is None else min(10, max_messages - handled)
            messages = self.lifecycle.receive(dlq, wait_time_seconds=1, max_messages=batch_size)
            if not messages:
                break

            batch_moved = 0
            for message in messages:
                try:
                    self.lifecycle.send(target, message.body)
                except SendError as e:
                    logger.warning(f"Could not resubmit DLQ message {message.message_id}: {e}")
                    failed += 1
                    continue

                batch_moved += 1
                try:
                    self.lifecycle.acknowledge(dlq, message)
                except AckError as e:
                    logger.warning(f"{e} - already handled elsewhere")
                    already_handled += 1
                    continue
                moved += 1

            logger.info(f"Redrive batch: {moved} moved, {failed} failed so far")

            if not batch_moved:
                # Every send in the batch failed; stop instead of polling again
                break

        logger.info(f"Total messages redriven from {dlq.name} to {target.name}: {moved}")
        return {"moved": moved, "failed": failed, "already_handled": already_handled}
