"""Message send / receive / acknowledge lifecycle.

Redelivery and redirection to the dead-letter queue are enforced by the
service: a message that is received but never acknowledged becomes visible
again after its visibility timeout, and once its receive count exceeds the
redrive policy's maxReceiveCount the service moves it to the DLQ. The client
only decides whether to acknowledge.
"""

import logging
from collections.abc import Callable

from sqsredrive.core.errors import AckError, SendError, TransportError
from sqsredrive.core.models import Message, ProcessResult, QueueHandle
from sqsredrive.sqs.client import SQSClient

logger = logging.getLogger(__name__)

MAX_BODY_BYTES = 256 * 1024
MAX_DELAY_SECONDS = 900
MAX_WAIT_SECONDS = 20
MAX_MESSAGES_PER_RECEIVE = 10
DEFAULT_GROUP_ID = "default"

# Error codes SQS returns for receipt handles that can no longer be used
STALE_HANDLE_CODES = {
    "ReceiptHandleIsInvalid",
    "InvalidParameterValue",
    "MessageNotInflight",
    "AWS.SimpleQueueService.MessageNotInflight",
}


class MessageLifecycle:
    """Sends, long-polls and acknowledges messages on a queue."""

    def __init__(self, client: SQSClient):
        self.client = client
        # Receipt handles acknowledged in the current pass, per queue url
        self._acknowledged: dict[str, set[str]] = {}

    def send(
        self,
        queue: QueueHandle,
        body: str,
        delay_seconds: int = 0,
        group_id: str | None = None,
    ) -> str:
        """
        Enqueue one message. delay_seconds=0 makes it visible immediately.

        Args:
            queue: Target queue
            body: Message body
            delay_seconds: Delivery delay, 0-900 (standard queues only)
            group_id: MessageGroupId for FIFO queues (defaults to "default")

        Returns:
            Message ID

        Raises:
            SendError: If the message is invalid or the service rejects it
        """
        if not body:
            raise SendError("Message body must not be empty")
        size = len(body.encode("utf-8"))
        if size > MAX_BODY_BYTES:
            raise SendError(f"Message body is {size} bytes, limit is {MAX_BODY_BYTES}")
        if not 0 <= delay_seconds <= MAX_DELAY_SECONDS:
            raise SendError(f"delay_seconds must be between 0 and {MAX_DELAY_SECONDS}, got {delay_seconds}")
        if queue.fifo and delay_seconds:
            raise SendError(f"FIFO queue {queue.name} does not support per-message delay")

        if queue.fifo:
            group_id = group_id or DEFAULT_GROUP_ID
        elif group_id is not None:
            raise SendError(f"group_id is only valid for FIFO queues, {queue.name} is standard")

        try:
            message_id = self.client.send_message(queue.url, body, delay_seconds, group_id)
        except TransportError as e:
            raise SendError(f"Could not send message to {queue.name}: {e}") from e

        logger.info(f"Sent message {message_id} to {queue.url}")
        return message_id

    def receive(
        self,
        queue: QueueHandle,
        wait_time_seconds: int | None = None,
        max_messages: int = MAX_MESSAGES_PER_RECEIVE,
    ) -> list[Message]:
        """
        One long poll. Returns as soon as any message is available, or an
        empty list once the wait time elapses.

        Each call is a new poll. A poll that delivers messages starts a new
        processing pass on that queue; an empty poll does not.

        Args:
            queue: Queue to poll
            wait_time_seconds: Poll duration 0-20; None uses the queue's
                ReceiveMessageWaitTimeSeconds
            max_messages: Messages to fetch, 1-10

        Raises:
            ValueError: If wait time or batch size is out of range
            TransportError: If the poll fails
        """
        if wait_time_seconds is not None and not 0 <= wait_time_seconds <= MAX_WAIT_SECONDS:
            raise ValueError(f"wait_time_seconds must be between 0 and {MAX_WAIT_SECONDS}")
        if not 1 <= max_messages <= MAX_MESSAGES_PER_RECEIVE:
            raise ValueError(f"max_messages must be between 1 and {MAX_MESSAGES_PER_RECEIVE}")

        raw_messages = self.client.receive_messages(queue.url, max_messages, wait_time_seconds)
        messages = [Message.from_sqs(raw) for raw in raw_messages]
        if messages:
            # A delivery starts a new pass on this queue; empty polls keep the current one
            self._acknowledged.pop(queue.url, None)
        logger.info(f"Received {len(messages)} message(s) from {queue.name}")
        return messages

    def acknowledge(self, queue: QueueHandle, message: Message) -> None:
        """
        Delete a processed message using its receipt handle.

        Raises:
            AckError: If the handle was already used or is stale (message
                already handled elsewhere)
            TransportError: On any other service failure
        """
        if message.receipt_handle in self._acknowledged.get(queue.url, set()):
            raise AckError(f"Message {message.message_id} was already acknowledged")

        try:
            self.client.delete_message(queue.url, message.receipt_handle)
        except TransportError as e:
            if e.code in STALE_HANDLE_CODES:
                raise AckError(f"Receipt handle for message {message.message_id} is no longer valid: {e}") from e
            raise

        self._acknowledged.setdefault(queue.url, set()).add(message.receipt_handle)
        logger.info(f"Message {message.message_id} deleted after processing")

    def release(self, queue: QueueHandle, message: Message) -> None:
        """Make a received message visible again immediately (no acknowledgement)."""
        try:
            self.client.change_message_visibility(queue.url, message.receipt_handle, 0)
        except TransportError as e:
            if e.code in STALE_HANDLE_CODES:
                raise AckError(f"Receipt handle for message {message.message_id} is no longer valid: {e}") from e
            raise

    def process(
        self,
        queue: QueueHandle,
        handler: Callable[[Message], None] | None = None,
        wait_time_seconds: int | None = None,
        max_messages: int = MAX_MESSAGES_PER_RECEIVE,
    ) -> ProcessResult:
        """
        Receive currently visible messages, run handler on each and
        acknowledge the ones it accepts.

        A handler exception leaves the message unacknowledged so the service
        redelivers it (and eventually redirects it to the DLQ).
        """
        result = ProcessResult()

        for message in self.receive(queue, wait_time_seconds, max_messages):
            result.received += 1
            logger.info(f"Message received: {message.body}")

            if handler is not None:
                try:
                    handler(message)
                except Exception as e:
                    logger.warning(f"Handler failed for message {message.message_id}, leaving for redelivery: {e}")
                    result.failed += 1
                    continue

            try:
                self.acknowledge(queue, message)
            except AckError as e:
                logger.warning(f"{e} - treating as handled elsewhere")
                result.already_handled += 1
                continue

            result.acknowledged += 1
            result.bodies.append(message.body)

        return result
