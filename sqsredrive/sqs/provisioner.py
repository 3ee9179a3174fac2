"""Queue provisioning and redrive policy wiring.

Failures propagate as ProvisioningError / PolicyAttachmentError. Only
delete_queue swallows errors (logged) so teardown of one queue never blocks
teardown of the other.
"""

import logging
import uuid
from collections.abc import Iterator

from pydantic import ValidationError

from sqsredrive.core.errors import PolicyAttachmentError, ProvisioningError, TransportError
from sqsredrive.core.models import FIFO_SUFFIX, QueueConfig, QueueHandle, RedrivePolicy
from sqsredrive.sqs.client import SQSClient

logger = logging.getLogger(__name__)


class QueueProvisioner:
    """Creates queues, links dead-letter queues and tears them down."""

    def __init__(self, client: SQSClient):
        self.client = client

    @staticmethod
    def unique_name(prefix: str, fifo: bool = False) -> str:
        """Collision-resistant queue name: <prefix>-<uuid4>[.fifo]."""
        name = f"{prefix}-{uuid.uuid4()}"
        return name + FIFO_SUFFIX if fifo else name

    @staticmethod
    def new_config(
        name: str,
        visibility_timeout: int = 30,
        receive_wait_time: int = 0,
        fifo: bool = False,
    ) -> QueueConfig:
        """
        Build a QueueConfig before any network call.

        Out-of-range values are rejected, never clamped.

        Raises:
            ProvisioningError: If any value is invalid
        """
        try:
            return QueueConfig(
                name=name,
                visibility_timeout=visibility_timeout,
                receive_wait_time=receive_wait_time,
                fifo=fifo,
            )
        except ValidationError as e:
            raise ProvisioningError(f"Invalid queue configuration for {name!r}: {e}") from e

    def create_queue(self, config: QueueConfig) -> QueueHandle:
        """
        Create a queue and resolve its ARN.

        Args:
            config: Validated queue configuration (use a fresh name per run)

        Returns:
            QueueHandle with url and arn

        Raises:
            ProvisioningError: If the service rejects the name or attributes
        """
        logger.info(f"Creating queue {config.name}")
        try:
            url = self.client.create_queue(config.name, config.to_attributes())
            arn = self._require_arn(url, config.name)
        except TransportError as e:
            raise ProvisioningError(f"Could not create queue {config.name}: {e}") from e

        logger.info(f"Queue created: {url}")
        return QueueHandle(name=config.name, url=url, arn=arn)

    def create_dead_letter_queue(self, name: str, fifo: bool = False) -> QueueHandle:
        """
        Create an unconfigured queue to receive redirected messages.

        The caller must create it in the same account/region and of the same
        type (standard or FIFO) as the source queue it will serve.

        Raises:
            ProvisioningError: If the name is invalid or creation fails
        """
        config = self.new_config(name, fifo=fifo)
        attributes = {"FifoQueue": "true"} if fifo else {}
        logger.info(f"Creating dead-letter queue {name}")
        try:
            url = self.client.create_queue(name, attributes)
            arn = self._require_arn(url, name)
        except TransportError as e:
            raise ProvisioningError(f"Could not create dead-letter queue {config.name}: {e}") from e

        logger.info(f"Dead-letter queue created: {url}")
        return QueueHandle(name=name, url=url, arn=arn)

    def resolve(self, name: str) -> QueueHandle:
        """Look up a queue's url and arn from the service."""
        try:
            url = self.client.get_queue_url(name)
            arn = self._require_arn(url, name)
        except TransportError as e:
            raise ProvisioningError(f"Could not resolve queue {name}: {e}") from e
        return QueueHandle(name=name, url=url, arn=arn)

    def attach_redrive_policy(
        self,
        source: QueueHandle,
        dlq: QueueHandle,
        max_receive_count: int,
    ) -> RedrivePolicy:
        """
        Install a redrive policy on source pointing at dlq.

        The DLQ ARN is looked up from the service here, after the DLQ exists.
        Not retried on failure.

        Returns:
            The installed RedrivePolicy

        Raises:
            PolicyAttachmentError: On type mismatch, invalid count, ARN lookup
                or attribute-set failure
        """
        if source.fifo != dlq.fifo:
            raise PolicyAttachmentError(
                f"Dead-letter queue {dlq.name} must be the same type (standard/FIFO) as {source.name}"
            )

        try:
            dlq_arn = self._queue_arn(dlq.url)
        except TransportError as e:
            raise PolicyAttachmentError(f"Could not resolve ARN of dead-letter queue {dlq.name}: {e}") from e
        if not dlq_arn:
            raise PolicyAttachmentError(f"Dead-letter queue {dlq.name} has no QueueArn")
        logger.info(f"Dead-letter queue ARN: {dlq_arn}")

        try:
            policy = RedrivePolicy(dead_letter_target_arn=dlq_arn, max_receive_count=max_receive_count)
        except ValidationError as e:
            raise PolicyAttachmentError(f"Invalid redrive policy: {e}") from e

        try:
            self.client.set_queue_attributes(source.url, {"RedrivePolicy": policy.to_attribute()})
        except TransportError as e:
            raise PolicyAttachmentError(f"Could not set redrive policy on {source.name}: {e}") from e

        logger.info(
            f"Dead-letter queue configured for {source.name} (maxReceiveCount={policy.max_receive_count})"
        )
        return policy

    def get_redrive_policy(self, handle: QueueHandle) -> RedrivePolicy | None:
        """Read the redrive policy currently installed on a queue."""
        attributes = self.client.get_queue_attributes(handle.url, ["RedrivePolicy"])
        raw = attributes.get("RedrivePolicy")
        return RedrivePolicy.from_attribute(raw) if raw else None

    def list_queues(self, prefix: str | None = None) -> Iterator[str]:
        """Lazy, single-pass iteration over visible queue URLs."""
        return self.client.list_queues(prefix)

    def delete_queue(self, handle: QueueHandle) -> bool:
        """
        Best-effort queue deletion.

        Returns:
            True if deleted, False if the service refused (error is logged)
        """
        try:
            self.client.delete_queue(handle.url)
        except TransportError as e:
            logger.warning(f"Failed to delete queue {handle.name}: {e}")
            return False
        logger.info(f"Queue {handle.name} deleted")
        return True

    def _queue_arn(self, queue_url: str) -> str:
        attributes = self.client.get_queue_attributes(queue_url, ["QueueArn"])
        return attributes.get("QueueArn", "")

    def _require_arn(self, queue_url: str, name: str) -> str:
        arn = self._queue_arn(queue_url)
        if not arn:
            raise ProvisioningError(f"Queue {name} has no QueueArn")
        return arn
