"""SQS client wrapper.

Typed boundary to the SQS API. botocore failures are translated into
TransportError (carrying the operation and service error code) and re-raised;
nothing is swallowed here.
"""

from collections.abc import Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from sqsredrive.core.errors import TransportError


class SQSClient:
    """Low-level SQS operations used by the provisioner and lifecycle controller."""

    def __init__(
        self,
        region: str | None = None,
        profile: str | None = None,
        endpoint_url: str | None = None,
        sqs=None,
    ):
        self.region = region
        if sqs is None:
            session = boto3.Session(profile_name=profile, region_name=region)
            sqs = session.client("sqs", endpoint_url=endpoint_url)
        self.sqs = sqs

    @classmethod
    def from_settings(cls, settings) -> "SQSClient":
        """Build a client from WorkflowSettings."""
        return cls(
            region=settings.aws_region,
            profile=settings.aws_profile,
            endpoint_url=settings.endpoint_url,
        )

    def _call(self, operation: str, **kwargs) -> dict:
        method = getattr(self.sqs, operation)
        try:
            return method(**kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            raise TransportError(operation, error.get("Message") or str(e), code=error.get("Code")) from e
        except BotoCoreError as e:
            raise TransportError(operation, str(e)) from e

    def create_queue(self, name: str, attributes: dict[str, str]) -> str:
        """
        Create a queue.

        Args:
            name: Queue name
            attributes: Queue attributes (stringified values)

        Returns:
            Queue URL

        Raises:
            TransportError: If the service rejects the request
        """
        response = self._call("create_queue", QueueName=name, Attributes=attributes)
        return response["QueueUrl"]

    def get_queue_url(self, name: str) -> str:
        response = self._call("get_queue_url", QueueName=name)
        return response["QueueUrl"]

    def get_queue_attributes(self, queue_url: str, names: list[str]) -> dict[str, str]:
        response = self._call("get_queue_attributes", QueueUrl=queue_url, AttributeNames=names)
        return response.get("Attributes", {})

    def set_queue_attributes(self, queue_url: str, attributes: dict[str, str]) -> None:
        self._call("set_queue_attributes", QueueUrl=queue_url, Attributes=attributes)

    def send_message(
        self,
        queue_url: str,
        body: str,
        delay_seconds: int = 0,
        group_id: str | None = None,
    ) -> str:
        """
        Send single message to queue.

        Args:
            queue_url: Target queue URL
            body: Message body
            delay_seconds: Seconds before the message becomes visible
            group_id: MessageGroupId (FIFO queues only)

        Returns:
            Message ID

        Raises:
            TransportError: If SQS send fails
        """
        params = {"QueueUrl": queue_url, "MessageBody": body}
        if group_id is not None:
            params["MessageGroupId"] = group_id
        else:
            params["DelaySeconds"] = delay_seconds
        response = self._call("send_message", **params)
        return response["MessageId"]

    def receive_messages(
        self,
        queue_url: str,
        max_messages: int = 10,
        wait_time_seconds: int | None = None,
    ) -> list[dict]:
        """
        Single (long) poll for messages.

        When wait_time_seconds is None the queue's ReceiveMessageWaitTimeSeconds applies.

        Returns:
            Raw message dicts (empty list when the poll times out)
        """
        params = {
            "QueueUrl": queue_url,
            "MaxNumberOfMessages": max_messages,
            "AttributeNames": ["All"],
        }
        if wait_time_seconds is not None:
            params["WaitTimeSeconds"] = wait_time_seconds
        response = self._call("receive_message", **params)
        return response.get("Messages", [])

    def delete_message(self, queue_url: str, receipt_handle: str) -> None:
        self._call("delete_message", QueueUrl=queue_url, ReceiptHandle=receipt_handle)

    def change_message_visibility(self, queue_url: str, receipt_handle: str, timeout: int) -> None:
        self._call(
            "change_message_visibility",
            QueueUrl=queue_url,
            ReceiptHandle=receipt_handle,
            VisibilityTimeout=timeout,
        )

    def list_queues(self, prefix: str | None = None) -> Iterator[str]:
        """
        Lazily iterate over queue URLs visible to the caller's credentials.

        Pages are fetched as the iterator is consumed.
        """
        params = {"QueueNamePrefix": prefix} if prefix else {}
        paginator = self.sqs.get_paginator("list_queues")
        try:
            for page in paginator.paginate(**params):
                yield from page.get("QueueUrls", [])
        except ClientError as e:
            error = e.response.get("Error", {})
            raise TransportError("list_queues", error.get("Message") or str(e), code=error.get("Code")) from e
        except BotoCoreError as e:
            raise TransportError("list_queues", str(e)) from e

    def delete_queue(self, queue_url: str) -> None:
        self._call("delete_queue", QueueUrl=queue_url)
