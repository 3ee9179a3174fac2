"""SQS operations for sqsredrive."""

from sqsredrive.sqs.client import SQSClient
from sqsredrive.sqs.dlq import DLQManager
from sqsredrive.sqs.lifecycle import MessageLifecycle
from sqsredrive.sqs.monitor import QueueMonitor
from sqsredrive.sqs.provisioner import QueueProvisioner

__all__ = ["SQSClient", "QueueProvisioner", "MessageLifecycle", "QueueMonitor", "DLQManager"]
