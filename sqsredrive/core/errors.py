"""Error taxonomy for queue provisioning and message lifecycle failures.

Provisioner and lifecycle operations raise these and never catch them;
the workflow orchestrator is the single place they are handled.
"""


class QueueWorkflowError(Exception):
    """Base class for every error raised by sqsredrive."""


class TransportError(QueueWorkflowError):
    """Network or service fault reported by the SQS API."""

    def __init__(self, operation: str, message: str, code: str | None = None):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.code = code


class ProvisioningError(QueueWorkflowError):
    """Queue configuration was invalid or the service rejected queue creation."""


class PolicyAttachmentError(QueueWorkflowError):
    """DLQ ARN resolution or redrive policy installation failed."""


class SendError(QueueWorkflowError):
    """Message could not be enqueued (transport failure or invalid message)."""


class AckError(QueueWorkflowError):
    """Receipt handle is stale or was already used.

    Recoverable: the message has been handled elsewhere.
    """
