"""Pydantic models - Single source of truth for data structures.

NO try-catch blocks - Pydantic validates automatically and raises ValidationError.
"""

import json

from pydantic import BaseModel, ConfigDict, Field, model_validator

QUEUE_NAME_PATTERN = r"^(?:[A-Za-z0-9_-]{1,80}|[A-Za-z0-9_-]{1,75}\.fifo)$"
FIFO_SUFFIX = ".fifo"


class QueueConfig(BaseModel):
    """Attributes submitted when creating a queue."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=QUEUE_NAME_PATTERN, description="Queue name, unique per account and region")
    visibility_timeout: int = Field(default=30, ge=0, le=43200, description="Seconds a received message stays hidden")
    receive_wait_time: int = Field(default=0, ge=0, le=20, description="Long-poll duration in seconds")
    fifo: bool = Field(default=False, description="Create an ordered (FIFO) queue")

    @model_validator(mode="after")
    def check_fifo_suffix(self) -> "QueueConfig":
        if self.fifo != self.name.endswith(FIFO_SUFFIX):
            raise ValueError(f"FIFO queue names must end with '{FIFO_SUFFIX}' (and only FIFO names may)")
        return self

    def to_attributes(self) -> dict[str, str]:
        """Render the config as SQS queue attributes."""
        attributes = {
            "VisibilityTimeout": str(self.visibility_timeout),
            "ReceiveMessageWaitTimeSeconds": str(self.receive_wait_time),
        }
        if self.fifo:
            attributes["FifoQueue"] = "true"
            attributes["ContentBasedDeduplication"] = "true"
        return attributes


class QueueHandle(BaseModel):
    """Queue identity as resolved from the service."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    arn: str

    @property
    def fifo(self) -> bool:
        return self.name.endswith(FIFO_SUFFIX)


class RedrivePolicy(BaseModel):
    """Edge from a source queue to its dead-letter queue."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dead_letter_target_arn: str = Field(..., min_length=1, alias="deadLetterTargetArn")
    max_receive_count: int = Field(..., ge=1, le=1000, alias="maxReceiveCount")

    def to_attribute(self) -> str:
        """Serialize to the RedrivePolicy attribute value (count sent as a string)."""
        return json.dumps(
            {
                "maxReceiveCount": str(self.max_receive_count),
                "deadLetterTargetArn": self.dead_letter_target_arn,
            }
        )

    @classmethod
    def from_attribute(cls, raw: str) -> "RedrivePolicy":
        return cls.model_validate_json(raw)


class Message(BaseModel):
    """One delivery of a message. The receipt handle is only valid for this delivery."""

    body: str
    receipt_handle: str
    message_id: str = ""
    receive_count: int = Field(default=0, ge=0)

    @classmethod
    def from_sqs(cls, raw: dict) -> "Message":
        """Build from a ReceiveMessage response entry."""
        attributes = raw.get("Attributes", {})
        return cls(
            body=raw.get("Body", ""),
            receipt_handle=raw["ReceiptHandle"],
            message_id=raw.get("MessageId", ""),
            receive_count=int(attributes.get("ApproximateReceiveCount", 0)),
        )


class ProcessResult(BaseModel):
    """Outcome of one receive-and-acknowledge pass."""

    received: int = 0
    acknowledged: int = 0
    failed: int = 0
    already_handled: int = 0
    bodies: list[str] = Field(default_factory=list)


class QueueStats(BaseModel):
    """Approximate message counts for a queue."""

    available: int = 0
    in_flight: int = 0
    delayed: int = 0

    @property
    def total(self) -> int:
        return self.available + self.in_flight + self.delayed


class WorkflowReport(BaseModel):
    """Result of one orchestrated workflow run."""

    status: str = "pending"
    queue_url: str | None = None
    dlq_url: str | None = None
    listed_queues: list[str] = Field(default_factory=list)
    sent_message_id: str | None = None
    received_bodies: list[str] = Field(default_factory=list)
    error: str | None = None
    cleanup_failures: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "ok"
