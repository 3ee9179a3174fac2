"""Shared pytest fixtures."""

import os

import pytest
from moto import mock_aws

# Fake credentials before any boto3 client is created
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

from sqsredrive.sqs.client import SQSClient  # noqa: E402
from sqsredrive.sqs.lifecycle import MessageLifecycle  # noqa: E402
from sqsredrive.sqs.provisioner import QueueProvisioner  # noqa: E402

REGION = "us-east-1"


@pytest.fixture
def sqs_client():
    """SQSClient backed by moto's in-process SQS."""
    with mock_aws():
        yield SQSClient(region=REGION)


@pytest.fixture
def provisioner(sqs_client):
    return QueueProvisioner(sqs_client)


@pytest.fixture
def lifecycle(sqs_client):
    return MessageLifecycle(sqs_client)


@pytest.fixture
def make_queue(provisioner):
    """Factory creating a fresh standard queue (no long poll, immediate redelivery by default)."""

    def _make(prefix: str = "test-queue", visibility_timeout: int = 0, receive_wait_time: int = 0):
        config = provisioner.new_config(
            provisioner.unique_name(prefix),
            visibility_timeout=visibility_timeout,
            receive_wait_time=receive_wait_time,
        )
        return provisioner.create_queue(config)

    return _make


@pytest.fixture
def queue_pair(provisioner, make_queue):
    """Primary queue and dead-letter queue, not yet linked."""
    queue = make_queue()
    dlq = provisioner.create_dead_letter_queue(provisioner.unique_name("deadletter-queue"))
    return queue, dlq


@pytest.fixture
def mock_sqs(mocker):
    """MagicMock boto3 SQS client wrapped in an SQSClient."""
    mock_client = mocker.MagicMock()
    return mock_client, SQSClient(sqs=mock_client)


@pytest.fixture(autouse=True)
def reset_env():
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
