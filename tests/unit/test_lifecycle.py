"""Tests for sqsredrive/sqs/lifecycle.py."""

import time
from typing import get_type_hints

import pytest
from botocore.exceptions import ClientError

from sqsredrive.core.errors import AckError, SendError, TransportError
from sqsredrive.core.models import Message, QueueHandle
from sqsredrive.sqs.client import SQSClient
from sqsredrive.sqs.lifecycle import MAX_BODY_BYTES, MessageLifecycle

STANDARD = QueueHandle(name="q", url="https://q/q", arn="arn:q")
FIFO = QueueHandle(name="q.fifo", url="https://q/q.fifo", arn="arn:q.fifo")


def receive_after_timeout(lifecycle, queue):
    """Receive once the (zero-second) visibility timeout has lapsed."""
    time.sleep(0.01)
    return lifecycle.receive(queue)


class TestSend:
    """Tests for MessageLifecycle.send validation."""

    def test_oversized_body_rejected(self, mock_sqs):
        mock_client, client = mock_sqs

        with pytest.raises(SendError, match="limit"):
            MessageLifecycle(client).send(STANDARD, "x" * (MAX_BODY_BYTES + 1))
        mock_client.send_message.assert_not_called()

    def test_empty_body_rejected(self, mock_sqs):
        _, client = mock_sqs
        with pytest.raises(SendError):
            MessageLifecycle(client).send(STANDARD, "")

    @pytest.mark.parametrize("delay", [-1, 901])
    def test_delay_out_of_range(self, mock_sqs, delay):
        _, client = mock_sqs
        with pytest.raises(SendError):
            MessageLifecycle(client).send(STANDARD, "body", delay_seconds=delay)

    def test_fifo_rejects_delay(self, mock_sqs):
        _, client = mock_sqs
        with pytest.raises(SendError, match="FIFO"):
            MessageLifecycle(client).send(FIFO, "body", delay_seconds=5)

    def test_fifo_gets_default_group(self, mock_sqs):
        mock_client, client = mock_sqs
        mock_client.send_message.return_value = {"MessageId": "m-1"}

        MessageLifecycle(client).send(FIFO, "body")
        assert mock_client.send_message.call_args.kwargs["MessageGroupId"] == "default"

    def test_group_id_on_standard_queue_rejected(self, mock_sqs):
        _, client = mock_sqs
        with pytest.raises(SendError):
            MessageLifecycle(client).send(STANDARD, "body", group_id="g")

    def test_transport_failure_raises_send_error(self, mock_sqs):
        """Test send failures are not retried."""
        mock_client, client = mock_sqs
        mock_client.send_message.side_effect = ClientError(
            {"Error": {"Code": "InternalError", "Message": "boom"}}, "SendMessage"
        )

        with pytest.raises(SendError):
            MessageLifecycle(client).send(STANDARD, "body")
        assert mock_client.send_message.call_count == 1


class TestReceive:
    """Tests for MessageLifecycle.receive."""

    @pytest.mark.parametrize("wait", [-1, 21])
    def test_invalid_wait_time(self, mock_sqs, wait):
        _, client = mock_sqs
        with pytest.raises(ValueError):
            MessageLifecycle(client).receive(STANDARD, wait_time_seconds=wait)

    @pytest.mark.parametrize("count", [0, 11])
    def test_invalid_batch_size(self, mock_sqs, count):
        _, client = mock_sqs
        with pytest.raises(ValueError):
            MessageLifecycle(client).receive(STANDARD, max_messages=count)

    def test_empty_queue_returns_empty_list(self, lifecycle, make_queue):
        """Test a poll timeout is not an error."""
        assert lifecycle.receive(make_queue()) == []

    def test_transport_failure_propagates(self, mock_sqs):
        mock_client, client = mock_sqs
        mock_client.receive_message.side_effect = ClientError(
            {"Error": {"Code": "AWS.SimpleQueueService.NonExistentQueue", "Message": "gone"}}, "ReceiveMessage"
        )

        with pytest.raises(TransportError):
            MessageLifecycle(client).receive(STANDARD)


class TestRoundTrip:
    """Tests for send → receive → acknowledge."""

    def test_send_receive_ack(self, lifecycle, make_queue):
        """Test a message is delivered once and never again after ack."""
        queue = make_queue(visibility_timeout=10)
        lifecycle.send(queue, "payload-B")

        messages = lifecycle.receive(queue)
        assert [m.body for m in messages] == ["payload-B"]
        assert messages[0].receive_count == 1

        lifecycle.acknowledge(queue, messages[0])
        assert lifecycle.receive(queue) == []

    def test_acked_message_not_redelivered_after_timeout(self, lifecycle, make_queue):
        queue = make_queue(visibility_timeout=0)
        lifecycle.send(queue, "once")

        [message] = lifecycle.receive(queue)
        lifecycle.acknowledge(queue, message)

        assert receive_after_timeout(lifecycle, queue) == []

    def test_ack_twice_raises(self, lifecycle, make_queue):
        """Test the second acknowledgement with the same handle fails."""
        queue = make_queue(visibility_timeout=10)
        lifecycle.send(queue, "hello")
        [message] = lifecycle.receive(queue)

        lifecycle.acknowledge(queue, message)
        with pytest.raises(AckError):
            lifecycle.acknowledge(queue, message)

    def test_ack_twice_after_polling_another_queue(self, lifecycle, make_queue):
        """Test a receive on a different queue does not forget acknowledged handles."""
        queue = make_queue(visibility_timeout=10)
        other = make_queue(prefix="other-queue")
        lifecycle.send(queue, "hello")
        lifecycle.send(other, "unrelated")
        [message] = lifecycle.receive(queue)
        lifecycle.acknowledge(queue, message)

        assert [m.body for m in lifecycle.receive(other)] == ["unrelated"]
        with pytest.raises(AckError):
            lifecycle.acknowledge(queue, message)

    def test_ack_twice_after_empty_poll(self, lifecycle, make_queue):
        """Test an empty re-poll of the same queue keeps the current pass."""
        queue = make_queue(visibility_timeout=10)
        lifecycle.send(queue, "hello")
        [message] = lifecycle.receive(queue)
        lifecycle.acknowledge(queue, message)

        assert lifecycle.receive(queue) == []
        with pytest.raises(AckError):
            lifecycle.acknowledge(queue, message)

    def test_stale_handle_raises_ack_error(self, mock_sqs):
        mock_client, client = mock_sqs
        mock_client.delete_message.side_effect = ClientError(
            {"Error": {"Code": "ReceiptHandleIsInvalid", "Message": "invalid"}}, "DeleteMessage"
        )
        message = Message(body="b", receipt_handle="stale")

        with pytest.raises(AckError):
            MessageLifecycle(client).acknowledge(STANDARD, message)

    def test_other_delete_failure_is_transport_error(self, mock_sqs):
        mock_client, client = mock_sqs
        mock_client.delete_message.side_effect = ClientError(
            {"Error": {"Code": "InternalError", "Message": "boom"}}, "DeleteMessage"
        )

        with pytest.raises(TransportError) as exc_info:
            MessageLifecycle(client).acknowledge(STANDARD, Message(body="b", receipt_handle="rh"))
        assert not isinstance(exc_info.value, AckError)

    def test_release_makes_message_visible(self, lifecycle, make_queue):
        queue = make_queue(visibility_timeout=30)
        lifecycle.send(queue, "retry-me")
        [message] = lifecycle.receive(queue)
        assert lifecycle.receive(queue) == []

        lifecycle.release(queue, message)

        [again] = receive_after_timeout(lifecycle, queue)
        assert again.body == "retry-me"
        assert again.receive_count == 2


class TestProcess:
    """Tests for a receive-and-acknowledge pass."""

    def test_process_acknowledges_all(self, lifecycle, make_queue):
        queue = make_queue(visibility_timeout=10)
        for body in ("a", "b", "c"):
            lifecycle.send(queue, body)

        result = lifecycle.process(queue)

        assert result.received == 3
        assert result.acknowledged == 3
        assert sorted(result.bodies) == ["a", "b", "c"]
        assert lifecycle.receive(queue) == []

    def test_handler_failure_leaves_message(self, lifecycle, make_queue):
        """Test a failing handler leaves the message for redelivery."""
        queue = make_queue(visibility_timeout=0)
        lifecycle.send(queue, "poison")

        def handler(message):
            raise RuntimeError("cannot process")

        result = lifecycle.process(queue, handler=handler)

        assert result.received == 1
        assert result.failed == 1
        assert result.acknowledged == 0
        assert [m.body for m in receive_after_timeout(lifecycle, queue)] == ["poison"]

    def test_ack_error_counted_as_already_handled(self, mock_sqs):
        mock_client, client = mock_sqs
        mock_client.receive_message.return_value = {
            "Messages": [{"MessageId": "m-1", "ReceiptHandle": "rh", "Body": "b"}]
        }
        mock_client.delete_message.side_effect = ClientError(
            {"Error": {"Code": "ReceiptHandleIsInvalid", "Message": "invalid"}}, "DeleteMessage"
        )

        result = MessageLifecycle(client).process(STANDARD)

        assert result.already_handled == 1
        assert result.acknowledged == 0


class TestScenarios:
    """End-to-end lifecycle scenarios against moto."""

    def test_hello_world_scenario(self, provisioner, lifecycle):
        """Test provision, link, send, receive, ack, empty receive, teardown."""
        queue = provisioner.create_queue(provisioner.new_config("Q", visibility_timeout=10, receive_wait_time=0))
        dlq = provisioner.create_dead_letter_queue("D")
        provisioner.attach_redrive_policy(queue, dlq, 5)

        lifecycle.send(queue, "hello world")

        messages = lifecycle.receive(queue)
        assert len(messages) == 1
        assert messages[0].body == "hello world"

        lifecycle.acknowledge(queue, messages[0])
        assert lifecycle.receive(queue) == []

        assert provisioner.delete_queue(queue) is True
        assert provisioner.delete_queue(dlq) is True

    def test_unacknowledged_message_moves_to_dlq(self, provisioner, lifecycle, queue_pair):
        """Test a message never acknowledged ends up in the DLQ after maxReceiveCount deliveries."""
        queue, dlq = queue_pair
        max_receive_count = 3
        provisioner.attach_redrive_policy(queue, dlq, max_receive_count)
        lifecycle.send(queue, "never-acked")

        deliveries = 0
        for _ in range(max_receive_count + 2):
            deliveries += len(receive_after_timeout(lifecycle, queue))

        assert deliveries == max_receive_count
        assert receive_after_timeout(lifecycle, queue) == []

        [redirected] = lifecycle.receive(dlq)
        assert redirected.body == "never-acked"


def test_lifecycle_takes_sqs_client():
    assert get_type_hints(MessageLifecycle.__init__)["client"] is SQSClient
