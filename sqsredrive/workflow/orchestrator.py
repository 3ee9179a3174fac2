"""Provision → send → receive/ack → teardown workflow.

This is the single place errors are caught: any failure aborts the remaining
steps, is logged as one line and recorded on the report. Every queue created
during the run is deleted at the end, whichever step failed.
"""

import logging

from sqsredrive.core.config import WorkflowSettings
from sqsredrive.core.config import settings as default_settings
from sqsredrive.core.models import QueueHandle, WorkflowReport
from sqsredrive.sqs.client import SQSClient
from sqsredrive.sqs.lifecycle import MessageLifecycle
from sqsredrive.sqs.monitor import QueueMonitor
from sqsredrive.sqs.provisioner import QueueProvisioner

logger = logging.getLogger(__name__)


class WorkflowOrchestrator:
    """Runs the queue / dead-letter queue demonstration lifecycle."""

    def __init__(self, client: SQSClient, settings: WorkflowSettings | None = None):
        self.settings = settings or default_settings
        self.provisioner = QueueProvisioner(client)
        self.lifecycle = MessageLifecycle(client)
        self.monitor = QueueMonitor(client)
        self._created: list[QueueHandle] = []

    def run(self) -> WorkflowReport:
        """
        Execute the workflow once.

        Never raises: the outcome (including the failure reason) is in the
        returned report.
        """
        report = WorkflowReport()
        self._created = []

        try:
            self._run_steps(report)
            report.status = "ok"
        except Exception as e:
            report.status = "failed"
            report.error = f"{type(e).__name__}: {e}"
            logger.error(f"Workflow failed: {report.error}")
        finally:
            report.cleanup_failures = self._cleanup()

        return report

    def _run_steps(self, report: WorkflowReport) -> None:
        s = self.settings

        # 1. Primary queue
        config = self.provisioner.new_config(
            self.provisioner.unique_name(s.queue_name_prefix),
            visibility_timeout=s.visibility_timeout,
            receive_wait_time=s.receive_wait_time,
        )
        queue = self.provisioner.create_queue(config)
        self._created.append(queue)
        report.queue_url = queue.url

        # 2. Dead-letter queue, then link it
        dlq = self.provisioner.create_dead_letter_queue(self.provisioner.unique_name(s.dlq_name_prefix))
        self._created.append(dlq)
        report.dlq_url = dlq.url
        self.provisioner.attach_redrive_policy(queue, dlq, s.max_receive_count)

        # 3. Observability only
        if s.list_queues:
            logger.info("Listing queues:")
            for url in self.provisioner.list_queues():
                logger.info(f"  QueueUrl: {url}")
                report.listed_queues.append(url)

        # 4. Send
        report.sent_message_id = self.lifecycle.send(queue, s.message_body)

        # 5. Receive and acknowledge what is visible
        result = self.lifecycle.process(queue, max_messages=s.max_messages)
        report.received_bodies = result.bodies
        logger.info(
            f"Processed {result.received} message(s) from {queue.name}: "
            f"{result.acknowledged} acknowledged, {result.already_handled} already handled"
        )

        status = self.monitor.get_status(queue, dlq)
        logger.info(f"Queue status: main={status['main_queue']} dlq={status['dlq']}")

    def _cleanup(self) -> list[str]:
        """Delete every queue created in this run, most recent first."""
        failures = []
        while self._created:
            handle = self._created.pop()
            if not self.provisioner.delete_queue(handle):
                failures.append(handle.url)
        return failures
