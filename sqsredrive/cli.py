"""Command-line entry point.

Usage:
    sqsredrive                          # Run with settings from env / .env
    sqsredrive --wait-time 5 --skip-list
    sqsredrive --endpoint-url http://localhost:4566
"""

import argparse
import logging
import sys

from botocore.exceptions import BotoCoreError

from sqsredrive.core.config import WorkflowSettings
from sqsredrive.sqs.client import SQSClient
from sqsredrive.workflow.orchestrator import WorkflowOrchestrator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create an SQS queue with a dead-letter queue, send/receive/ack a message, then clean up"
    )
    parser.add_argument("--region", help="AWS region")
    parser.add_argument("--profile", help="AWS profile name")
    parser.add_argument("--endpoint-url", help="SQS endpoint override (e.g. LocalStack)")
    parser.add_argument("--visibility-timeout", type=int, help="Primary queue visibility timeout (seconds)")
    parser.add_argument("--wait-time", type=int, help="Long-poll wait time (0-20 seconds)")
    parser.add_argument("--max-receive-count", type=int, help="Deliveries before a message moves to the DLQ")
    parser.add_argument("--message", help="Message body to send")
    parser.add_argument("--skip-list", action="store_true", help="Do not list queues")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def settings_from_args(args: argparse.Namespace) -> WorkflowSettings:
    """Command-line flags override env / .env values."""
    overrides = {
        "aws_region": args.region,
        "aws_profile": args.profile,
        "endpoint_url": args.endpoint_url,
        "visibility_timeout": args.visibility_timeout,
        "receive_wait_time": args.wait_time,
        "max_receive_count": args.max_receive_count,
        "message_body": args.message,
    }
    values = {key: value for key, value in overrides.items() if value is not None}
    if args.skip_list:
        values["list_queues"] = False
    return WorkflowSettings(**values)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = settings_from_args(args)
    logger.debug(f"Settings: {settings.model_dump()}")
    try:
        client = SQSClient.from_settings(settings)
    except BotoCoreError as e:
        logger.error(f"Could not create SQS client: {e}")
        print(f"✗ Error Message: {type(e).__name__}: {e}")
        return 1

    report = WorkflowOrchestrator(client, settings).run()

    print("=" * 60)
    if report.ok:
        print(f"✓ Workflow complete: received {report.received_bodies}")
    else:
        print(f"✗ Error Message: {report.error}")
    if report.cleanup_failures:
        print(f"⚠️  Queues left behind: {', '.join(report.cleanup_failures)}")
    print("=" * 60)

    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
