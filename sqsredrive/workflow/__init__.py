"""Workflow orchestration for sqsredrive."""

from sqsredrive.workflow.orchestrator import WorkflowOrchestrator

__all__ = ["WorkflowOrchestrator"]
