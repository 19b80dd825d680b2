"""Temporal workflow definitions."""

from chatflow.workflow_orchestration.workflows.chat import ChatWorkflow, GreetOptions  # noqa: F401
