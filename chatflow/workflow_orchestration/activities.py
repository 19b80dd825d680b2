"""Temporal activities used by workflows."""

from __future__ import annotations

import logging

from temporalio import activity

LOGGER = logging.getLogger("chatflow.workflow.activities")


@activity.defn(name="greet")
async def greet_activity(name: str) -> str:
    LOGGER.info("workflow_greet", extra={"input": name})
    return f"Hello, {name}!"
