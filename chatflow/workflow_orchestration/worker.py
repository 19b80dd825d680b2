"""Temporal worker bootstrap."""

from __future__ import annotations

import logging

from temporalio.client import Client
from temporalio.worker import Worker

from chatflow.workflow_orchestration.activities import greet_activity
from chatflow.workflow_orchestration.client import get_temporal_client
from chatflow.workflow_orchestration.config import TemporalConfig, get_temporal_config
from chatflow.workflow_orchestration.workflows import ChatWorkflow

logger = logging.getLogger(__name__)

WORKFLOWS = [ChatWorkflow]
ACTIVITIES = [greet_activity]


def build_worker(client: Client, config: TemporalConfig) -> Worker:
    """Register the chat workflow and greet activity on the task queue."""

    return Worker(
        client,
        task_queue=config.task_queue,
        workflows=WORKFLOWS,
        activities=ACTIVITIES,
    )


async def run_worker(config: TemporalConfig | None = None) -> None:
    """Run the Temporal worker until cancelled."""
    config = (config or get_temporal_config()).require()

    logger.info(
        "temporal_worker_starting",
        extra={"host_port": config.host_port, "namespace": config.namespace, "task_queue": config.task_queue},
    )

    client = await get_temporal_client(config)
    worker = build_worker(client, config)

    logger.info(
        "temporal_worker_ready",
        extra={"workflows": len(WORKFLOWS), "activities": len(ACTIVITIES)},
    )
    await worker.run()
