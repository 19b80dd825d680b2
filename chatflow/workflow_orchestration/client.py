"""Temporal client factory."""

from __future__ import annotations

import logging

from temporalio.client import Client

from chatflow.workflow_orchestration.config import TemporalConfig, get_temporal_config

logger = logging.getLogger("chatflow.workflow.client")


class TemporalConnectionError(ConnectionError):
    """Raised when the Temporal frontend cannot be reached."""


async def get_temporal_client(config: TemporalConfig | None = None) -> Client:
    """Create a Temporal client using service configuration."""

    config = (config or get_temporal_config()).require()

    try:
        client = await Client.connect(
            config.host_port,
            namespace=config.namespace,
            api_key=config.api_key,
            tls=config.tls_enabled,
        )
    except Exception as exc:
        logger.error(
            "temporal_connect_failed",
            extra={"host_port": config.host_port, "namespace": config.namespace, "error": str(exc)},
        )
        raise TemporalConnectionError(f"Unable to create client: {exc}") from exc

    logger.info(
        "temporal_client_connected",
        extra={"host_port": config.host_port, "namespace": config.namespace, "tls": config.tls_enabled},
    )
    return client
