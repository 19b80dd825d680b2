"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from chatflow.api.error_handlers import register_exception_handlers
from chatflow.api.routers import get_api_router
from chatflow.core.config import AppSettings, get_settings
from chatflow.core.logging import configure_logging
from chatflow.services.chat_gateway import ChatGateway
from chatflow.workflow_orchestration.client import get_temporal_client
from chatflow.workflow_orchestration.config import get_temporal_config

logger = logging.getLogger("chatflow.main")


def build_lifespan(settings: AppSettings, gateway: ChatGateway | None = None):
    """Connect the Temporal client for the app's lifetime unless a gateway is supplied."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):  # noqa: D401
        if gateway is not None:
            app.state.chat_gateway = gateway
            yield
            return

        config = get_temporal_config(settings)
        client = await get_temporal_client(config)
        app.state.chat_gateway = ChatGateway(client, config)
        logger.info("chat_gateway_ready", extra={"task_queue": config.task_queue})
        try:
            yield
        finally:
            app.state.chat_gateway = None
            logger.info("temporal_client_released")

    return lifespan


def create_app(settings: AppSettings | None = None, *, gateway: ChatGateway | None = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Chat Workflow Gateway",
        version="1.0.0",
        lifespan=build_lifespan(settings, gateway),
    )

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app
