"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from chatflow.services.chat_gateway import ChatGateway


def get_chat_gateway(request: Request) -> ChatGateway:
    gateway = getattr(request.app.state, "chat_gateway", None)
    if gateway is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Temporal client is not connected",
        )
    return gateway
