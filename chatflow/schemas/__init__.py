"""Pydantic schemas for API payloads."""

from chatflow.schemas.chat import (
    ChatRequest,
    ChatResponse,
    ChatResultResponse,
    SignalRequest,
    SignalResponse,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ChatResultResponse",
    "SignalRequest",
    "SignalResponse",
]
