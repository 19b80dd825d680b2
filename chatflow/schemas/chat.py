"""Chat workflow request and response schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    """Inbound payload for starting a chat workflow."""

    message: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    workflow_id: str = ""
    run_id: str = ""
    result: Optional[str] = None
    error: Optional[str] = None


class SignalRequest(BaseModel):
    """Inbound payload for the signal endpoints."""

    workflow_id: str = Field(..., min_length=1)
    run_id: Optional[str] = Field(default=None)
    message: str = Field(default="")

    @field_validator("message", mode="before")
    @classmethod
    def null_to_empty(cls, value: Optional[str]) -> str:
        return "" if value is None else value


class SignalResponse(BaseModel):
    success: bool
    error: Optional[str] = None


class ChatResultResponse(BaseModel):
    """Observed state of a chat workflow."""

    workflow_id: str
    run_id: Optional[str] = None
    status: str
    state: Optional[str] = None
    result: Optional[str] = None
