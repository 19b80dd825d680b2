"""Chat workflow start, signal and result endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from chatflow.api.dependencies import get_chat_gateway
from chatflow.schemas.chat import (
    ChatRequest,
    ChatResponse,
    ChatResultResponse,
    SignalRequest,
    SignalResponse,
)
from chatflow.services.chat_gateway import (
    ChatGateway,
    GatewayError,
    InstanceNotFoundError,
    InstanceTerminatedError,
)
from chatflow.workflow_orchestration.signals import SignalKind

router = APIRouter()
logger = logging.getLogger("chatflow.api.chat")


def _status_for(exc: GatewayError) -> int:
    if isinstance(exc, InstanceNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, InstanceTerminatedError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@router.post(
    "/start-workflow",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    summary="Start a chat workflow",
)
async def start_workflow(
    request: ChatRequest,
    gateway: ChatGateway = Depends(get_chat_gateway),
) -> ChatResponse | JSONResponse:
    """Start a chat instance and return its greeting."""
    try:
        started = await gateway.start_chat(request.message)
    except GatewayError as exc:
        response = ChatResponse(workflow_id=exc.workflow_id, run_id=exc.run_id, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(exclude_none=True),
        )

    logger.info(
        "chat_workflow_start_completed",
        extra={"workflow_id": started.workflow_id, "run_id": started.run_id},
    )
    return ChatResponse(workflow_id=started.workflow_id, run_id=started.run_id, result=started.result)


async def _relay(gateway: ChatGateway, request: SignalRequest, kind: SignalKind) -> SignalResponse | JSONResponse:
    try:
        await gateway.send_signal(request.workflow_id, request.run_id, kind, request.message)
    except GatewayError as exc:
        response = SignalResponse(success=False, error=str(exc))
        return JSONResponse(status_code=_status_for(exc), content=response.model_dump(exclude_none=True))
    return SignalResponse(success=True)


@router.post("/signal/user-prompt", response_model=SignalResponse, response_model_exclude_none=True)
async def user_prompt_signal(
    request: SignalRequest,
    gateway: ChatGateway = Depends(get_chat_gateway),
) -> SignalResponse | JSONResponse:
    return await _relay(gateway, request, SignalKind.USER_PROMPT)


@router.post("/signal/confirm", response_model=SignalResponse, response_model_exclude_none=True)
async def confirm_signal(
    request: SignalRequest,
    gateway: ChatGateway = Depends(get_chat_gateway),
) -> SignalResponse | JSONResponse:
    return await _relay(gateway, request, SignalKind.CONFIRM)


@router.post("/signal/end-chat", response_model=SignalResponse, response_model_exclude_none=True)
async def end_chat_signal(
    request: SignalRequest,
    gateway: ChatGateway = Depends(get_chat_gateway),
) -> SignalResponse | JSONResponse:
    return await _relay(gateway, request, SignalKind.END_CHAT)


@router.get(
    "/workflows/{workflow_id}/result",
    response_model=ChatResultResponse,
    response_model_exclude_none=True,
    summary="Read the current or final chat result",
)
async def get_chat_result(
    workflow_id: str,
    run_id: Optional[str] = Query(default=None),
    gateway: ChatGateway = Depends(get_chat_gateway),
) -> ChatResultResponse | JSONResponse:
    try:
        snapshot = await gateway.get_result(workflow_id, run_id)
    except GatewayError as exc:
        return JSONResponse(status_code=_status_for(exc), content={"error": str(exc)})

    return ChatResultResponse(
        workflow_id=snapshot.workflow_id,
        run_id=snapshot.run_id,
        status=snapshot.status,
        state=snapshot.state,
        result=snapshot.result,
    )
