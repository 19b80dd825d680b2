"""Exception handlers for the FastAPI app."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

_REQUIRED_FIELD_MESSAGES = {
    "message": "Message is required",
    "workflow_id": "WorkflowID is required",
}


def _is_missing(error: dict) -> bool:
    error_type = error.get("type")
    if error_type in ("missing", "string_too_short"):
        return True
    # A JSON null decodes to an empty value, not a malformed body.
    return error_type == "string_type" and error.get("input") is None


def describe_validation_error(exc: RequestValidationError) -> str:
    """Collapse pydantic errors into the short plain-text reasons clients expect."""

    for error in exc.errors():
        location = tuple(error.get("loc", ()))
        field = location[-1] if len(location) > 1 else None
        if field in _REQUIRED_FIELD_MESSAGES and _is_missing(error):
            return _REQUIRED_FIELD_MESSAGES[field]
    return "Invalid JSON"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:  # noqa: WPS430
        return PlainTextResponse(describe_validation_error(exc), status_code=400)
