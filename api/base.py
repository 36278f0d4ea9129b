"""Response envelope shared by every HTTP route."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from fastapi import Request
from pydantic import BaseModel, Field

from utils.timezone import now_utc


class APIError(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class APIMeta(BaseModel):
    timestamp: datetime = Field(..., description="Response timestamp (UTC)")
    request_id: str = Field(..., description="Request ID, echoed in X-Request-ID")


class APIResponse(BaseModel):
    """
    Envelope for every response, success or failure.

    The chat gateway only reads `data.reply` from POST /api/inbound; the job
    routes put a job or a page of jobs in `data`.
    """

    success: bool
    data: Any | None = None
    error: APIError | None = None
    meta: APIMeta


class InboundReply(BaseModel):
    reply: str


class JobPageData(BaseModel):
    items: list[dict[str, Any]]
    total: int
    has_more: bool


def _meta(request_id: str | None) -> APIMeta:
    return APIMeta(timestamp=now_utc(), request_id=request_id or str(uuid4()))


def request_id_of(request: Request) -> str | None:
    """ID assigned by RequestIDMiddleware, None outside it."""
    return getattr(request.state, "request_id", None)


def success_response(data: Any, request_id: str | None = None) -> APIResponse:
    return APIResponse(success=True, data=data, meta=_meta(request_id))


def error_response(code: str, message: str, request_id: str | None = None) -> APIResponse:
    return APIResponse(
        success=False,
        error=APIError(code=code, message=message),
        meta=_meta(request_id),
    )


def ok(request: Request, data: BaseModel | dict[str, Any]) -> dict[str, Any]:
    """JSON-ready success envelope for a route, tagged with the request's ID."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    return success_response(data, request_id_of(request)).model_dump(mode="json")


class ErrorCodes:
    """Error codes carried in `error.code`."""

    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Job lifecycle
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    PENDING_LIMIT_REACHED = "PENDING_LIMIT_REACHED"

    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
