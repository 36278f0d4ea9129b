"""HTTP adapter: inbound chat messages and job routes."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    ErrorCodes,
    InboundReply,
    JobPageData,
    error_response,
    ok,
    success_response,
)
