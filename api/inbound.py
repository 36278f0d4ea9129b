"""POST /api/inbound: feed one chat message into the scheduler."""

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from api.base import InboundReply, ok
from core.services.inbound_service import InboundMessageHandler


class InboundMessage(BaseModel):
    owner_id: str = Field(..., min_length=1, max_length=64)
    text: str = Field(..., max_length=4000)


def create_inbound_router(handler: InboundMessageHandler) -> APIRouter:
    router = APIRouter()

    @router.post("/inbound")
    def receive(request: Request, body: InboundMessage):
        return ok(request, InboundReply(reply=handler.handle(body.owner_id, body.text)))

    return router
