"""Pending multi-turn scheduling conversation."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class MissingField(str, Enum):
    """What the follow-up utterance still has to supply."""

    DATE = "date"
    TIME = "time"
    PHONE = "phone"


class PendingConversation(BaseModel):
    """
    Partial schedule request waiting for a follow-up.

    One per owner. Saving replaces any earlier conversation for the owner.
    """

    owner_id: str
    partial_content: str
    recipient: str | None = None
    missing_field: MissingField
    original_input_text: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
