"""Validation of message content."""

from core.config import MAX_CONTENT_LENGTH


def is_valid_content(content: str | None, max_length: int = MAX_CONTENT_LENGTH) -> bool:
    """
    Check a message body.

    Rules:
    - Must not be empty or None
    - Must contain something other than whitespace
    - Must not exceed max_length characters (untrimmed length)
    """
    if not content:
        return False
    if len(content.strip()) == 0:
        return False
    if len(content) > max_length:
        return False
    return True
