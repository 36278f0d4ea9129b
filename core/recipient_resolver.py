"""
Recipient resolution.

Only international phone numbers are supported. Contact names are recognised
and rejected with CONTACT_NOT_FOUND until contact lookup exists.
"""

import re
from dataclasses import dataclass

from core.exceptions import RecipientError, RecipientErrorKind

_PHONE = re.compile(r"^\+\d{6,}$")


@dataclass(frozen=True)
class ResolvedRecipient:
    phone_number: str  # International format, hyphens removed
    original_input: str


def normalize_phone(token: str) -> str:
    return token.replace("-", "")


def is_valid_phone_number(token: str) -> bool:
    """`+` followed by at least 6 digits once hyphens are stripped."""
    return bool(_PHONE.match(normalize_phone(token)))


def resolve_recipient(token: str) -> ResolvedRecipient:
    """
    Resolve a recipient token to a phone number.

    Raises:
        RecipientError: INVALID_PHONE for malformed numbers,
            CONTACT_NOT_FOUND for anything that is not a phone number
    """
    if token.startswith("+"):
        if not is_valid_phone_number(token):
            raise RecipientError(RecipientErrorKind.INVALID_PHONE, token)
        return ResolvedRecipient(phone_number=normalize_phone(token), original_input=token)

    raise RecipientError(RecipientErrorKind.CONTACT_NOT_FOUND, token)
