"""Tests for recipient resolution."""

import pytest

from core.exceptions import RecipientError, RecipientErrorKind
from core.recipient_resolver import is_valid_phone_number, normalize_phone, resolve_recipient


class TestResolveRecipient:
    """Phone numbers resolve; everything else is rejected with a kind."""

    @pytest.mark.parametrize("token, expected", [
        ("+1234567890", "+1234567890"),
        ("+56912345678", "+56912345678"),
        ("+569-1234-5678", "+56912345678"),
        ("+123456", "+123456"),
    ])
    def test_valid_numbers_resolve_hyphen_free(self, token, expected):
        resolved = resolve_recipient(token)

        assert resolved.phone_number == expected
        assert resolved.original_input == token

    @pytest.mark.parametrize("token", ["+12345", "+", "+12 345 678", "+12a45678", "++123456"])
    def test_malformed_numbers_are_invalid_phone(self, token):
        with pytest.raises(RecipientError) as exc_info:
            resolve_recipient(token)

        assert exc_info.value.kind is RecipientErrorKind.INVALID_PHONE
        assert exc_info.value.token == token

    @pytest.mark.parametrize("token", ["Mamá", "Juan Pérez", "56912345678"])
    def test_non_phone_tokens_are_contact_not_found(self, token):
        """Contact lookup is not available: names always fail the same way."""
        with pytest.raises(RecipientError) as exc_info:
            resolve_recipient(token)

        assert exc_info.value.kind is RecipientErrorKind.CONTACT_NOT_FOUND


class TestPhoneHelpers:

    def test_normalize_strips_hyphens_only(self):
        assert normalize_phone("+56-9 12") == "+569 12"

    def test_is_valid_phone_number(self):
        assert is_valid_phone_number("+1-234-567") is True
        assert is_valid_phone_number("+1234") is False
