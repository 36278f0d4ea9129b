"""Tests for message content validation."""

from core.validation import is_valid_content


class TestIsValidContent:

    def test_regular_text_is_valid(self):
        assert is_valid_content("Feliz Navidad") is True

    def test_none_is_invalid(self):
        assert is_valid_content(None) is False

    def test_empty_is_invalid(self):
        assert is_valid_content("") is False

    def test_whitespace_only_is_invalid(self):
        assert is_valid_content(" \t\n ") is False

    def test_exactly_max_length_is_valid(self):
        assert is_valid_content("a" * 1000) is True

    def test_over_max_length_is_invalid(self):
        assert is_valid_content("a" * 1001) is False

    def test_length_counts_surrounding_whitespace(self):
        assert is_valid_content(" " + "a" * 1000) is False

    def test_custom_max_length(self):
        assert is_valid_content("abcdef", max_length=5) is False
