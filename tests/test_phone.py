"""
Tests for vendor phone normalization.
"""

import pytest

from foodles.services.notifications import normalize_phone_number

CANONICAL = "+919876543210"


class TestNormalizePhoneNumber:

    @pytest.mark.parametrize("raw", [
        "9876543210",
        "919876543210",
        "0919876543210",
        "+919876543210",
        "+91 98765 43210",
        "+91-98765-43210",
        "(091) 98765 43210",
        "09876543210",
    ])
    def test_common_shapes_normalize_to_canonical(self, raw):
        assert normalize_phone_number(raw) == CANONICAL

    def test_idempotent(self):
        assert normalize_phone_number(normalize_phone_number("98765 43210")) == CANONICAL

    def test_ten_digit_number_starting_with_country_code(self):
        """A subscriber number may itself begin with 91."""
        assert normalize_phone_number("9123456789") == "+919123456789"

    def test_empty_input_is_invalid(self):
        assert normalize_phone_number("") == ""
        assert normalize_phone_number("   ") == ""
        assert normalize_phone_number("abc") == ""
        assert normalize_phone_number(None) == ""

    def test_other_country_code(self):
        assert normalize_phone_number("2025550123", country_code="1") == "+12025550123"
