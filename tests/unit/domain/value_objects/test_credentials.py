"""Unit tests for the Email, Password and OtpCode value objects."""

import pytest

from marketplace_client.domain.value_objects.credentials import OtpCode, Password
from marketplace_client.domain.value_objects.email import Email


class TestEmail:
    def test_normalized_to_lowercase(self):
        assert Email("  Ana@Example.COM ").value == "ana@example.com"

    @pytest.mark.parametrize("value", ["ana", "ana@", "@example.com", "ana@example", "a@b"])
    def test_invalid_format(self, value):
        with pytest.raises(ValueError):
            Email(value)

    def test_mask_for_logging(self):
        assert Email("ana.maria@example.com").mask_for_logging() == "ana***@example.com"


class TestPassword:
    def test_too_short(self):
        with pytest.raises(ValueError, match="at least 8 characters"):
            Password("short")

    def test_custom_min_length(self):
        assert Password("abcd", min_length=4).value == "abcd"

    def test_value_not_in_repr(self):
        assert "hunter2hunter2" not in repr(Password("hunter2hunter2"))


class TestOtpCode:
    def test_six_digit_code(self):
        assert str(OtpCode(" 123456 ")) == "123456"

    def test_configurable_width(self):
        assert str(OtpCode("1234", length=4)) == "1234"

    @pytest.mark.parametrize("value", ["12345", "1234567", "12a456", "", "      "])
    def test_rejects_wrong_shape(self, value):
        with pytest.raises(ValueError, match="6 digits"):
            OtpCode(value)
