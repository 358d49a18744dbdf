"""Tests for the shared validators module."""

import pytest

from src.shared.validators.name import validate_display_name
from src.shared.validators.password import validate_password_strength


class TestPasswordValidation:
    """Test password length validation."""

    def test_valid_password(self):
        assert validate_password_strength("pw123456") == "pw123456"

    def test_valid_password_minimum_length(self):
        """Six characters is the shortest accepted password."""
        assert validate_password_strength("abc123") == "abc123"

    def test_valid_password_maximum_length(self):
        password = "a" * 128
        assert validate_password_strength(password) == password

    def test_password_is_returned_unchanged(self):
        """Surrounding whitespace is part of the password, not trimmed."""
        assert validate_password_strength("  spaced out  ") == "  spaced out  "

    def test_password_too_short_fails(self):
        with pytest.raises(ValueError, match="Password must be at least 6 characters long"):
            validate_password_strength("abc12")

    def test_password_too_long_fails(self):
        with pytest.raises(ValueError, match="Password must be at most 128 characters long"):
            validate_password_strength("a" * 129)

    def test_blank_password_fails(self):
        with pytest.raises(ValueError, match="Password cannot be blank"):
            validate_password_strength("        ")

    def test_empty_password_fails(self):
        with pytest.raises(ValueError, match="at least 6 characters"):
            validate_password_strength("")


class TestDisplayNameValidation:
    def test_valid_name(self):
        assert validate_display_name("Ann Smith") == "Ann Smith"

    def test_name_is_trimmed(self):
        assert validate_display_name("   Ann   ") == "Ann"

    def test_inner_whitespace_is_collapsed(self):
        assert validate_display_name("Ann    Smith") == "Ann Smith"

    @pytest.mark.parametrize("name", ["Al", "x" * 50])
    def test_boundaries_accepted(self, name):
        assert validate_display_name(name) == name

    @pytest.mark.parametrize("name", ["A", "   A   ", "", "x" * 51])
    def test_out_of_range_fails(self, name):
        with pytest.raises(ValueError, match="Name must be between 2 and 50 characters"):
            validate_display_name(name)
