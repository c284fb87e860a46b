"""Tests for shared/exceptions.py."""

import pytest

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    EcoLearnError,
    NotFoundError,
    ValidationError,
)


class TestEcoLearnError:
    def test_message(self):
        """EcoLearnError should store message."""
        error = EcoLearnError("Test error")
        assert error.message == "Test error"
        assert str(error) == "Test error"

    def test_default_code(self):
        """EcoLearnError should default code to class name."""
        assert EcoLearnError("Test error").code == "EcoLearnError"

    def test_custom_code(self):
        assert EcoLearnError("Test error", code="CUSTOM_ERROR").code == "CUSTOM_ERROR"

    def test_default_details(self):
        assert EcoLearnError("Test error").details == {}

    def test_default_status(self):
        assert EcoLearnError("Test error").status_code == 500

    def test_to_dict(self):
        """to_dict should produce the API error envelope."""
        error = EcoLearnError("Test error", code="TEST_ERROR", details={"key": "value"})

        assert error.to_dict() == {
            "success": False,
            "error": "Test error",
            "code": "TEST_ERROR",
            "details": {"key": "value"},
        }

    def test_to_dict_omits_empty_details(self):
        result = EcoLearnError("Test error").to_dict()

        assert result == {"success": False, "error": "Test error", "code": "EcoLearnError"}


class TestStatusCodes:
    @pytest.mark.parametrize(
        "error_class,status_code",
        [
            (ValidationError, 400),
            (AuthenticationError, 401),
            (AuthorizationError, 403),
            (NotFoundError, 404),
            (ConflictError, 409),
            (ConfigurationError, 500),
        ],
    )
    def test_status_code(self, error_class, status_code):
        error = error_class("failure")
        assert isinstance(error, EcoLearnError)
        assert error.status_code == status_code

    def test_validation_error_with_details(self):
        """ValidationError should support field-level details."""
        error = ValidationError("Validation failed", details={"fields": {"email": "Invalid format"}})
        assert error.details["fields"]["email"] == "Invalid format"
