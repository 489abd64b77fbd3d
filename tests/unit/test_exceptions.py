"""Unit tests for custom exception hierarchy"""
import json
from datetime import datetime

import pytest

from extflex.exceptions import (
    ConfigurationError,
    ExtFlexError,
    ImportDataError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    UnknownExerciseError,
    ValidationError,
    wrap_storage_exception,
)


class TestExtFlexError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = ExtFlexError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "Something went wrong. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = ExtFlexError(
            message="Failed to save progression",
            operation="add_xp",
            context={"exercise_id": "pushups"},
            user_message="Could not save your progress",
        )
        assert error.operation == "add_xp"
        assert error.context["exercise_id"] == "pushups"
        assert error.user_message == "Could not save your progress"

    def test_exception_logs_on_creation(self, caplog):
        """Test that creating an error logs it"""
        ExtFlexError("Logged error", operation="test")
        assert "ExtFlexError: Logged error" in caplog.text

    def test_to_dict(self):
        """Test exception serialization"""
        error_dict = ExtFlexError("Test error").to_dict()
        assert error_dict["error"] == "ExtFlexError"
        assert error_dict["message"] == "Test error"
        assert "request_id" in error_dict
        assert "timestamp" in error_dict


class TestValidationErrors:
    """Test caller input errors"""

    def test_validation_error(self):
        """Test validation error with field"""
        error = ValidationError("must be positive", field="value", value=-5)
        assert error.field == "value"
        assert error.value == -5
        assert error.user_message == "Invalid value: must be positive"
        assert isinstance(error, ExtFlexError)

    def test_unknown_exercise(self):
        """Test unknown exercise is a validation error"""
        error = UnknownExerciseError("moonwalk")
        assert isinstance(error, ValidationError)
        assert error.exercise_id == "moonwalk"
        assert error.field == "exercise_id"
        assert "moonwalk" in error.message


class TestStorageErrors:
    """Test storage error hierarchy"""

    def test_storage_error_key(self):
        """Test storage errors carry the key"""
        error = StorageReadError("read failed", key="extFlex_streak")
        assert isinstance(error, StorageError)
        assert error.key == "extFlex_streak"
        assert error.context["key"] == "extFlex_streak"

    def test_write_error_user_message(self):
        """Test write error has save-specific user message"""
        error = StorageWriteError("write failed")
        assert error.user_message == "We couldn't save your progress. Please try again."

    def test_wrap_json_decode_error(self):
        """Test invalid JSON becomes a read error"""
        try:
            json.loads("{bad")
        except ValueError as e:
            wrapped = wrap_storage_exception(e, operation="load")
        assert isinstance(wrapped, StorageReadError)
        assert wrapped.cause is not None

    def test_wrap_type_error(self):
        """Test unserializable values become write errors"""
        wrapped = wrap_storage_exception(TypeError("set is not JSON"), operation="set", key="k")
        assert isinstance(wrapped, StorageWriteError)
        assert wrapped.key == "k"

    @pytest.mark.parametrize("operation,expected", [
        ("get", StorageReadError),
        ("load", StorageReadError),
        ("set", StorageWriteError),
    ])
    def test_wrap_os_error(self, operation, expected):
        """Test filesystem errors map by operation"""
        wrapped = wrap_storage_exception(OSError("disk full"), operation=operation)
        assert isinstance(wrapped, expected)


class TestOtherErrors:
    """Test import and configuration errors"""

    def test_import_error_section(self):
        error = ImportDataError("'entries' must be a JSON array", section="entries")
        assert error.section == "entries"
        assert error.user_message.startswith("Invalid import data")

    def test_configuration_error(self):
        error = ConfigurationError("bad backend", config_key="EXTFLEX_STORE_BACKEND")
        assert error.config_key == "EXTFLEX_STORE_BACKEND"
        assert error.context["config_key"] == "EXTFLEX_STORE_BACKEND"
