"""
Standardized exception hierarchy for extflex
Provides rich context, consistent logging, and user-friendly error messages
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4

logger = logging.getLogger(__name__)


class ExtFlexError(Exception):
    """
    Base exception for all extflex errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise ExtFlexError(
            message="Failed to save progression",
            operation="add_xp",
            context={"exercise_id": "pushups"}
        )
    """

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "Something went wrong. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # 'message' is reserved by logging
            "request_id": self.request_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for callers that report errors as data"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (User Input)
# ==========================================

class ValidationError(ExtFlexError):
    """
    Raised when caller input fails validation

    Examples:
    - Non-positive rep count or duration
    - Unknown exercise id

    Example:
        raise ValidationError(
            message="Value must be positive",
            field="value",
            value=-5
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


class UnknownExerciseError(ValidationError):
    """Exercise id is not in the catalog"""

    def __init__(self, exercise_id: str, **kwargs):
        self.exercise_id = exercise_id
        super().__init__(
            message=f"Unknown exercise '{exercise_id}'",
            field="exercise_id",
            value=exercise_id,
            **kwargs
        )


# ==========================================
# Storage Errors
# ==========================================

class StorageError(ExtFlexError):
    """
    Base class for key-value store failures
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        **kwargs
    ):
        self.key = key
        kwargs.setdefault("user_message", "We couldn't access your saved progress. Please try again.")
        super().__init__(
            message=message,
            context={"key": key},
            **kwargs
        )


class StorageReadError(StorageError):
    """Reading from the store failed"""
    pass


class StorageWriteError(StorageError):
    """Writing to the store failed"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message="We couldn't save your progress. Please try again.",
            **kwargs
        )


# ==========================================
# Import Errors
# ==========================================

class ImportDataError(ExtFlexError):
    """Bulk import payload does not have the expected shape"""

    def __init__(
        self,
        message: str,
        section: Optional[str] = None,
        **kwargs
    ):
        self.section = section
        super().__init__(
            message=message,
            user_message=f"Invalid import data: {message}",
            context={"section": section},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(ExtFlexError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The progression engine is not properly configured.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_storage_exception(
    error: Exception,
    operation: str,
    key: Optional[str] = None,
) -> ExtFlexError:
    """
    Wrap low-level store exceptions (filesystem, JSON encoding) into our hierarchy

    Args:
        error: Original exception
        operation: Store operation being performed (get, set, remove, clear)
        key: Storage key if applicable

    Returns:
        Appropriate ExtFlexError subclass

    Example:
        try:
            self._path.write_text(payload)
        except OSError as e:
            raise wrap_storage_exception(e, operation="set", key=key)
    """
    if isinstance(error, json.JSONDecodeError):
        return StorageReadError(
            message=f"Store file is not valid JSON: {error}",
            key=key,
            operation=operation,
            cause=error
        )
    elif isinstance(error, (TypeError, ValueError)):
        return StorageWriteError(
            message=f"Value is not JSON serializable: {error}",
            key=key,
            operation=operation,
            cause=error
        )
    elif isinstance(error, OSError):
        error_cls = StorageReadError if operation in ("get", "get_all", "load") else StorageWriteError
        return error_cls(
            message=f"Store {operation} failed: {error}",
            key=key,
            operation=operation,
            cause=error
        )

    # Generic fallback
    return StorageError(
        message=f"{operation} failed: {error}",
        key=key,
        operation=operation,
        cause=error
    )
