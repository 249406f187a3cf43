"""Exception handling for the meeting scheduler."""

import logging
import traceback
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from functools import wraps
from enum import Enum


class ErrorCode(Enum):
    """Standard error codes for the application."""

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"

    # Client input errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Remote project source errors
    REMOTE_CONNECTION_ERROR = "REMOTE_CONNECTION_ERROR"
    REMOTE_API_ERROR = "REMOTE_API_ERROR"
    REMOTE_TIMEOUT = "REMOTE_TIMEOUT"

    # Storage errors
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"

    # Calendar export errors
    CALENDAR_GENERATION_ERROR = "CALENDAR_GENERATION_ERROR"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class SchedulerError(Exception):
    """Base exception for the meeting scheduler."""

    http_status = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.http_status < 500

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/monitoring."""
        return {
            'error_code': self.error_code.value,
            'message': self.message,
            'details': self.details,
            'timestamp': self.timestamp.isoformat(),
            'cause': str(self.cause) if self.cause else None,
            'traceback': traceback.format_exc() if self.cause else None
        }


class ConfigurationError(SchedulerError):
    """Configuration related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CONFIG_INVALID, details)


class ValidationError(SchedulerError):
    """Malformed or inconsistent client input."""

    http_status = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class NotFoundError(SchedulerError):
    """Referenced entity does not exist."""

    http_status = 404

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.NOT_FOUND, details)


class RemoteSourceError(SchedulerError):
    """Remote project source (Redmine) related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.REMOTE_API_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, error_code, details, cause)


class PersistenceError(SchedulerError):
    """JSON data file read/write errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, ErrorCode.PERSISTENCE_ERROR, details, cause)


class CalendarGenerationError(SchedulerError):
    """Calendar generation related errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, ErrorCode.CALENDAR_GENERATION_ERROR, details, cause)


class ErrorHandler:
    """Centralized error handling and logging."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._error_counts = {}
        self._last_errors = {}

    def handle_error(
        self,
        error: Exception,
        context: str = "unknown",
        extra_details: Optional[Dict[str, Any]] = None
    ) -> SchedulerError:
        """Handle and log an error, converting to SchedulerError if needed."""

        if isinstance(error, SchedulerError):
            scheduler_error = error
        else:
            scheduler_error = SchedulerError(
                message=str(error),
                error_code=ErrorCode.INTERNAL_ERROR,
                details=extra_details or {},
                cause=error
            )

        scheduler_error.details['context'] = context
        if extra_details:
            scheduler_error.details.update(extra_details)

        error_key = f"{context}:{scheduler_error.error_code.value}"
        self._error_counts[error_key] = self._error_counts.get(error_key, 0) + 1
        self._last_errors[error_key] = scheduler_error.to_dict()

        log_extra = {
            'error_code': scheduler_error.error_code.value,
            'details': scheduler_error.details,
            'error_count': self._error_counts[error_key]
        }
        if scheduler_error.error_code == ErrorCode.INTERNAL_ERROR:
            self.logger.error(
                f"[{context}] {scheduler_error.message}",
                extra=log_extra,
                exc_info=scheduler_error.cause
            )
        else:
            self.logger.warning(f"[{context}] {scheduler_error.message}", extra=log_extra)

        return scheduler_error

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics for monitoring."""
        return {
            'error_counts': self._error_counts.copy(),
            'last_errors': self._last_errors.copy(),
            'total_errors': sum(self._error_counts.values())
        }

    def reset_stats(self):
        """Reset error statistics."""
        self._error_counts.clear()
        self._last_errors.clear()


# Global error handler instance
error_handler = ErrorHandler()


def handle_exceptions(context: str = "unknown", reraise: bool = True):
    """Decorator that routes exceptions through the error handler."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                handled_error = error_handler.handle_error(e, context)
                if not reraise:
                    return None
                if handled_error is e:
                    raise
                raise handled_error from e
        return wrapper

    return decorator
