"""Monitoring and error handling for the meeting scheduler."""

from .exceptions import (
    ErrorCode, SchedulerError, ConfigurationError, ValidationError,
    NotFoundError, RemoteSourceError, PersistenceError,
    CalendarGenerationError, ErrorHandler, error_handler, handle_exceptions
)
from .health import HealthStatus, HealthChecker

__all__ = [
    'ErrorCode', 'SchedulerError', 'ConfigurationError', 'ValidationError',
    'NotFoundError', 'RemoteSourceError', 'PersistenceError',
    'CalendarGenerationError', 'ErrorHandler', 'error_handler', 'handle_exceptions',
    'HealthStatus', 'HealthChecker'
]
