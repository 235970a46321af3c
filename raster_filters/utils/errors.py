# Centralized error handling utilities
"""
Provides consistent error handling patterns across the engine.

This module defines:
- Custom exception classes for each refusal the engine can report
- An error handling decorator for wrapping third-party failures
- Utility functions for error logging and user messaging

Every validation error is raised before any allocation or worker start, so
a caller that catches one can rely on its buffer being untouched.
"""

import functools
import traceback
from typing import Any, Callable, Optional, Tuple, Type, TypeVar, Union
from enum import Enum

from .logger import get_logger

logger = get_logger(__name__)

# Type variable for generic function signatures
F = TypeVar('F', bound=Callable[..., Any])


class ErrorCategory(Enum):
    """Categories of errors for consistent handling."""
    RECOVERABLE = "recoverable"      # Can continue with fallback
    INVALID_INPUT = "invalid_input"  # Rejected parameter or dimension
    FILE_IO = "file_io"              # Codec / file system errors
    PROCESSING = "processing"        # Filter execution errors
    ALLOCATION = "allocation"        # Buffer or kernel storage could not be reserved
    CONFIGURATION = "configuration"  # Settings/config errors
    FATAL = "fatal"                  # Unrecoverable errors


class AppError(Exception):
    """Base exception for engine-specific errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.RECOVERABLE,
        original_error: Optional[Exception] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.category = category
        self.original_error = original_error
        self.user_message = user_message or message

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.args[0]} (caused by: {type(self.original_error).__name__})"
        return self.args[0]


class AllocationError(AppError):
    """Pixel or kernel storage could not be reserved."""

    def __init__(self, message: str, shape: Optional[Tuple[int, ...]] = None, **kwargs):
        super().__init__(message, category=ErrorCategory.ALLOCATION, **kwargs)
        self.shape = shape


class InvalidDimensionsError(AppError):
    """Zero/negative width, height or channel layout the engine cannot hold."""

    def __init__(
        self,
        message: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        channels: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(message, category=ErrorCategory.INVALID_INPUT, **kwargs)
        self.width = width
        self.height = height
        self.channels = channels


class InvalidKernelSizeError(AppError):
    """Kernel size is even or smaller than 3."""

    def __init__(self, message: str, size: Optional[int] = None, **kwargs):
        super().__init__(message, category=ErrorCategory.INVALID_INPUT, **kwargs)
        self.size = size


class InvalidParameterError(AppError):
    """A scalar filter parameter is outside its accepted range."""

    def __init__(self, message: str, name: Optional[str] = None, value: Any = None, **kwargs):
        super().__init__(message, category=ErrorCategory.INVALID_INPUT, **kwargs)
        self.name = name
        self.value = value


class ProcessingError(AppError):
    """Filter execution errors."""

    def __init__(self, message: str, step: Optional[str] = None, **kwargs):
        super().__init__(message, category=ErrorCategory.PROCESSING, **kwargs)
        self.step = step


class FileIOError(AppError):
    """File I/O related errors."""

    def __init__(self, message: str, file_path: Optional[str] = None, **kwargs):
        super().__init__(message, category=ErrorCategory.FILE_IO, **kwargs)
        self.file_path = file_path


def handle_errors(
    error_type: Type[AppError] = AppError,
    category: ErrorCategory = ErrorCategory.RECOVERABLE,
    log_level: str = "warning",
    user_message: Optional[str] = None,
    **error_kwargs: Any,
) -> Callable[[F], F]:
    """
    Decorator that converts foreign exceptions into engine errors.

    Args:
        error_type: AppError subclass raised in place of the foreign exception.
        category: Error category for logging context (only used for plain AppError).
        log_level: Logging level ('debug', 'info', 'warning', 'error', 'exception').
        user_message: Optional user-friendly message attached to the raised error.
        **error_kwargs: Extra keyword arguments forwarded to ``error_type``.

    Example:
        @handle_errors(FileIOError, category=ErrorCategory.FILE_IO)
        def decode(path):
            ...
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except AppError:
                # Already one of ours
                raise
            except Exception as e:
                log_func = getattr(logger, log_level, logger.warning)
                log_func(
                    "%s failed in %s.%s: %s",
                    category.value,
                    func.__module__,
                    func.__name__,
                    str(e),
                )

                if log_level == "exception":
                    logger.debug("Full traceback:\n%s", traceback.format_exc())

                if error_type is AppError:
                    raise AppError(
                        str(e),
                        category=category,
                        original_error=e,
                        user_message=user_message,
                    ) from e
                raise error_type(
                    str(e),
                    original_error=e,
                    user_message=user_message,
                    **error_kwargs,
                ) from e

        return wrapper  # type: ignore
    return decorator


def log_and_continue(
    message: str,
    category: ErrorCategory = ErrorCategory.RECOVERABLE,
    level: str = "warning",
) -> None:
    """
    Log an error and continue execution.

    Use this for non-critical errors that shouldn't stop processing.

    Args:
        message: Error message to log.
        category: Error category for context.
        level: Log level.
    """
    log_func = getattr(logger, level, logger.warning)
    log_func("[%s] %s", category.value, message)


def format_user_error(error: Union[Exception, str], context: Optional[str] = None) -> str:
    """
    Format an error message for user display.

    Args:
        error: The error or error message.
        context: Optional context about what operation failed.

    Returns:
        User-friendly error message.
    """
    if isinstance(error, AppError):
        return error.user_message

    error_str = str(error)

    if "No such file or directory" in error_str:
        return f"File not found{f' while {context}' if context else ''}"
    if "Permission denied" in error_str:
        return f"Permission denied{f' while {context}' if context else ''}"
    if isinstance(error, MemoryError) or "out of memory" in error_str.lower():
        return "Not enough memory to complete this operation. Try with a smaller image."

    # Generic fallback
    if context:
        return f"Error {context}: {error_str}"
    return f"An error occurred: {error_str}"
