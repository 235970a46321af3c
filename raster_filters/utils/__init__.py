# This file makes the 'utils' directory a Python package.

from .errors import (
    AppError,
    AllocationError,
    InvalidDimensionsError,
    InvalidKernelSizeError,
    InvalidParameterError,
    ProcessingError,
    FileIOError,
    ErrorCategory,
    handle_errors,
    log_and_continue,
    format_user_error,
)
from .logger import get_logger, set_log_level

__all__ = [
    # Errors
    'AppError',
    'AllocationError',
    'InvalidDimensionsError',
    'InvalidKernelSizeError',
    'InvalidParameterError',
    'ProcessingError',
    'FileIOError',
    'ErrorCategory',
    'handle_errors',
    'log_and_continue',
    'format_user_error',
    # Logging
    'get_logger',
    'set_log_level',
]
