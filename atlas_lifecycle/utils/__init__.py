"""
Utility modules for the Atlas instance lifecycle tools.
"""

from .config import load_config, require_config, validate_config
from .exceptions import (
    AtlasError,
    AuthenticationError,
    CancelledError,
    ConfigurationError,
    NotFoundError,
    PollTimeoutError,
    RequestError,
    ResourceUnavailableError,
)
from .logging import get_logger, log_execution_time, log_function_call, setup_logging

__all__ = [
    "AtlasError",
    "AuthenticationError",
    "CancelledError",
    "ConfigurationError",
    "NotFoundError",
    "PollTimeoutError",
    "RequestError",
    "ResourceUnavailableError",
    "setup_logging",
    "get_logger",
    "log_function_call",
    "log_execution_time",
    "load_config",
    "require_config",
    "validate_config",
]
