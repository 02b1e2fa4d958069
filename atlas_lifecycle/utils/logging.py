"""
Logging utilities for the Atlas instance lifecycle tools.
"""

import functools
import inspect
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast


def setup_logging(log_level: str = "INFO", log_file: str | None = None) -> None:
    """Set up logging configuration."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


F = TypeVar("F", bound=Callable[..., Any])

# Argument names left out of call logs
OMITTED_ARGS = frozenset({"client", "ctx", "settings"})


def log_function_call(func: F) -> F:
    """Decorator to log function calls, leaving out collaborator arguments."""
    signature = inspect.signature(func)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger = get_logger(func.__module__)
        if logger.isEnabledFor(logging.DEBUG):
            bound = signature.bind_partial(*args, **kwargs)
            shown = ", ".join(
                f"{name}={value!r}"
                for name, value in bound.arguments.items()
                if name not in OMITTED_ARGS
            )
            logger.debug(f"Calling {func.__name__}({shown})")
        try:
            result = func(*args, **kwargs)
            logger.debug(f"{func.__name__} completed successfully")
            return result
        except Exception as e:
            logger.error(f"{func.__name__} failed with error: {e}")
            raise

    return cast(F, wrapper)


def log_execution_time(func: F) -> F:
    """Decorator to log function execution time."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger = get_logger(func.__module__)
        start_time = time.monotonic()
        try:
            result = func(*args, **kwargs)
            execution_time = time.monotonic() - start_time
            logger.info(f"{func.__name__} executed in {execution_time:.2f} seconds")
            return result
        except Exception as e:
            execution_time = time.monotonic() - start_time
            logger.error(
                f"{func.__name__} failed after {execution_time:.2f} seconds with error: {e}"
            )
            raise

    return cast(F, wrapper)
