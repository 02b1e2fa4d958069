"""
Custom exceptions for the Atlas instance lifecycle tools.
"""


class AtlasError(Exception):
    """Base exception for all Atlas lifecycle errors."""

    pass


class ConfigurationError(AtlasError):
    """Exception raised for missing or invalid configuration."""

    pass


class RequestError(AtlasError):
    """Exception raised when a request does not return the expected status."""

    def __init__(self, status: str, status_code: int | None = None) -> None:
        super().__init__(status)
        self.status = status
        self.status_code = status_code


class NotFoundError(RequestError):
    """Exception raised when the requested instance does not exist."""

    pass


class AuthenticationError(RequestError):
    """Exception raised when a bearer token cannot be obtained."""

    pass


class ResourceUnavailableError(AtlasError):
    """Exception raised when the requested instance type cannot be provisioned."""

    def __init__(self, message: str, instance_id: str | None = None) -> None:
        super().__init__(message)
        self.instance_id = instance_id


class CancelledError(AtlasError):
    """Exception raised when an operation's context is cancelled or expires."""

    pass


class PollTimeoutError(AtlasError, TimeoutError):
    """Exception raised when polling exceeds its attempt or time bound."""

    pass
