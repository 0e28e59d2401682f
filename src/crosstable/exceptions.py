"""Custom exceptions for CrossTable library.

This module defines all custom exceptions used throughout the library for
consistent error handling and clear error messaging.
"""

from typing import Any, Dict, Optional


# Base exception
class CrossTableError(Exception):
    """Base exception for all CrossTable errors.

    Attributes:
        message: Error message
        details: Additional error context as key-value pairs
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        """Initialize exception with message and additional details.

        Args:
            message: Human-readable error message
            **kwargs: Additional context (e.g., field, operator, slot)
        """
        self.message = message
        self.details: Dict[str, Any] = kwargs
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the complete error message with details."""
        if not self.details:
            return self.message

        details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        if self.message:
            return f"{self.message} ({details_str})"
        return details_str

    def __repr__(self) -> str:
        """Return detailed representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# Query construction exceptions
class InvalidQueryError(CrossTableError):
    """Raised when a query cannot be serialized (empty group, operator/value arity mismatch).

    Never sent over the wire.

    Example:
        >>> raise InvalidQueryError("Operator requires a sequence value", field="region", operator="$in")
    """


# Remote call exceptions
class TransportError(CrossTableError):
    """Raised when the HTTP call itself fails and no response was received.

    Example:
        >>> raise TransportError("Connection refused", url="http://api.example.com/t/places")
    """


class ApiError(CrossTableError):
    """Raised when the remote service answered with a non-ok status.

    Attributes:
        status_code: HTTP status code of the response
        status_message: Status message (error message from the envelope or HTTP reason phrase)
        request_url: URL of the request that produced the error

    Example:
        >>> raise ApiError(401, "Unauthorized", "http://api.example.com/t/places?limit=1")
    """

    def __init__(
        self,
        status_code: int,
        status_message: str,
        request_url: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        self.status_code = status_code
        self.status_message = status_message
        self.request_url = request_url
        super().__init__(status_message, status_code=status_code, request_url=request_url, **kwargs)


class DecodeError(CrossTableError):
    """Raised when a response body does not match the shape expected for its query type.

    Example:
        >>> raise DecodeError("Missing 'response' payload", shape="read")
    """


# Configuration exceptions
class ConfigurationError(CrossTableError):
    """Raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError("Invalid configuration", setting="API_TIMEOUT", value=-1)
    """


class MissingConfigError(ConfigurationError):
    """Raised when required configuration values are not set.

    Example:
        >>> raise MissingConfigError("Configuration not set", config_key="API_KEY")
    """
