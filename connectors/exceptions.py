"""
Exception types for connector operations.

Every connector error carries an optional normalized ``code`` (the HTTP
status as a string where one exists) so callers can decide whether an
error is ignorable without inspecting third-party exception types.
"""

from typing import Optional


class ConnectorException(Exception):
    """Base exception for all connector errors."""

    default_code: Optional[str] = None

    def __init__(self, message: str = "", code: Optional[str] = None):
        super().__init__(message)
        self.code = code if code is not None else self.default_code


class RateLimitException(ConnectorException):
    """Raised when API rate limit is exceeded."""

    default_code = "429"


class AuthenticationException(ConnectorException):
    """Raised when authentication fails."""

    default_code = "401"


class NotFoundException(ConnectorException):
    """Raised when a resource is not found."""

    default_code = "404"


class ConfigurationException(ConnectorException):
    """Raised when the connection is misconfigured (missing token, bad URL)."""

    pass


class TransientNetworkException(ConnectorException):
    """Raised on timeouts and connection failures."""

    pass


class PaginationException(ConnectorException):
    """Raised when pagination fails."""

    pass


class APIException(ConnectorException):
    """Raised when API returns an error."""

    pass
