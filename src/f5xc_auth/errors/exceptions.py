"""Structured exceptions for the F5 XC client.

Every exception raised by this library derives from :class:`F5XCError` and
carries an :class:`ErrorCode` tag, so handling sites can branch on ``exc.code``
(or on :func:`f5xc_auth.errors.classify_error` for foreign exceptions) instead
of long ``isinstance`` chains.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class ErrorCode(str, Enum):
    """Tag identifying the category of an error."""

    AUTH = "AUTH_ERROR"
    API = "API_ERROR"
    CONFIG = "CONFIG_ERROR"
    SSL_CERT = "SSL_CERT_ERROR"
    VALIDATION = "VALIDATION_ERROR"
    UNKNOWN = "UNKNOWN_ERROR"


class F5XCError(Exception):
    """Base exception for all F5 XC errors."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of the error."""
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code.value,
            "context": self.context,
        }


class AuthenticationError(F5XCError):
    """Missing or invalid credential material."""

    code = ErrorCode.AUTH


class CredentialFileError(AuthenticationError):
    """Raised when a certificate, key or bundle file cannot be read.

    Attributes:
        path: The offending file path, as configured.
    """

    def __init__(self, message: str, path: str | None = None, context: dict[str, Any] | None = None):
        super().__init__(message, context)
        self.path = path


class ConfigurationError(F5XCError):
    """Malformed client or path settings."""

    code = ErrorCode.CONFIG


class ValidationError(F5XCError):
    """A profile field failed validation.

    Attributes:
        field: Name of the offending profile field.
    """

    code = ErrorCode.VALIDATION

    def __init__(self, message: str, field: str, context: dict[str, Any] | None = None):
        super().__init__(message, context)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "field": self.field}


class SSLCertificateError(F5XCError):
    """TLS trust failure, carrying the hostname and remediation guidance."""

    code = ErrorCode.SSL_CERT

    def __init__(self, message: str, hostname: str | None = None, context: dict[str, Any] | None = None):
        super().__init__(message, context)
        self.hostname = hostname

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "hostname": self.hostname}


class APIError(F5XCError):
    """Non-2xx response from the API."""

    code = ErrorCode.API

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
        response: "httpx.Response | None" = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context)
        self.status_code = status_code
        self.body = body
        self.response = response

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "status": self.status_code, "body": self.body}


class ClientError(APIError):
    """4xx client errors."""

    pass


class UnauthorizedError(ClientError):
    """401 Unauthorized."""

    pass


class ForbiddenError(ClientError):
    """403 Forbidden."""

    pass


class NotFoundError(ClientError):
    """404 Not Found."""

    pass


class RateLimitError(ClientError):
    """429 Too Many Requests."""

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(APIError):
    """5xx server errors."""

    pass
