"""Error taxonomy and error handling for the F5 XC client."""

from f5xc_auth.errors.exceptions import (
    APIError,
    AuthenticationError,
    ClientError,
    ConfigurationError,
    CredentialFileError,
    ErrorCode,
    F5XCError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    SSLCertificateError,
    UnauthorizedError,
    ValidationError,
)
from f5xc_auth.errors.handler import classify_error, parse_response_body, raise_for_status, wrap_ssl_error

__all__ = [
    "APIError",
    "AuthenticationError",
    "ClientError",
    "ConfigurationError",
    "CredentialFileError",
    "ErrorCode",
    "F5XCError",
    "ForbiddenError",
    "NotFoundError",
    "RateLimitError",
    "SSLCertificateError",
    "ServerError",
    "UnauthorizedError",
    "ValidationError",
    "classify_error",
    "parse_response_body",
    "raise_for_status",
    "wrap_ssl_error",
]
