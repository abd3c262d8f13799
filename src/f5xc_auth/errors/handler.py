"""Error handling utilities for HTTP responses and transport failures."""

from typing import Any
from urllib.parse import urlsplit

import httpx

from f5xc_auth.errors.exceptions import (
    APIError,
    ClientError,
    ErrorCode,
    F5XCError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    SSLCertificateError,
    UnauthorizedError,
)

_STATUS_EXCEPTIONS: dict[int, type[APIError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    429: RateLimitError,
}

STAGING_WILDCARD_GUIDANCE = """

This is a known issue with F5 XC staging environments. The wildcard certificate
*.console.ves.volterra.io does not match multi-level subdomains like
tenant.staging.console.ves.volterra.io.

SOLUTIONS:
1. (Recommended) Set F5XC_CA_BUNDLE=/path/to/custom-ca.crt
2. (Development only) Set F5XC_TLS_INSECURE=true to bypass verification
   WARNING: Never use insecure mode in production!

Example:
  export F5XC_TLS_INSECURE=true"""


def parse_response_body(response: httpx.Response) -> Any:
    """Return the decoded JSON body, the raw text, or None for an empty body."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(status_code: int, body: Any) -> str:
    if isinstance(body, dict):
        for key in ("message", "detail", "title", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(body, str) and body:
        return f"HTTP {status_code}: {body[:200]}"
    return f"HTTP {status_code}"


def raise_for_status(response: httpx.Response) -> None:
    """Raise the matching :class:`APIError` subclass for non-2xx responses.

    Args:
        response: HTTP response object

    Raises:
        APIError subclass based on status code, carrying status and body.
    """
    if response.is_success:
        return

    status_code = response.status_code
    body = parse_response_body(response)

    if status_code in _STATUS_EXCEPTIONS:
        exc_class = _STATUS_EXCEPTIONS[status_code]
    elif 400 <= status_code < 500:
        exc_class = ClientError
    elif 500 <= status_code < 600:
        exc_class = ServerError
    else:
        exc_class = APIError

    message = _error_message(status_code, body)

    if exc_class is RateLimitError:
        retry_after = None
        if "retry-after" in response.headers:
            try:
                retry_after = int(response.headers["retry-after"])
            except (ValueError, TypeError):
                retry_after = None
        raise RateLimitError(
            message,
            retry_after=retry_after,
            status_code=status_code,
            body=body,
            response=response,
        )

    raise exc_class(message, status_code=status_code, body=body, response=response)


def _hostname(api_url: str | None) -> str | None:
    if not api_url:
        return None
    try:
        return urlsplit(api_url).hostname
    except ValueError:
        return None


def wrap_ssl_error(error: BaseException, api_url: str | None = None) -> BaseException:
    """Rewrite TLS/certificate failures into :class:`SSLCertificateError`.

    Hostname mismatches, self-signed and expired certificates, and generic
    TLS failures each get remediation text. Anything that does not look like
    a TLS failure is returned unchanged.

    Args:
        error: The original exception.
        api_url: The API URL being contacted, used to name the host.

    Returns:
        An ``SSLCertificateError`` or the original exception.
    """
    if isinstance(error, F5XCError):
        return error

    message = str(error).lower()
    hostname = _hostname(api_url)
    context = {"original_error": str(error), "api_url": api_url}

    if "altnames" in message or ("hostname" in message and "match" in message):
        guidance = f'SSL Certificate Error: The server certificate does not cover hostname "{hostname or "unknown"}".'
        if hostname and ".staging." in hostname:
            guidance += STAGING_WILDCARD_GUIDANCE
        else:
            guidance += (
                "\n\nSOLUTIONS:\n"
                f"1. Verify the API URL is correct: {api_url or 'not set'}\n"
                "2. If using a custom CA, set F5XC_CA_BUNDLE=/path/to/ca-bundle.crt\n"
                "3. Check if the certificate has expired or is self-signed"
            )
        return SSLCertificateError(guidance, hostname, context)

    if "self signed" in message or "self-signed" in message:
        return SSLCertificateError(
            "SSL Certificate Error: Self-signed certificate detected.\n\n"
            "SOLUTIONS:\n"
            "1. (Recommended) Add your CA certificate: F5XC_CA_BUNDLE=/path/to/ca.crt\n"
            "2. (Development only) Set F5XC_TLS_INSECURE=true to bypass verification",
            hostname,
            context,
        )

    if "expired" in message or "not yet valid" in message:
        return SSLCertificateError(
            "SSL Certificate Error: Certificate has expired or is not yet valid.\n\n"
            "Contact your F5 XC administrator to renew the certificate.",
            hostname,
            context,
        )

    if any(marker in message for marker in ("certificate", "ssl", "tls", "unable to verify")):
        return SSLCertificateError(
            f"SSL/TLS Error: {error}\n\n"
            "If this is a staging environment, you may need to:\n"
            "1. Set F5XC_CA_BUNDLE=/path/to/ca.crt for custom CA\n"
            "2. Set F5XC_TLS_INSECURE=true to disable verification (development only)",
            hostname,
            context,
        )

    return error


def classify_error(error: BaseException) -> ErrorCode:
    """Return the :class:`ErrorCode` for any exception.

    Exceptions outside the library taxonomy map to ``ErrorCode.UNKNOWN``.
    """
    if isinstance(error, F5XCError):
        return error.code
    return ErrorCode.UNKNOWN
