"""Tests for the exception hierarchy."""

import pytest

from f5xc_auth.errors import (
    APIError,
    AuthenticationError,
    ClientError,
    ConfigurationError,
    CredentialFileError,
    ErrorCode,
    F5XCError,
    NotFoundError,
    RateLimitError,
    ServerError,
    SSLCertificateError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test exception classes and their error codes."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (AuthenticationError("x"), ErrorCode.AUTH),
            (CredentialFileError("x", path="/a"), ErrorCode.AUTH),
            (ConfigurationError("x"), ErrorCode.CONFIG),
            (ValidationError("x", field="name"), ErrorCode.VALIDATION),
            (SSLCertificateError("x"), ErrorCode.SSL_CERT),
            (APIError("x"), ErrorCode.API),
            (NotFoundError("x", status_code=404), ErrorCode.API),
            (F5XCError("x"), ErrorCode.UNKNOWN),
        ],
    )
    def test_codes(self, exc, code):
        assert exc.code is code
        assert isinstance(exc, F5XCError)

    @pytest.mark.unit
    def test_subclass_relationships(self):
        assert issubclass(CredentialFileError, AuthenticationError)
        assert issubclass(NotFoundError, ClientError)
        assert issubclass(RateLimitError, ClientError)
        assert issubclass(ServerError, APIError)

    @pytest.mark.unit
    def test_str_is_message(self):
        assert str(ConfigurationError("bad timeout")) == "bad timeout"


class TestToDict:
    """Test serialization of errors."""

    @pytest.mark.unit
    def test_base(self):
        exc = AuthenticationError("no token", context={"source": "env"})
        assert exc.to_dict() == {
            "name": "AuthenticationError",
            "message": "no token",
            "code": "AUTH_ERROR",
            "context": {"source": "env"},
        }

    @pytest.mark.unit
    def test_api_error_includes_status_and_body(self):
        exc = ServerError("boom", status_code=503, body={"message": "boom"})

        data = exc.to_dict()

        assert data["name"] == "ServerError"
        assert data["status"] == 503
        assert data["body"] == {"message": "boom"}
        assert data["code"] == "API_ERROR"

    @pytest.mark.unit
    def test_validation_error_includes_field(self):
        assert ValidationError("bad", field="api_url").to_dict()["field"] == "api_url"

    @pytest.mark.unit
    def test_ssl_error_includes_hostname(self):
        assert SSLCertificateError("bad", hostname="a.io").to_dict()["hostname"] == "a.io"

    @pytest.mark.unit
    def test_rate_limit_retry_after(self):
        exc = RateLimitError("slow down", retry_after=30, status_code=429)
        assert exc.retry_after == 30
        assert exc.status_code == 429
