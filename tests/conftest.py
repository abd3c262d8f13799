"""Pytest configuration and shared fixtures for f5xc-auth tests."""

from datetime import UTC, datetime, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from f5xc_auth.config.paths import AppPaths
from f5xc_auth.profile import FileProfileRepository, ProfileStore


@pytest.fixture(autouse=True)
def clear_env(monkeypatch, tmp_path):
    """Auto-cleanup: clear F5XC_* variables and point XDG dirs at tmp_path.

    This prevents test pollution from a developer's real credentials.
    """
    import os

    for key in list(os.environ.keys()):
        if key.startswith("F5XC_"):
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))

    yield


@pytest.fixture
def app_paths(tmp_path) -> AppPaths:
    return AppPaths(config_dir=tmp_path / "f5xc", state_dir=tmp_path / "state")


@pytest.fixture
def repository(app_paths) -> FileProfileRepository:
    return FileProfileRepository(app_paths)


@pytest.fixture
def store(repository) -> ProfileStore:
    return ProfileStore(repository)


@pytest.fixture(scope="session")
def client_certificate():
    """A throwaway self-signed client certificate: (cert_pem, key_pem, p12_bytes).

    The P12 bundle is protected with the password ``secret``.
    """
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "f5xc-auth-test")])
    now = datetime.now(UTC)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )

    cert_pem = certificate.public_bytes(serialization.Encoding.PEM)
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    p12 = pkcs12.serialize_key_and_certificates(
        b"f5xc-auth-test",
        key,
        certificate,
        None,
        serialization.BestAvailableEncryption(b"secret"),
    )
    return cert_pem, key_pem, p12


@pytest.fixture
def certificate_files(tmp_path, client_certificate):
    """Write the test certificate material to disk: dict of paths."""
    cert_pem, key_pem, p12 = client_certificate
    cert_path = tmp_path / "client.crt"
    key_path = tmp_path / "client.key"
    p12_path = tmp_path / "client.p12"
    cert_path.write_bytes(cert_pem)
    key_path.write_bytes(key_pem)
    p12_path.write_bytes(p12)
    return {"cert": cert_path, "key": key_path, "p12": p12_path}
