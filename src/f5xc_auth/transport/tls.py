"""TLS configuration for the HTTP transport.

Builds the ``ssl.SSLContext`` handed to httpx from a credential snapshot:

- custom CA bundle: replaces the default trust store
- ``tls_insecure``: disables hostname checks and certificate verification
- certificate mode: loads the client certificate chain for mTLS, from a
  PKCS#12 bundle or a PEM certificate/key pair

The trust settings apply under every auth mode.
"""

import logging
import os
import ssl
import tempfile
from pathlib import Path

from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    pkcs12,
)

from f5xc_auth.auth.credentials import AuthMode, Credentials
from f5xc_auth.errors import AuthenticationError
from f5xc_auth.utils.security import sanitize_url_for_log

logger = logging.getLogger(__name__)


def p12_to_pem(data: bytes, password: str | None = None) -> tuple[bytes, bytes]:
    """Convert a PKCS#12 bundle to a ``(certificate_chain_pem, private_key_pem)`` pair.

    Raises:
        AuthenticationError: If the bundle cannot be decoded or holds no key
            and certificate.
    """
    try:
        private_key, certificate, additional = pkcs12.load_key_and_certificates(
            data, password.encode() if password else None
        )
    except ValueError as e:
        raise AuthenticationError(f"Cannot decode P12 bundle (wrong password or corrupt file): {e}") from e

    if private_key is None or certificate is None:
        raise AuthenticationError("P12 bundle does not contain both a private key and a certificate")

    chain = certificate.public_bytes(Encoding.PEM)
    for extra in additional or []:
        chain += extra.public_bytes(Encoding.PEM)
    key = private_key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    return chain, key


def _load_cert_chain(context: ssl.SSLContext, cert_pem: bytes, key_pem: bytes) -> None:
    # SSLContext.load_cert_chain only reads files; stage the PEMs in a private directory
    with tempfile.TemporaryDirectory(prefix="f5xc-tls-") as tmp:
        os.chmod(tmp, 0o700)
        cert_path = Path(tmp) / "client.crt"
        key_path = Path(tmp) / "client.key"
        for path, content in ((cert_path, cert_pem), (key_path, key_pem)):
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "wb") as fh:
                fh.write(content)
        try:
            context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path))
        except ssl.SSLError as e:
            raise AuthenticationError(f"Client certificate and key could not be loaded: {e}") from e


def build_ssl_context(credentials: Credentials) -> ssl.SSLContext:
    """Create the SSL context for ``credentials``.

    Raises:
        AuthenticationError: In certificate mode when no usable certificate
            material is present.
    """
    if credentials.ca_bundle:
        try:
            context = ssl.create_default_context(cadata=credentials.ca_bundle.decode("utf-8"))
        except (ssl.SSLError, UnicodeDecodeError) as e:
            raise AuthenticationError(f"Custom CA bundle is not valid PEM: {e}") from e
        logger.info("Using custom CA bundle for TLS verification")
    else:
        context = ssl.create_default_context()

    if credentials.tls_insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        logger.warning(
            f"TLS certificate verification DISABLED for {sanitize_url_for_log(credentials.api_url)}. "
            "Only use this for staging/development; consider F5XC_CA_BUNDLE instead."
        )

    if credentials.mode is AuthMode.CERTIFICATE:
        if credentials.p12_certificate:
            cert_pem, key_pem = p12_to_pem(credentials.p12_certificate, credentials.p12_password)
        elif credentials.cert and credentials.key:
            cert_pem, key_pem = credentials.cert.encode(), credentials.key.encode()
        else:
            raise AuthenticationError("Certificate not loaded - provide P12 bundle or cert/key pair")
        _load_cert_chain(context, cert_pem, key_pem)

    return context
