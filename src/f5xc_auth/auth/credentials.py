"""Credential resolution for the F5 Distributed Cloud API.

Resolution order (highest to lowest priority), with no mixing between sources:
1. Environment variables (``F5XC_API_URL`` plus an auth method)
2. Active profile from the profile store
3. No credentials ("documentation mode")

Example:
    ```python
    from f5xc_auth.auth import CredentialResolver
    from f5xc_auth.profile import ProfileStore

    resolver = CredentialResolver(ProfileStore())
    await resolver.initialize()

    if resolver.is_authenticated():
        print(resolver.get_auth_mode(), resolver.get_tenant())
    ```

Security Considerations:
    - Tokens are never logged (masked with ***)
    - Secret file paths are logged by file name only
    - Certificate load failures degrade the snapshot instead of raising
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotenv import dotenv_values

from f5xc_auth.auth.urls import extract_tenant, normalize_api_url
from f5xc_auth.errors import CredentialFileError
from f5xc_auth.profile import Profile, ProfileStore
from f5xc_auth.utils.security import sanitize_path_for_log, validate_file_path

logger = logging.getLogger(__name__)


class AuthMode(str, Enum):
    """Authentication modes."""

    NONE = "none"
    TOKEN = "token"
    CERTIFICATE = "certificate"


class CredentialSource(str, Enum):
    """Where a credential snapshot came from."""

    NONE = "none"
    ENVIRONMENT = "environment"
    PROFILE = "profile"


class EnvVars:
    """Environment variable names. These override profile settings."""

    API_URL = "F5XC_API_URL"
    API_TOKEN = "F5XC_API_TOKEN"
    P12_BUNDLE = "F5XC_P12_BUNDLE"
    P12_PASSWORD = "F5XC_P12_PASSWORD"
    CERT = "F5XC_CERT"
    KEY = "F5XC_KEY"
    NAMESPACE = "F5XC_NAMESPACE"
    TLS_INSECURE = "F5XC_TLS_INSECURE"
    CA_BUNDLE = "F5XC_CA_BUNDLE"


@dataclass(frozen=True)
class Credentials:
    """Immutable credential snapshot handed to the HTTP client."""

    mode: AuthMode = AuthMode.NONE
    source: CredentialSource = CredentialSource.NONE
    api_url: str | None = None
    token: str | None = None
    p12_certificate: bytes | None = None
    p12_password: str | None = None
    cert: str | None = None
    key: str | None = None
    namespace: str | None = None
    tls_insecure: bool = False
    ca_bundle: bytes | None = None

    def __repr__(self) -> str:
        return (
            f"Credentials(mode={self.mode.value!r}, source={self.source.value!r}, api_url={self.api_url!r}, "
            f"namespace={self.namespace!r}, tls_insecure={self.tls_insecure})"
        )


NO_CREDENTIALS = Credentials()


@dataclass(frozen=True)
class EnvironmentSettings:
    """The ``F5XC_*`` variables, read once into a value."""

    api_url: str | None = None
    api_token: str | None = None
    p12_bundle: str | None = None
    p12_password: str | None = None
    cert: str | None = None
    key: str | None = None
    namespace: str | None = None
    tls_insecure: bool = False
    ca_bundle: str | None = None

    @classmethod
    def from_mapping(cls, environ: Mapping[str, str | None]) -> "EnvironmentSettings":
        def value(name: str) -> str | None:
            raw = environ.get(name)
            return raw if raw else None

        return cls(
            api_url=value(EnvVars.API_URL),
            api_token=value(EnvVars.API_TOKEN),
            p12_bundle=value(EnvVars.P12_BUNDLE),
            p12_password=value(EnvVars.P12_PASSWORD),
            cert=value(EnvVars.CERT),
            key=value(EnvVars.KEY),
            namespace=value(EnvVars.NAMESPACE),
            tls_insecure=(value(EnvVars.TLS_INSECURE) or "").strip().lower() == "true",
            ca_bundle=value(EnvVars.CA_BUNDLE),
        )

    def has_auth(self) -> bool:
        return bool(self.api_token or self.p12_bundle or (self.cert and self.key))

    def is_complete(self) -> bool:
        """An endpoint plus at least one recognized auth method."""
        return bool(self.api_url) and self.has_auth()

    def to_profile(self) -> Profile:
        return Profile(
            name="__env__",
            api_url=self.api_url or "",
            api_token=self.api_token,
            p12_bundle=self.p12_bundle,
            p12_password=self.p12_password,
            cert=self.cert,
            key=self.key,
            default_namespace=self.namespace,
            tls_insecure=self.tls_insecure,
            ca_bundle=self.ca_bundle,
        )


def read_environment(dotenv_path: str | Path | None = None, load_dotenv: bool = True) -> dict[str, str | None]:
    """Snapshot ``os.environ`` merged over an optional ``.env`` file.

    The process environment is not modified; real environment variables win
    over ``.env`` values.
    """
    merged: dict[str, str | None] = {}
    if load_dotenv:
        try:
            merged.update(dotenv_values(dotenv_path))
        except OSError as e:
            logger.warning(f"Failed to load .env file: {e}")
    merged.update(os.environ)
    return merged


def _mask_credential(value: str | None) -> str:
    return "None" if value is None else "***"


def _read_bytes(path: str) -> bytes:
    resolved = validate_file_path(path)
    try:
        return resolved.read_bytes()
    except OSError as e:
        raise CredentialFileError(f"Cannot read {sanitize_path_for_log(path)}: {e.strerror or e}", path=path) from e


def _read_text(path: str) -> str:
    resolved = validate_file_path(path)
    try:
        return resolved.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CredentialFileError(f"Cannot read {sanitize_path_for_log(path)}: {e}", path=path) from e


def build_credentials(
    profile: Profile,
    source: CredentialSource,
    allow_token_fallback: bool = True,
) -> Credentials:
    """Materialize a credential snapshot from one source.

    Auth precedence is p12 bundle, then cert/key pair, then token. When
    certificate material cannot be read the snapshot falls back to token
    auth if the same source also carries a token (and
    ``allow_token_fallback`` is set), otherwise to ``AuthMode.NONE``. TLS
    settings are loaded independently of the auth mode.

    Args:
        profile: Source settings (a stored profile or the environment).
        source: Recorded on the snapshot.
        allow_token_fallback: Whether a broken certificate may downgrade to
            token auth.
    """
    tls_insecure = bool(profile.tls_insecure)
    ca_bundle: bytes | None = None

    if profile.ca_bundle:
        try:
            ca_bundle = _read_bytes(profile.ca_bundle)
            logger.info(f"Loaded CA bundle {sanitize_path_for_log(profile.ca_bundle)}")
        except CredentialFileError as e:
            logger.warning(f"Failed to load CA bundle: {e}")

    if tls_insecure:
        logger.warning(
            "TLS certificate verification is DISABLED. "
            "This is insecure and should only be used for staging/development environments."
        )

    api_url = normalize_api_url(profile.api_url) or None
    mode = AuthMode.NONE
    p12_certificate: bytes | None = None
    cert: str | None = None
    key: str | None = None

    if api_url:
        if profile.p12_bundle or (profile.cert and profile.key):
            try:
                if profile.p12_bundle:
                    p12_certificate = _read_bytes(profile.p12_bundle)
                    logger.info(f"Loaded P12 certificate {sanitize_path_for_log(profile.p12_bundle)}")
                else:
                    cert = _read_text(profile.cert)
                    key = _read_text(profile.key)
                    logger.info(
                        f"Loaded certificate {sanitize_path_for_log(profile.cert)} "
                        f"and key {sanitize_path_for_log(profile.key)}"
                    )
                mode = AuthMode.CERTIFICATE
            except CredentialFileError as e:
                logger.error(f"Failed to load certificate material: {e}")
                if profile.api_token and allow_token_fallback:
                    logger.warning("Falling back to token authentication")
                    mode = AuthMode.TOKEN
        elif profile.api_token:
            mode = AuthMode.TOKEN

    return Credentials(
        mode=mode,
        source=source,
        api_url=api_url,
        token=profile.api_token,
        p12_certificate=p12_certificate,
        p12_password=profile.p12_password,
        cert=cert,
        key=key,
        namespace=profile.default_namespace,
        tls_insecure=tls_insecure,
        ca_bundle=ca_bundle,
    )


class CredentialResolver:
    """Resolve one credential snapshot from environment, profile, or nothing.

    The environment is captured into :class:`EnvironmentSettings` at each
    :meth:`initialize`/:meth:`reload`, either from the ``environ`` mapping
    given here or from ``os.environ`` (plus ``.env`` when enabled).

    Args:
        store: Profile store used for the active profile.
        environ: Explicit environment mapping. When None the process
            environment is read at resolution time.
        dotenv_path: ``.env`` file location (python-dotenv search when None).
        load_dotenv: Whether to merge ``.env`` values under the process
            environment. Ignored when ``environ`` is given.
        allow_token_fallback: Let a broken certificate downgrade to token
            auth when a token is also configured.
    """

    def __init__(
        self,
        store: ProfileStore | None = None,
        *,
        environ: Mapping[str, str | None] | None = None,
        dotenv_path: str | Path | None = None,
        load_dotenv: bool = False,
        allow_token_fallback: bool = True,
    ):
        self._store = store
        self._environ = environ
        self._dotenv_path = dotenv_path
        self._load_dotenv = load_dotenv
        self._allow_token_fallback = allow_token_fallback

        self._credentials: Credentials = NO_CREDENTIALS
        self._active_profile_name: str | None = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> Credentials:
        """Resolve credentials once; later calls return the same snapshot."""
        if not self._initialized:
            self._credentials = await self._load_credentials()
            self._initialized = True
        return self._credentials

    async def reload(self) -> Credentials:
        """Discard the current snapshot and resolve again."""
        self._initialized = False
        self._active_profile_name = None
        return await self.initialize()

    def _environment(self) -> EnvironmentSettings:
        if self._environ is not None:
            return EnvironmentSettings.from_mapping(self._environ)
        return EnvironmentSettings.from_mapping(read_environment(self._dotenv_path, self._load_dotenv))

    async def _load_credentials(self) -> Credentials:
        env = self._environment()
        if env.is_complete():
            credentials = build_credentials(env.to_profile(), CredentialSource.ENVIRONMENT, self._allow_token_fallback)
            logger.info(
                f"Credentials loaded from environment variables "
                f"(mode={credentials.mode.value}, tenant={extract_tenant(credentials.api_url)}, "
                f"token={_mask_credential(credentials.token)})"
            )
            return credentials

        profile = await self._store.get_active_profile() if self._store is not None else None
        if profile is not None:
            credentials = build_credentials(profile, CredentialSource.PROFILE, self._allow_token_fallback)
            if credentials.mode is not AuthMode.NONE:
                self._active_profile_name = profile.name
                logger.info(
                    f"Credentials loaded from profile '{profile.name}' "
                    f"(mode={credentials.mode.value}, tenant={extract_tenant(credentials.api_url)})"
                )
                return credentials
            logger.warning(f"Active profile '{profile.name}' has no usable credentials")

        logger.info("No credentials configured - running in documentation mode")
        return NO_CREDENTIALS

    def get_credentials(self) -> Credentials:
        return self._credentials

    def get_active_profile(self) -> str | None:
        """Name of the profile in use; None for environment or no credentials."""
        return self._active_profile_name

    def get_auth_mode(self) -> AuthMode:
        return self._credentials.mode

    def is_authenticated(self) -> bool:
        return self._credentials.mode is not AuthMode.NONE

    def get_api_url(self) -> str | None:
        return self._credentials.api_url

    def get_tenant(self) -> str | None:
        return extract_tenant(self._credentials.api_url)

    def get_token(self) -> str | None:
        return self._credentials.token

    def get_p12_certificate(self) -> bytes | None:
        return self._credentials.p12_certificate

    def get_cert(self) -> str | None:
        return self._credentials.cert

    def get_key(self) -> str | None:
        return self._credentials.key

    def get_namespace(self) -> str | None:
        return self._credentials.namespace

    def get_tls_insecure(self) -> bool:
        return self._credentials.tls_insecure

    def get_ca_bundle(self) -> bytes | None:
        return self._credentials.ca_bundle
