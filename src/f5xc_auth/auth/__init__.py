"""Authentication components for the F5 XC API.

This module provides:
- Tenant URL normalization
- Multi-source credential resolution (environment -> active profile -> none)

Example:
    ```python
    from f5xc_auth.auth import CredentialResolver, normalize_api_url

    normalize_api_url("acme.volterra.us")  # "https://acme.console.ves.volterra.io/api"

    resolver = CredentialResolver(store)
    credentials = await resolver.initialize()
    ```
"""

from f5xc_auth.auth.credentials import (
    NO_CREDENTIALS,
    AuthMode,
    CredentialResolver,
    Credentials,
    CredentialSource,
    EnvironmentSettings,
    EnvVars,
    build_credentials,
    read_environment,
)
from f5xc_auth.auth.urls import extract_tenant, normalize_api_url, normalize_tenant_url

__all__ = [
    "NO_CREDENTIALS",
    "AuthMode",
    "CredentialResolver",
    "CredentialSource",
    "Credentials",
    "EnvVars",
    "EnvironmentSettings",
    "build_credentials",
    "extract_tenant",
    "normalize_api_url",
    "normalize_tenant_url",
    "read_environment",
]
