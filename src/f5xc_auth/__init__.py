"""f5xc-auth - Credentials and a resilient HTTP client for the F5 Distributed Cloud API.

This library provides:
- Tenant URL normalization
- Durable, cached, rotatable credential profiles (``~/.config/f5xc``)
- Credential resolution: environment -> active profile -> documentation mode
- An async HTTP client with token/mTLS auth, TLS trust overrides, rate
  limiting, bounded concurrency and retry with backoff

Example:
    ```python
    from f5xc_auth import APIClient, CredentialResolver, ProfileStore

    store = ProfileStore()
    resolver = CredentialResolver(store)
    credentials = await resolver.initialize()

    async with APIClient(credentials) as client:
        if client.is_available():
            response = await client.get("/web/namespaces")
    ```
"""

__version__ = "0.1.0"

from f5xc_auth.auth import AuthMode, CredentialResolver, Credentials, normalize_api_url  # noqa: E402
from f5xc_auth.client import APIClient, APIClientConfig, ApiResponse, create_client  # noqa: E402
from f5xc_auth.profile import Profile, ProfileStore  # noqa: E402

__all__ = [
    "APIClient",
    "APIClientConfig",
    "ApiResponse",
    "AuthMode",
    "CredentialResolver",
    "Credentials",
    "Profile",
    "ProfileStore",
    "__version__",
    "create_client",
    "normalize_api_url",
]
