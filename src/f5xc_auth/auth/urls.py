"""Tenant URL normalization for the F5 Distributed Cloud API.

Users configure tenants in several shapes; everything is reduced to one
canonical API endpoint:

- ``tenant.volterra.us`` -> ``https://tenant.console.ves.volterra.io/api``
- ``tenant.staging.volterra.us`` -> ``https://tenant.staging.volterra.us/api``
- ``tenant.console.ves.volterra.io`` -> ``https://tenant.console.ves.volterra.io/api``
- ``tenant.staging.console.ves.volterra.io`` -> same host, ``https``, ``/api``

Scheme-less input gets ``https://``, surrounding whitespace, trailing slashes
and an existing ``/api`` suffix are dropped, and unknown hosts pass through.
None of these functions raise.
"""

import re

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_API_SUFFIX = re.compile(r"/api$", re.IGNORECASE)

# tenant.staging.volterra.us (kept as-is)
_STAGING_SHORT_FORM = re.compile(r"^https?://([^./]+)\.staging\.volterra\.us(?:/|$)", re.IGNORECASE)
# tenant.volterra.us (rewritten to the console host)
_PROD_SHORT_FORM = re.compile(r"^https?://([^./]+)\.volterra\.us(?:/|$)", re.IGNORECASE)
# tenant.console.ves.volterra.io or tenant.staging.console.ves.volterra.io
_CONSOLE_FORM = re.compile(r"^https?://([^./]+)\.(staging\.)?console\.ves\.volterra\.io(?:/|$)", re.IGNORECASE)

_TENANT = re.compile(r"^https?://([^./:]+)\.", re.IGNORECASE)


def _strip_suffixes(url: str) -> str:
    url = url.rstrip("/")
    url = _API_SUFFIX.sub("", url)
    return url.rstrip("/")


def normalize_api_url(value: str | None) -> str:
    """Normalize a tenant URL to the canonical API endpoint.

    Args:
        value: Raw URL from user configuration.

    Returns:
        The endpoint with ``/api`` suffix, or ``""`` for empty input, which
        callers treat as "no credentials".
    """
    url = (value or "").strip()
    if not url:
        return ""

    if not _SCHEME.match(url):
        url = f"https://{url}"

    url = _strip_suffixes(url)

    staging = _STAGING_SHORT_FORM.match(url)
    if staging:
        return f"https://{staging.group(1)}.staging.volterra.us/api"

    prod = _PROD_SHORT_FORM.match(url)
    if prod:
        url = f"https://{prod.group(1)}.console.ves.volterra.io"

    console = _CONSOLE_FORM.match(url)
    if console:
        tenant, staging_infix = console.group(1), console.group(2) or ""
        url = f"https://{tenant}.{staging_infix.lower()}console.ves.volterra.io"

    return f"{url}/api"


def normalize_tenant_url(value: str | None) -> str:
    """Normalize a tenant URL without the ``/api`` suffix.

    Example:
        ```python
        normalize_tenant_url("https://tenant.console.ves.volterra.io/api")
        # "https://tenant.console.ves.volterra.io"
        ```
    """
    api_url = normalize_api_url(value)
    if not api_url:
        return ""
    return _API_SUFFIX.sub("", api_url)


def extract_tenant(url: str | None) -> str | None:
    """Return the tenant label (first hostname segment) or None."""
    if not url:
        return None
    match = _TENANT.match(url.strip())
    return match.group(1) if match else None
