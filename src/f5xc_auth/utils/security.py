"""Path validation and log sanitizing for credential material.

Secret file paths come from user configuration and environment variables, so
they are validated before being opened, and neither paths nor URLs are
logged verbatim.
"""

import os
from pathlib import Path, PurePath
from urllib.parse import urlsplit

from f5xc_auth.errors import CredentialFileError

_TRAVERSAL_MARKERS = ("../", "..\\")


def validate_file_path(file_path: str | Path, allowed_base_dir: str | Path | None = None) -> Path:
    """Validate a file path and return it as an absolute path.

    Checks performed:
    - the path is non-empty
    - no NUL byte
    - no ``..`` directory traversal in the input
    - optionally, the resolved path lies inside ``allowed_base_dir``

    ``~`` is expanded before resolution.

    Raises:
        CredentialFileError: If any check fails.
    """
    raw = str(file_path) if file_path is not None else ""
    if not raw.strip():
        raise CredentialFileError("Path must be a non-empty string", path=raw)
    if "\0" in raw:
        raise CredentialFileError("Path contains null byte", path=raw)
    if any(marker in raw for marker in _TRAVERSAL_MARKERS):
        raise CredentialFileError("Path contains suspicious pattern: directory traversal (..)", path=raw)

    absolute = Path(os.path.abspath(os.path.expanduser(raw)))

    if allowed_base_dir is not None:
        base = Path(os.path.abspath(os.path.expanduser(str(allowed_base_dir))))
        if absolute != base and base not in absolute.parents:
            raise CredentialFileError(f'Path "{raw}" is outside allowed directory "{allowed_base_dir}"', path=raw)

    return absolute


def sanitize_path_for_log(file_path: str | Path | None, include_parent: bool = False) -> str:
    """Reduce a path to its file name (optionally with parent) for logging."""
    if not file_path:
        return "[not set]"
    parts = PurePath(str(file_path)).parts
    if include_parent and len(parts) >= 2:
        return f"{parts[-2]}/{parts[-1]}"
    return parts[-1] if parts else "[invalid path]"


def sanitize_url_for_log(url: str | None) -> str:
    """Drop query and fragment and partially mask the tenant label.

    Example:
        ```python
        sanitize_url_for_log("https://tenant123.console.ves.volterra.io/api/config?token=x")
        # "https://ten***.console.ves.volterra.io/api/config"
        ```
    """
    if not url:
        return "[not set]"
    try:
        parsed = urlsplit(url)
        hostname = parsed.hostname
    except ValueError:
        return "[invalid URL]"
    if not parsed.scheme or not hostname:
        return "[invalid URL]"

    labels = hostname.split(".")
    if len(labels[0]) > 3:
        labels[0] = labels[0][:3] + "***"
    host = ".".join(labels)
    if parsed.port:
        host = f"{host}:{parsed.port}"
    return f"{parsed.scheme}://{host}{parsed.path}"
