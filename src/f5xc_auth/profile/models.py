"""Profile data model.

Profiles are persisted as camelCase JSON::

    {
      "name": "prod",
      "apiUrl": "https://tenant.console.ves.volterra.io",
      "apiToken": "...",
      "defaultNamespace": "system",
      "metadata": {"createdAt": "2026-01-01T00:00:00+00:00", "rotateAfterDays": 90}
    }

YAML files may use snake_case keys (``api_url``, ``api_token``...); both
spellings are accepted on load.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any

PROFILE_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")

SECRET_FIELDS: frozenset[str] = frozenset({"api_token", "p12_bundle", "p12_password", "cert", "key"})
_STRING_FIELDS = ("api_url", "api_token", "p12_bundle", "p12_password", "cert", "key", "default_namespace", "ca_bundle")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(key: str) -> str:
    """``apiUrl`` -> ``api_url``; snake_case keys are returned unchanged."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def camel_case(key: str) -> str:
    """``api_url`` -> ``apiUrl``."""
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _as_timestamp(value: Any) -> str | None:
    # YAML loads unquoted ISO timestamps as date/datetime objects
    if isinstance(value, date):
        return value.isoformat()
    return str(value) if value is not None else None


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


@dataclass
class ProfileMetadata:
    """Rotation bookkeeping. Timestamps are ISO-8601 strings in UTC."""

    created_at: str | None = None
    last_rotated: str | None = None
    rotate_after_days: int | None = None
    expires_at: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProfileMetadata":
        values = {snake_case(k): v for k, v in data.items()}
        rotate_after_days = values.get("rotate_after_days")
        return cls(
            created_at=_as_timestamp(values.get("created_at")),
            last_rotated=_as_timestamp(values.get("last_rotated")),
            rotate_after_days=int(rotate_after_days) if rotate_after_days is not None else None,
            expires_at=_as_timestamp(values.get("expires_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return {camel_case(k): v for k, v in values.items() if v is not None}


@dataclass
class Profile:
    """A named bundle of endpoint and credential material.

    Authentication is one of ``api_token``, ``p12_bundle`` (+ optional
    ``p12_password``) or ``cert`` + ``key``. Certificate fields hold file
    paths, not file contents.
    """

    name: str
    api_url: str = ""
    api_token: str | None = None
    p12_bundle: str | None = None
    p12_password: str | None = None
    cert: str | None = None
    key: str | None = None
    default_namespace: str | None = None
    tls_insecure: bool | None = None
    ca_bundle: str | None = None
    metadata: ProfileMetadata | None = None

    def has_auth(self) -> bool:
        """True when at least one complete authentication method is present."""
        return bool(self.api_token or self.p12_bundle or (self.cert and self.key))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Profile":
        """Build a profile from camelCase or snake_case keys.

        Raises:
            ValueError: If ``data`` is not a mapping or has no ``name``.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Profile data must be a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        values = {snake_case(str(k)): v for k, v in data.items()}
        values = {k: v for k, v in values.items() if k in known}

        name = values.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("Profile data has no name")

        metadata = values.get("metadata")
        if isinstance(metadata, Mapping):
            values["metadata"] = ProfileMetadata.from_dict(metadata)
        else:
            values["metadata"] = None

        if values.get("tls_insecure") is not None:
            values["tls_insecure"] = _as_bool(values["tls_insecure"])

        for key in _STRING_FIELDS:
            if values.get(key) is not None:
                values[key] = str(values[key])

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """camelCase mapping with unset fields omitted."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, ProfileMetadata):
                value = value.to_dict()
            result[camel_case(f.name)] = value
        return result


@dataclass
class ProfileResult:
    """Outcome of a profile write operation."""

    success: bool
    message: str
    profile: Profile | None = None
    errors: list[str] = field(default_factory=list)


def days_until_expiration(profile: Profile, now: datetime) -> float | None:
    """Days until ``metadata.expires_at`` (negative once expired), or None."""
    if profile.metadata is None:
        return None
    expires_at = _parse_timestamp(profile.metadata.expires_at)
    if expires_at is None:
        return None
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=now.tzinfo)
    return (expires_at - now).total_seconds() / 86400
