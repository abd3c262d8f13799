"""Profile store: validated, cached, rotatable credential profiles.

Lookups never raise: a missing or corrupt profile is ``None`` so credential
resolution can fall through to the next source. Writes return a
:class:`ProfileResult` instead of raising.

Example:
    ```python
    store = ProfileStore()

    result = await store.save(
        Profile(name="prod", api_url="https://acme.console.ves.volterra.io", api_token="...")
    )
    await store.set_active("prod")

    profile = await store.get_active_profile()
    print(store.mask_profile(profile))
    ```
"""

import copy
import dataclasses
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from urllib.parse import urlsplit

from f5xc_auth.errors import ValidationError
from f5xc_auth.profile.cache import DEFAULT_TTL, TTLCache
from f5xc_auth.profile.models import (
    PROFILE_NAME_PATTERN,
    SECRET_FIELDS,
    Profile,
    ProfileMetadata,
    ProfileResult,
    days_until_expiration,
)
from f5xc_auth.profile.repository import CachingProfileRepository, FileProfileRepository, ProfileRepository

logger = logging.getLogger(__name__)

EXPIRY_WARNING_DAYS = 7

MASK = "****"
CONFIGURED_PLACEHOLDER = "[configured]"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def validate_profile(profile: Profile) -> list[ValidationError]:
    """Return every validation failure for ``profile`` (empty when valid)."""
    errors: list[ValidationError] = []

    if not isinstance(profile.name, str) or not PROFILE_NAME_PATTERN.fullmatch(profile.name):
        errors.append(
            ValidationError(
                "Invalid profile name: use 1-64 letters, digits, '-' or '_'",
                field="name",
                context={"value": profile.name},
            )
        )

    try:
        parsed = urlsplit(profile.api_url or "")
        valid_url = parsed.scheme in ("http", "https") and bool(parsed.hostname)
    except ValueError:
        valid_url = False
    if not valid_url:
        errors.append(
            ValidationError(
                "Invalid API URL: expected an http(s) URL such as https://tenant.console.ves.volterra.io",
                field="api_url",
                context={"value": profile.api_url},
            )
        )

    if not profile.has_auth():
        errors.append(
            ValidationError(
                "Profile must define an authentication method: api_token, p12_bundle, or cert and key",
                field="auth",
            )
        )

    return errors


def mask_profile(profile: Profile) -> Profile:
    """Return a copy of ``profile`` that is safe to display.

    The token keeps only its last 4 characters (``****1234``; ``****`` for
    tokens of 4 characters or fewer), file-backed secrets become
    ``[configured]`` and the p12 password becomes ``****``.
    """
    token = profile.api_token
    if token:
        token = MASK + token[-4:] if len(token) > 4 else MASK

    return dataclasses.replace(
        profile,
        api_token=token,
        p12_bundle=CONFIGURED_PLACEHOLDER if profile.p12_bundle else profile.p12_bundle,
        p12_password=MASK if profile.p12_password else profile.p12_password,
        cert=CONFIGURED_PLACEHOLDER if profile.cert else profile.cert,
        key=CONFIGURED_PLACEHOLDER if profile.key else profile.key,
        metadata=copy.deepcopy(profile.metadata),
    )


class ProfileStore:
    """Durable storage of named profiles plus the active profile pointer.

    Args:
        repository: Backing storage. Defaults to :class:`FileProfileRepository`
            under the XDG config directory.
        cache_ttl: Seconds a loaded profile is served from memory.
        now: Wall clock returning an aware ``datetime``; used for rotation
            timestamps and expiry checks.
        cache_clock: Monotonic clock for the TTL cache.
    """

    def __init__(
        self,
        repository: ProfileRepository | None = None,
        *,
        cache_ttl: float = DEFAULT_TTL,
        now: Callable[[], datetime] = _utcnow,
        cache_clock: Callable[[], float] = time.monotonic,
    ):
        self._repository = CachingProfileRepository(
            repository if repository is not None else FileProfileRepository(),
            TTLCache(default_ttl=cache_ttl, clock=cache_clock),
        )
        self._now = now

    @property
    def cache(self) -> TTLCache[Profile]:
        return self._repository.cache

    async def list(self) -> list[Profile]:
        """All readable profiles, ordered by name. Corrupt files are skipped."""
        profiles = []
        for name in await self._repository.list_names():
            profile = await self.get(name)
            if profile is None:
                logger.warning(f"Skipping unreadable profile '{name}'")
                continue
            profiles.append(profile)
        return sorted(profiles, key=lambda p: p.name)

    async def get(self, name: str) -> Profile | None:
        """Return the profile, or None when it is missing or unparsable."""
        if not PROFILE_NAME_PATTERN.fullmatch(name or ""):
            return None

        was_cached = self._repository.is_cached(name)
        profile = await self._repository.read(name)
        if profile is not None and not was_cached:
            self._check_expiration(profile)
        return profile

    async def exists(self, name: str) -> bool:
        return await self.get(name) is not None

    async def save(self, profile: Profile) -> ProfileResult:
        """Validate and persist ``profile`` (mode 0600, directory 0700)."""
        errors = validate_profile(profile)
        if errors:
            return ProfileResult(
                success=False,
                message="; ".join(e.message for e in errors),
                errors=[e.message for e in errors],
            )

        profile = copy.deepcopy(profile)
        if profile.metadata is None:
            profile.metadata = ProfileMetadata()
        if profile.metadata.created_at is None:
            profile.metadata.created_at = self._now().isoformat()

        try:
            await self._repository.write(profile)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save profile '{profile.name}': {e}")
            return ProfileResult(success=False, message=f"Failed to save profile '{profile.name}': {e}")

        logger.info(f"Profile '{profile.name}' saved")
        return ProfileResult(success=True, message=f"Profile '{profile.name}' saved successfully", profile=profile)

    async def delete(self, name: str) -> ProfileResult:
        """Delete a profile. Refused while it is the active profile."""
        if not PROFILE_NAME_PATTERN.fullmatch(name or ""):
            return ProfileResult(success=False, message=f"Profile '{name}' not found")

        if await self._repository.read(name) is None and name not in await self._repository.list_names():
            return ProfileResult(success=False, message=f"Profile '{name}' not found")

        if await self.get_active() == name:
            return ProfileResult(
                success=False,
                message=(
                    f"Cannot delete active profile '{name}'. "
                    "Switch to another profile or clear the active profile first."
                ),
            )

        try:
            await self._repository.remove(name)
        except OSError as e:
            logger.error(f"Failed to delete profile '{name}': {e}")
            return ProfileResult(success=False, message=f"Failed to delete profile '{name}': {e}")

        logger.info(f"Profile '{name}' deleted")
        return ProfileResult(success=True, message=f"Profile '{name}' deleted successfully")

    async def set_active(self, name: str) -> ProfileResult:
        profile = await self.get(name)
        if profile is None:
            return ProfileResult(success=False, message=f"Profile '{name}' not found")

        try:
            await self._repository.write_active(name)
        except OSError as e:
            return ProfileResult(success=False, message=f"Failed to set active profile: {e}")

        logger.info(f"Active profile set to '{name}'")
        return ProfileResult(success=True, message=f"Switched to profile '{name}'", profile=profile)

    async def get_active(self) -> str | None:
        """Name in the active profile pointer, or None when unset."""
        try:
            return await self._repository.read_active()
        except OSError as e:
            logger.warning(f"Cannot read active profile pointer: {e}")
            return None

    async def get_active_profile(self) -> Profile | None:
        name = await self.get_active()
        if name is None:
            return None
        profile = await self.get(name)
        if profile is None:
            logger.warning(f"Active profile '{name}' does not exist or is unreadable")
        return profile

    async def clear_active(self) -> ProfileResult:
        try:
            await self._repository.clear_active()
        except OSError as e:
            return ProfileResult(success=False, message=f"Failed to clear active profile: {e}")
        return ProfileResult(success=True, message="Active profile cleared")

    async def rotate_credential(self, name: str, **secrets: str) -> ProfileResult:
        """Replace secret fields of a profile and stamp rotation metadata.

        Only the supplied fields change. ``metadata.last_rotated`` is set to
        now, and ``metadata.expires_at`` is recomputed when
        ``rotate_after_days`` is configured.

        Args:
            name: Profile to rotate.
            **secrets: Any of ``api_token``, ``p12_bundle``, ``p12_password``,
                ``cert``, ``key``.
        """
        unknown = sorted(set(secrets) - SECRET_FIELDS)
        if unknown:
            return ProfileResult(
                success=False,
                message=f"Cannot rotate non-credential field(s): {', '.join(unknown)}",
            )
        if not secrets:
            return ProfileResult(success=False, message="No credential fields supplied for rotation")

        profile = await self.get(name)
        if profile is None:
            return ProfileResult(success=False, message=f"Profile '{name}' not found")

        for field_name, value in secrets.items():
            setattr(profile, field_name, value)

        now = self._now()
        metadata = profile.metadata or ProfileMetadata(created_at=now.isoformat())
        metadata.last_rotated = now.isoformat()
        if metadata.rotate_after_days:
            metadata.expires_at = (now + timedelta(days=metadata.rotate_after_days)).isoformat()
        profile.metadata = metadata

        result = await self.save(profile)
        if not result.success:
            return ProfileResult(success=False, message=f"Rotation failed: {result.message}", errors=result.errors)

        logger.info(f"Credentials rotated for profile '{name}' (fields: {', '.join(sorted(secrets))})")
        return ProfileResult(
            success=True,
            message=f"Credentials rotated successfully for profile '{name}'",
            profile=result.profile,
        )

    def mask_profile(self, profile: Profile) -> Profile:
        return mask_profile(profile)

    def _check_expiration(self, profile: Profile) -> None:
        days = days_until_expiration(profile, self._now())
        if days is None:
            return
        if days < 0:
            logger.warning(f"Credentials for profile '{profile.name}' expired {int(-days)} day(s) ago")
        elif days <= EXPIRY_WARNING_DAYS:
            logger.info(f"Credentials for profile '{profile.name}' expire in {int(days)} day(s); consider rotating")
