"""Credential profile storage.

Example:
    ```python
    from f5xc_auth.profile import Profile, ProfileStore

    store = ProfileStore()
    await store.save(Profile(name="dev", api_url="https://dev.console.ves.volterra.io", api_token="..."))
    await store.set_active("dev")
    ```
"""

from f5xc_auth.profile.cache import CacheEntry, TTLCache
from f5xc_auth.profile.models import Profile, ProfileMetadata, ProfileResult, days_until_expiration
from f5xc_auth.profile.repository import CachingProfileRepository, FileProfileRepository, ProfileRepository
from f5xc_auth.profile.store import ProfileStore, mask_profile, validate_profile

__all__ = [
    "CacheEntry",
    "CachingProfileRepository",
    "FileProfileRepository",
    "Profile",
    "ProfileMetadata",
    "ProfileRepository",
    "ProfileResult",
    "ProfileStore",
    "TTLCache",
    "days_until_expiration",
    "mask_profile",
    "validate_profile",
]
