"""Profile persistence.

:class:`ProfileRepository` is the storage interface the profile store talks
to. :class:`FileProfileRepository` keeps one file per profile under
``<config>/profiles`` and the active profile name in ``<config>/active_profile``,
all owner-only. :class:`CachingProfileRepository` wraps any repository with a
TTL cache.
"""

import asyncio
import copy
import json
import logging
import os
from pathlib import Path
from typing import Protocol

import yaml

from f5xc_auth.config.paths import AppPaths
from f5xc_auth.profile.cache import DEFAULT_TTL, TTLCache
from f5xc_auth.profile.models import Profile

logger = logging.getLogger(__name__)

PROFILE_EXTENSIONS: tuple[str, ...] = (".json", ".yaml", ".yml")

FILE_MODE = 0o600
DIR_MODE = 0o700


class ProfileRepository(Protocol):
    """Storage interface for profiles and the active profile pointer.

    Missing or unreadable profiles are reported as ``None``; write failures
    raise ``OSError``.
    """

    async def read(self, name: str) -> Profile | None: ...

    async def write(self, profile: Profile) -> None: ...

    async def remove(self, name: str) -> bool: ...

    async def list_names(self) -> list[str]: ...

    async def read_active(self) -> str | None: ...

    async def write_active(self, name: str) -> None: ...

    async def clear_active(self) -> None: ...


def _write_private(path: Path, content: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(content)
    # O_CREAT's mode does not apply to files that already existed
    os.chmod(path, FILE_MODE)


def parse_profile_text(text: str, suffix: str) -> Profile:
    """Parse profile file contents.

    Raises:
        ValueError: On malformed JSON/YAML or invalid profile data.
    """
    if suffix == ".json":
        data = json.loads(text)
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML: {e}") from e
    return Profile.from_dict(data)


class FileProfileRepository:
    """Profiles stored as files in an owner-only directory.

    Args:
        paths: File locations. Defaults to the XDG config directory.

    Example:
        ```python
        repository = FileProfileRepository(AppPaths(config_dir="/tmp/f5xc"))
        await repository.write(Profile(name="dev", api_url="https://dev.volterra.us", api_token="..."))
        ```
    """

    def __init__(self, paths: AppPaths | None = None):
        self.paths = paths or AppPaths()

    def ensure_directories(self) -> None:
        """Create the config and profiles directories with mode 0700."""
        for directory in (self.paths.config_dir, self.paths.profiles_dir):
            directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            os.chmod(directory, DIR_MODE)

    def _profile_path(self, name: str, suffix: str = ".json") -> Path:
        return self.paths.profiles_dir / f"{name}{suffix}"

    def _read_sync(self, name: str) -> Profile | None:
        for suffix in PROFILE_EXTENSIONS:
            path = self._profile_path(name, suffix)
            try:
                text = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                continue
            except UnicodeDecodeError as e:
                logger.warning(f"Ignoring corrupt profile file {path.name}: {e}")
                return None
            except OSError as e:
                logger.warning(f"Cannot read profile file {path.name}: {e}")
                continue
            try:
                return parse_profile_text(text, suffix)
            except (ValueError, TypeError) as e:
                logger.warning(f"Ignoring corrupt profile file {path.name}: {e}")
                return None
        return None

    async def read(self, name: str) -> Profile | None:
        return await asyncio.to_thread(self._read_sync, name)

    def _write_sync(self, profile: Profile) -> None:
        self.ensure_directories()
        _write_private(self._profile_path(profile.name), json.dumps(profile.to_dict(), indent=2))

    async def write(self, profile: Profile) -> None:
        await asyncio.to_thread(self._write_sync, profile)

    def _remove_sync(self, name: str) -> bool:
        removed = False
        for suffix in PROFILE_EXTENSIONS:
            try:
                self._profile_path(name, suffix).unlink()
                removed = True
            except FileNotFoundError:
                continue
        return removed

    async def remove(self, name: str) -> bool:
        return await asyncio.to_thread(self._remove_sync, name)

    def _list_names_sync(self) -> list[str]:
        try:
            entries = list(self.paths.profiles_dir.iterdir())
        except FileNotFoundError:
            return []
        names = {entry.stem for entry in entries if entry.suffix in PROFILE_EXTENSIONS and entry.is_file()}
        return sorted(names)

    async def list_names(self) -> list[str]:
        return await asyncio.to_thread(self._list_names_sync)

    def _read_active_sync(self) -> str | None:
        try:
            name = self.paths.active_profile.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Ignoring corrupt active profile pointer: {e}")
            return None
        return name or None

    async def read_active(self) -> str | None:
        return await asyncio.to_thread(self._read_active_sync)

    def _write_active_sync(self, name: str) -> None:
        self.ensure_directories()
        _write_private(self.paths.active_profile, name)

    async def write_active(self, name: str) -> None:
        await asyncio.to_thread(self._write_active_sync, name)

    def _clear_active_sync(self) -> None:
        try:
            self.paths.active_profile.unlink()
        except FileNotFoundError:
            pass

    async def clear_active(self) -> None:
        await asyncio.to_thread(self._clear_active_sync)


class CachingProfileRepository:
    """TTL cache in front of another :class:`ProfileRepository`.

    Reads inside the TTL window are served from memory as deep copies;
    ``write`` and ``remove`` invalidate exactly the entry they touch before
    returning. The active pointer is never cached.

    Args:
        repository: The backing repository.
        cache: Cache instance. Defaults to a 5 minute TTL cache.
    """

    def __init__(self, repository: ProfileRepository, cache: TTLCache[Profile] | None = None):
        self.repository = repository
        self.cache: TTLCache[Profile] = cache if cache is not None else TTLCache(default_ttl=DEFAULT_TTL)

    async def read(self, name: str) -> Profile | None:
        cached = self.cache.get(name)
        if cached is not None:
            logger.debug(f"Profile cache hit: {name}")
            return copy.deepcopy(cached)

        profile = await self.repository.read(name)
        if profile is not None:
            self.cache.set(name, copy.deepcopy(profile))
        return profile

    def is_cached(self, name: str) -> bool:
        return self.cache.has(name)

    async def write(self, profile: Profile) -> None:
        try:
            await self.repository.write(profile)
        finally:
            self.cache.invalidate(profile.name)

    async def remove(self, name: str) -> bool:
        try:
            return await self.repository.remove(name)
        finally:
            self.cache.invalidate(name)

    async def list_names(self) -> list[str]:
        return await self.repository.list_names()

    async def read_active(self) -> str | None:
        return await self.repository.read_active()

    async def write_active(self, name: str) -> None:
        await self.repository.write_active(name)

    async def clear_active(self) -> None:
        await self.repository.clear_active()
