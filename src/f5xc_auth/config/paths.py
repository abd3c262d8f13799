"""XDG Base Directory compliant paths for F5 XC configuration.

See: https://specifications.freedesktop.org/basedir/latest/

Default locations:
- Config (profiles, active profile pointer): ``~/.config/f5xc/``
- State: ``~/.local/state/f5xc/``

Both honour ``XDG_CONFIG_HOME`` / ``XDG_STATE_HOME``.
"""

import os
from collections.abc import Mapping
from pathlib import Path

APP_NAME = "f5xc"

PROFILES_DIR_NAME = "profiles"
ACTIVE_PROFILE_FILE_NAME = "active_profile"


def get_config_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return the config directory, honouring ``XDG_CONFIG_HOME``."""
    environ = os.environ if environ is None else environ
    xdg_config = environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_state_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return the state directory, honouring ``XDG_STATE_HOME``."""
    environ = os.environ if environ is None else environ
    xdg_state = environ.get("XDG_STATE_HOME")
    if xdg_state:
        return Path(xdg_state) / APP_NAME
    return Path.home() / ".local" / "state" / APP_NAME


class AppPaths:
    """File locations derived from a config root.

    Args:
        config_dir: Root directory. Defaults to :func:`get_config_dir`.
        state_dir: State directory. Defaults to :func:`get_state_dir`.
    """

    def __init__(self, config_dir: str | Path | None = None, state_dir: str | Path | None = None):
        self.config_dir = Path(config_dir) if config_dir is not None else get_config_dir()
        self.state_dir = Path(state_dir) if state_dir is not None else get_state_dir()

    @property
    def profiles_dir(self) -> Path:
        return self.config_dir / PROFILES_DIR_NAME

    @property
    def active_profile(self) -> Path:
        return self.config_dir / ACTIVE_PROFILE_FILE_NAME

    def __repr__(self) -> str:
        return f"AppPaths(config_dir={str(self.config_dir)!r}, state_dir={str(self.state_dir)!r})"
