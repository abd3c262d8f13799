"""Filesystem locations used by the profile store."""

from f5xc_auth.config.paths import AppPaths, get_config_dir, get_state_dir

__all__ = ["AppPaths", "get_config_dir", "get_state_dir"]
