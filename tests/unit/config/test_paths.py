"""Tests for XDG path resolution."""

from pathlib import Path

import pytest

from f5xc_auth.config.paths import AppPaths, get_config_dir, get_state_dir


class TestConfigDirs:
    """Test XDG base directory handling."""

    @pytest.mark.unit
    def test_config_dir_honours_xdg(self):
        assert get_config_dir({"XDG_CONFIG_HOME": "/xdg/config"}) == Path("/xdg/config/f5xc")

    @pytest.mark.unit
    def test_config_dir_default(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_config_dir({}) == tmp_path / ".config" / "f5xc"

    @pytest.mark.unit
    def test_state_dir_honours_xdg(self):
        assert get_state_dir({"XDG_STATE_HOME": "/xdg/state"}) == Path("/xdg/state/f5xc")

    @pytest.mark.unit
    def test_state_dir_default(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_state_dir({"XDG_STATE_HOME": ""}) == tmp_path / ".local" / "state" / "f5xc"

    @pytest.mark.unit
    def test_process_environment(self, tmp_path):
        # clear_env points XDG_CONFIG_HOME at tmp_path
        assert get_config_dir() == tmp_path / "xdg-config" / "f5xc"


class TestAppPaths:
    """Test AppPaths layout."""

    @pytest.mark.unit
    def test_layout(self, tmp_path):
        paths = AppPaths(config_dir=tmp_path / "cfg", state_dir=tmp_path / "state")

        assert paths.profiles_dir == tmp_path / "cfg" / "profiles"
        assert paths.active_profile == tmp_path / "cfg" / "active_profile"

    @pytest.mark.unit
    def test_defaults_follow_environment(self, tmp_path):
        paths = AppPaths()

        assert paths.config_dir == tmp_path / "xdg-config" / "f5xc"
        assert paths.state_dir == tmp_path / "xdg-state" / "f5xc"
