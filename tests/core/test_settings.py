"""Tests for core.settings module.

Covers:
- UsysconfSettings defaults
- Environment variable override
- Cached process settings
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from usysconf.core.settings import UsysconfSettings, get_settings, reset_settings


class TestUsysconfSettingsDefaults:
    def test_default_log_dir(self):
        assert UsysconfSettings().log_dir == Path("/var/log/usysconf")

    def test_default_state_file(self):
        assert UsysconfSettings().state_file == Path("/var/lib/usysconf/status.json")

    def test_log_file_joins_dir_and_name(self):
        s = UsysconfSettings()
        assert s.log_file == Path("/var/log/usysconf/usysconf.log")

    def test_requires_root_by_default(self):
        assert UsysconfSettings().require_root is True

    def test_default_log_level(self):
        assert UsysconfSettings().log_level == "INFO"


class TestUsysconfSettingsEnvOverride:
    def test_log_dir_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("USYSCONF_LOG_DIR", str(tmp_path))
        assert UsysconfSettings().log_dir == tmp_path

    def test_require_root_from_env(self, monkeypatch):
        monkeypatch.setenv("USYSCONF_REQUIRE_ROOT", "false")
        assert UsysconfSettings().require_root is False

    def test_invalid_log_format_rejected(self, monkeypatch):
        monkeypatch.setenv("USYSCONF_LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            UsysconfSettings()


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_reset_picks_up_env(self, monkeypatch, tmp_path):
        get_settings()
        monkeypatch.setenv("USYSCONF_STATE_FILE", str(tmp_path / "s.json"))
        reset_settings()
        assert get_settings().state_file == tmp_path / "s.json"
