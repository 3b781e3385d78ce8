"""Settings loading from the environment."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from Sysmenu.config import Settings, get_settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.menu_profile == "all"
    assert settings.privilege_command == "sudo"
    assert settings.ping_count == 4
    assert settings.connectivity_host == "google.com"
    assert settings.dry_run is False
    assert settings.log_level == "WARNING"


def test_environment_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SYSMENU_MENU_PROFILE", "system")
    monkeypatch.setenv("SYSMENU_PING_COUNT", "2")
    monkeypatch.setenv("SYSMENU_LOG_LEVEL", "info")
    monkeypatch.setenv("SYSMENU_PRIVILEGE_COMMAND", "  doas ")
    settings = Settings()
    assert settings.menu_profile == "system"
    assert settings.ping_count == 2
    assert settings.log_level == "INFO"
    assert settings.privilege_command == "doas"


def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SYSMENU_MENU_PROFILE", "everything")
    with pytest.raises(ValidationError):
        Settings()
    with pytest.raises(ValidationError):
        Settings(menu_profile="all", ping_count=0)


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("SYSMENU_EDITOR", "vim")
    assert get_settings().editor == first.editor
    get_settings.cache_clear()
    reloaded = get_settings()
    assert reloaded is not first
    assert reloaded.editor == "vim"
