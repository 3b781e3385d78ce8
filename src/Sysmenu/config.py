"""Runtime settings for Sysmenu.

Every field can be overridden through a ``SYSMENU_`` prefixed environment
variable (``SYSMENU_MENU_PROFILE=system``) or through the launch flags in
``__main__``. Defaults reproduce the behaviour of the plain interactive menu.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

MenuProfile = Literal["all", "system", "files"]


class Settings(BaseSettings):
    """Sysmenu settings."""

    model_config = SettingsConfigDict(
        env_prefix="SYSMENU_",
        case_sensitive=False,
        extra="ignore",
    )

    # Menu
    menu_profile: MenuProfile = "all"

    # Delegated tools
    privilege_command: str = "sudo"
    editor: str = "nano"
    zoneinfo_dir: str = "/usr/share/zoneinfo"
    connectivity_host: str = "google.com"
    ping_count: int = Field(default=4, ge=1)
    process_list_limit: int = Field(default=10, ge=1)
    timezone_sample_size: int = Field(default=5, ge=1)
    flathub_url: str = "https://flathub.org/repo/flathub.flatpakrepo"

    # Runtime
    dry_run: bool = False
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return str(value or "WARNING").strip().upper()

    @field_validator("privilege_command")
    @classmethod
    def _strip_privilege_command(cls, value: str) -> str:
        return str(value or "").strip()


@lru_cache
def get_settings() -> Settings:
    """Get the cached Settings instance; ``get_settings.cache_clear()`` reloads."""
    settings = Settings()
    logger.debug("Loaded settings: profile=%s dry_run=%s", settings.menu_profile, settings.dry_run)
    return settings
