"""Runtime settings for usysconf.

The trigger runner has a handful of fixed filesystem locations (the run log
directory and the state file) plus logging knobs.  ``UsysconfSettings``
declares them with their production defaults and lets the environment
override any of them, which is how tests and image builders point a run at
scratch locations.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not mid-run
    - **Environment-driven:** ``USYSCONF_*`` env vars and an optional .env file
    - **Sensible defaults:** The production paths work out of the box

Examples:
    >>> from usysconf.core.settings import UsysconfSettings
    >>> UsysconfSettings().log_file
    PosixPath('/var/log/usysconf/usysconf.log')

Tags:
    settings, configuration, pydantic, environment, usysconf

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class UsysconfSettings(BaseSettings):
    """Settings shared by the CLI and the dispatch engine.

    Fields
    ──────
    log_dir       : Directory receiving the persistent run log
    log_file_name : File name of the run log inside ``log_dir``
    state_file    : Persisted path -> fingerprint mapping
    log_level     : Structlog log level
    log_format    : ``console`` or ``json`` for the stderr stream
    require_root  : Refuse to run triggers unless euid is 0
    """

    model_config = SettingsConfigDict(
        env_prefix="USYSCONF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Filesystem ───────────────────────────────────────────────
    log_dir: Path = Field(
        default=Path("/var/log/usysconf"),
        description="Run log directory, created on demand",
    )
    log_file_name: str = "usysconf.log"
    state_file: Path = Field(
        default=Path("/var/lib/usysconf/status.json"),
        description="Persisted fingerprints of processed paths",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # ── Policy ───────────────────────────────────────────────────
    require_root: bool = True

    @property
    def log_file(self) -> Path:
        return self.log_dir / self.log_file_name


@lru_cache(maxsize=1)
def get_settings() -> UsysconfSettings:
    """Return the process-wide settings instance."""
    return UsysconfSettings()


def reset_settings() -> None:
    """Drop the cached settings (for testing)."""
    get_settings.cache_clear()
