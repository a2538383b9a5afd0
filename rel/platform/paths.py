"""User-level directory lookup.

The resolution pipeline reads user-global policy from two places:
- `<home>/.release.toml`
- `<config dir>/cargo-release/release.toml`

Both directories come from process-wide environment state, so the pipeline
reaches them only through `rel.policy.resolve.SystemPaths`; tests inject
fixed paths instead.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from .detection import is_macos, is_windows

__all__ = [
    "APP_NAME",
    "home",
    "user_config_dir",
    "clear_caches",
]

# Subdirectory of the platform config dir holding the user-global policy
APP_NAME = "cargo-release"


def _env_path(name: str) -> Path | None:
    value = os.environ.get(name)
    return Path(value) if value else None


@lru_cache(maxsize=1)
def home() -> Path:
    """The user's home directory (USERPROFILE on Windows, HOME elsewhere)."""
    return _env_path("USERPROFILE" if is_windows() else "HOME") or Path.home()


@lru_cache(maxsize=1)
def user_config_dir() -> Path:
    """The platform config root, without the `cargo-release` subfolder.

    Windows: %APPDATA%, macOS: ~/Library/Application Support,
    others: $XDG_CONFIG_HOME, falling back to ~/.config.
    """
    if is_windows():
        return _env_path("APPDATA") or home() / "AppData" / "Roaming"
    if is_macos():
        return home() / "Library" / "Application Support"
    return _env_path("XDG_CONFIG_HOME") or home() / ".config"


def clear_caches() -> None:
    """Forget cached directories, e.g. after tests change the environment."""
    home.cache_clear()
    user_config_dir.cache_clear()
