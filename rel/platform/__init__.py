"""Platform abstraction layer."""

from .detection import Platform, detect_platform, is_macos, is_windows
from .paths import clear_caches, home, user_config_dir

__all__ = [
    # detection
    "Platform",
    "detect_platform",
    "is_macos",
    "is_windows",
    # paths
    "clear_caches",
    "home",
    "user_config_dir",
]
