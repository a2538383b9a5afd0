"""Operating system detection.

Only the distinctions that change where user-level policy files live are
modelled: Windows and macOS have their own config roots, everything else
follows the XDG layout.
"""

from __future__ import annotations

import sys as _sys
from enum import Enum
from functools import lru_cache

__all__ = [
    "Platform",
    "detect_platform",
    "is_windows",
    "is_macos",
]


class Platform(Enum):
    """Operating system family, keyed by its user-directory conventions."""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    UNKNOWN = "unknown"

    @classmethod
    def from_sys_platform(cls, value: str) -> Platform:
        """Map a `sys.platform` string (`linux`, `darwin`, `win32`, ...)."""
        value = value.lower()
        match value:
            case "darwin":
                return cls.MACOS
            case "win32" | "cygwin" | "msys":
                return cls.WINDOWS
            case _ if value.startswith("linux"):
                return cls.LINUX
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Platform of the running interpreter (cached)."""
    # sys.platform rather than platform.system(): the latter may query WMI on Windows
    return Platform.from_sys_platform(_sys.platform)


def is_windows() -> bool:
    return detect_platform() is Platform.WINDOWS


def is_macos() -> bool:
    return detect_platform() is Platform.MACOS
