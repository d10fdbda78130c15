from __future__ import annotations

import sys
from enum import Enum
from typing import Optional


class Platform(str, Enum):
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    OTHER = "other"


def platform_from_sys(value: str) -> Platform:
    """Map a ``sys.platform`` string onto the closed Platform enumeration."""
    if value.startswith("linux"):
        return Platform.LINUX
    if value == "darwin":
        return Platform.MACOS
    if value == "win32":
        return Platform.WINDOWS
    return Platform.OTHER


def current_platform(override: Optional[Platform] = None) -> Platform:
    if override is not None:
        return override
    return platform_from_sys(sys.platform)
