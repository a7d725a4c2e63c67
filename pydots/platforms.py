"""Operating system detection for target resolution."""

import sys
from enum import Enum
from typing import Optional

from .exceptions import DotsUnsupportedPlatformError


class Platform(str, Enum):
    """Operating systems a configuration can be deployed to."""

    WINDOWS = "windows"
    LINUX = "linux"


_SYS_PLATFORMS = {
    "win32": Platform.WINDOWS,
    "cygwin": Platform.WINDOWS,
    "linux": Platform.LINUX,
}


def current_platform(sys_platform: Optional[str] = None) -> Platform:
    """Return the platform pydots is running on.

    Args:
        sys_platform: Value to map instead of ``sys.platform`` (for tests)

    Returns:
        The matching Platform

    Raises:
        DotsUnsupportedPlatformError: If the operating system is not supported
    """
    value = sys_platform if sys_platform is not None else sys.platform
    key = "linux" if value.startswith("linux") else value
    try:
        return _SYS_PLATFORMS[key]
    except KeyError:
        raise DotsUnsupportedPlatformError(
            f"Operating system '{value}' is not supported."
        ) from None
