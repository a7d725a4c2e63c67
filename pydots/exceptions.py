"""Exceptions raised by pydots."""

from pathlib import Path
from typing import Optional, Union


class DotsError(Exception):
    """Base exception for all pydots errors."""


class DotsConfigError(DotsError):
    """Raised when the repository structure or a configuration file is invalid."""


class DotsGlobError(DotsConfigError):
    """Raised when an exclude pattern is not a valid glob.

    Carries the offending pattern and the configuration section it came from
    so the user knows exactly which line to fix.
    """

    def __init__(self, pattern: str, source: str, reason: str = ""):
        self.pattern = pattern
        self.source = source
        self.reason = reason
        message = f"Invalid exclude pattern '{pattern}' in [{source}]"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DotsFilesystemError(DotsError):
    """Raised when reading, writing or listing the filesystem fails."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = path
        super().__init__(message)


class DotsPreconditionError(DotsError):
    """Raised when an operation would violate a safety precondition."""


class DotsTargetNotEmptyError(DotsPreconditionError):
    """Raised when a deploy target must be empty but already has files in it."""


class DotsProtectedPathError(DotsPreconditionError):
    """Raised when a pull would overwrite the configuration metadata file."""


class DotsUnsupportedPlatformError(DotsError):
    """Raised when running on an operating system pydots does not know."""
