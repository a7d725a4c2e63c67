"""pydots - keep your dotfiles in a git repository and deploy them anywhere."""

from .config import Configuration, PullSpec, TargetSpec
from .exceptions import (
    DotsConfigError,
    DotsError,
    DotsFilesystemError,
    DotsGlobError,
    DotsPreconditionError,
    DotsProtectedPathError,
    DotsTargetNotEmptyError,
    DotsUnsupportedPlatformError,
)
from .platforms import Platform, current_platform
from .structure import Structure
from .sync import SyncEngine

__all__ = [
    "Configuration",
    "PullSpec",
    "TargetSpec",
    "Structure",
    "SyncEngine",
    "Platform",
    "current_platform",
    "DotsError",
    "DotsConfigError",
    "DotsGlobError",
    "DotsFilesystemError",
    "DotsPreconditionError",
    "DotsProtectedPathError",
    "DotsTargetNotEmptyError",
    "DotsUnsupportedPlatformError",
]
