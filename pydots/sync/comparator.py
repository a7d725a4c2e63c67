"""Per-file decisions for deploy and pull."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..exceptions import DotsFilesystemError
from ..utils import CONFIG_FILE_NAME, normalize_relative_path
from .diff import decode_text
from .exclude import ExcludeMatcher
from .scanner import LocalFile


class SyncAction(str, Enum):
    """Actions that can be taken for a file."""

    COPY = "copy"
    """Deploy: copy repository file to the target"""

    ADD = "add"
    """Pull: file does not exist in the repository yet"""

    MODIFY = "modify"
    """Pull: text file differs from the repository copy"""

    MODIFY_BINARY = "modify_binary"
    """Pull: file differs but at least one side is not text"""

    UNCHANGED = "unchanged"
    """Pull: repository copy is identical"""

    EXCLUDED = "excluded"
    """Matched an exclude pattern"""

    PROTECTED = "protected"
    """Relative path is the configuration metadata file"""

    SKIP = "skip"
    """Source vanished, nothing to do"""


# Pull actions that show a preview and ask before copying
CONFIRMED_ACTIONS = frozenset({SyncAction.ADD, SyncAction.MODIFY, SyncAction.MODIFY_BINARY})


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    relative_path: str
    """Path relative to the enumeration root"""

    source: Path
    """File that would be copied"""

    destination: Path
    """Where it would be copied to"""

    old_text: Optional[str] = None
    """Pull: decoded repository copy (MODIFY only)"""

    new_text: Optional[str] = None
    """Pull: decoded live copy (MODIFY only)"""

    @property
    def requires_confirmation(self) -> bool:
        return self.action in CONFIRMED_ACTIONS


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise DotsFilesystemError(
            f"Could not read '{path}': {e.strerror or e}", path=path
        ) from e


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError as e:
        raise DotsFilesystemError(
            f"Could not inspect '{path}': {e.strerror or e}", path=path
        ) from e


def _exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError as e:
        raise DotsFilesystemError(
            f"Could not inspect '{path}': {e.strerror or e}", path=path
        ) from e


class FileComparator:
    """Decides what happens to each enumerated file."""

    def __init__(
        self,
        exclude: Optional[ExcludeMatcher] = None,
        protected_path: str = CONFIG_FILE_NAME,
        case_sensitive: bool = True,
    ):
        """Initialize file comparator.

        Args:
            exclude: Exclude patterns for this direction
            protected_path: Relative path that is never copied implicitly
            case_sensitive: Whether path comparisons are case sensitive
        """
        self.exclude = exclude or ExcludeMatcher()
        self.case_sensitive = case_sensitive
        self.protected_path = normalize_relative_path(protected_path, case_sensitive)

    def is_protected(self, relative_path: str) -> bool:
        """Check whether ``relative_path`` is the protected metadata file."""
        return (
            normalize_relative_path(relative_path, self.case_sensitive)
            == self.protected_path
        )

    def decide_deploy(self, local_file: LocalFile, destination_root: Path) -> SyncDecision:
        """Decide what to do with a repository file during deploy.

        Args:
            local_file: File from the configuration directory
            destination_root: Resolved deploy target

        Returns:
            SyncDecision for this file
        """
        path = local_file.relative_path
        destination = destination_root / path

        if self.exclude.is_excluded(path):
            return SyncDecision(
                SyncAction.EXCLUDED, "Matches exclude pattern", path, local_file.path, destination
            )
        if self.is_protected(path):
            return SyncDecision(
                SyncAction.PROTECTED, "Configuration file", path, local_file.path, destination
            )
        return SyncDecision(
            SyncAction.COPY, "Deploy", path, local_file.path, destination
        )

    def decide_pull(self, local_file: LocalFile, destination_root: Path) -> SyncDecision:
        """Decide what to do with a live file during pull.

        Exclusion is checked first, so an excluded metadata file is simply
        skipped. A non-excluded metadata file yields PROTECTED and the caller
        must abort.

        Args:
            local_file: File from the live system
            destination_root: Configuration directory in the repository

        Returns:
            SyncDecision for this file
        """
        path = local_file.relative_path
        destination = destination_root / path

        if self.exclude.is_excluded(path):
            return SyncDecision(
                SyncAction.EXCLUDED, "Matches exclude pattern", path, local_file.path, destination
            )
        if self.is_protected(path):
            return SyncDecision(
                SyncAction.PROTECTED,
                f"Would overwrite {CONFIG_FILE_NAME}",
                path,
                local_file.path,
                destination,
            )
        return self.classify_pull(path, local_file.path, destination)

    def classify_pull(self, relative_path: str, source: Path, destination: Path) -> SyncDecision:
        """Compare the live file with its repository copy.

        Args:
            relative_path: Path relative to both roots
            source: Live file
            destination: Repository file

        Returns:
            SyncDecision for this file
        """
        if not _is_file(source):
            return SyncDecision(
                SyncAction.SKIP, "Source no longer exists", relative_path, source, destination
            )

        if not _exists(destination):
            return SyncDecision(
                SyncAction.ADD, "New file", relative_path, source, destination
            )

        new_bytes = _read_bytes(source)
        old_bytes = _read_bytes(destination)
        if new_bytes == old_bytes:
            return SyncDecision(
                SyncAction.UNCHANGED, "Files are identical", relative_path, source, destination
            )

        new_text = decode_text(new_bytes)
        old_text = decode_text(old_bytes)
        if new_text is None or old_text is None:
            return SyncDecision(
                SyncAction.MODIFY_BINARY,
                "Files differ (not text)",
                relative_path,
                source,
                destination,
            )

        return SyncDecision(
            SyncAction.MODIFY,
            "Files differ",
            relative_path,
            source,
            destination,
            old_text=old_text,
            new_text=new_text,
        )
