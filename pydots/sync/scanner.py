"""Directory scanning utilities for sync operations."""

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import DotsFilesystemError
from ..utils import glob_to_regex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    """Represents a file found below an enumeration root."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Path relative to the enumeration root (forward slashes on all platforms)"""

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Path to the file
            base_path: Enumeration root for calculating the relative path

        Returns:
            LocalFile instance
        """
        # Use as_posix() to ensure forward slashes on all platforms
        relative_path = file_path.relative_to(base_path).as_posix()
        return cls(path=file_path, relative_path=relative_path)


class DirectoryScanner:
    """Recursively enumerates the files below a directory.

    Every subdirectory is visited; only files are matched against the glob
    pattern. Entries that are neither files nor directories are ignored.
    Entries are visited in name order, depth first, so the result is
    deterministic for a given filesystem state.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> for f in scanner.iter_files(Path("~/.config/nvim").expanduser()):
        ...     print(f.relative_path)
    """

    DEFAULT_PATTERN = "**/*"

    def iter_files(
        self, directory: Path, pattern: Optional[str] = None
    ) -> Iterator[LocalFile]:
        """Lazily yield the files below ``directory`` matching ``pattern``.

        Args:
            directory: Enumeration root
            pattern: Glob matched against the path relative to the root
                (defaults to every file)

        Yields:
            LocalFile objects

        Raises:
            DotsFilesystemError: If a directory cannot be listed
        """
        matcher = glob_to_regex(pattern or self.DEFAULT_PATTERN)
        yield from self._walk(directory, directory, matcher)

    def scan(self, directory: Path, pattern: Optional[str] = None) -> list[LocalFile]:
        """Enumerate all matching files eagerly.

        Either the full list is returned or the error propagates; there are
        no partial results.

        Args:
            directory: Enumeration root
            pattern: Glob matched against relative paths

        Returns:
            List of LocalFile objects
        """
        return list(self.iter_files(directory, pattern))

    def _walk(
        self,
        directory: Path,
        base_path: Path,
        matcher,
        ancestors: frozenset[tuple[int, int]] = frozenset(),
    ) -> Iterator[LocalFile]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
            info = os.stat(directory)
        except OSError as e:
            raise DotsFilesystemError(
                f"Could not list directory '{directory}': {e.strerror or e}",
                path=directory,
            ) from e
        # directories on the current path, to stop at symlink loops
        ancestors = ancestors | {(info.st_dev, info.st_ino)}

        for entry in entries:
            item = Path(entry.path)
            try:
                is_dir = entry.is_dir()
                is_file = not is_dir and entry.is_file()
                if is_dir and entry.is_symlink():
                    target = entry.stat()
                    if (target.st_dev, target.st_ino) in ancestors:
                        logger.debug(f"Not following symlink loop: {item}")
                        continue
            except OSError as e:
                raise DotsFilesystemError(
                    f"Could not read '{item}': {e.strerror or e}", path=item
                ) from e

            if is_dir:
                yield from self._walk(item, base_path, matcher, ancestors)
            elif is_file:
                local_file = LocalFile.from_path(item, base_path)
                if matcher.match(local_file.relative_path):
                    yield local_file
                else:
                    logger.debug(f"Not matching pattern: {local_file.relative_path}")
