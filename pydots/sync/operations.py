"""File operations used by deploy and pull."""

import logging
import os
import shutil
import tempfile
from pathlib import Path

from ..exceptions import DotsFilesystemError

logger = logging.getLogger(__name__)


class SyncOperations:
    """Copies files between the repository and the live system."""

    def __init__(self, dry_run: bool = False):
        """Initialize sync operations.

        Args:
            dry_run: If True, log copies instead of performing them
        """
        self.dry_run = dry_run

    def ensure_directory(self, directory: Path) -> None:
        """Create ``directory`` and its parents if missing."""
        if self.dry_run:
            return
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DotsFilesystemError(
                f"Could not create directory '{directory}': {e.strerror or e}",
                path=directory,
            ) from e

    def copy_file(self, source: Path, destination: Path) -> Path:
        """Copy ``source`` over ``destination``.

        Missing parent directories are created. The bytes are written to a
        temporary file next to the destination which then replaces it, so an
        interrupted copy never leaves a truncated destination behind.

        Args:
            source: File to copy
            destination: Where to copy it, overwritten if present

        Returns:
            The destination path

        Raises:
            DotsFilesystemError: If reading or writing fails
        """
        if self.dry_run:
            logger.debug(f"Dry run, not copying {source} -> {destination}")
            return destination

        self.ensure_directory(destination.parent)

        try:
            fd, temp_path = tempfile.mkstemp(
                dir=destination.parent,
                prefix=f".{destination.name}.",
                suffix=".tmp",
            )
        except OSError as e:
            raise DotsFilesystemError(
                f"Could not write to '{destination.parent}': {e.strerror or e}",
                path=destination,
            ) from e

        try:
            with os.fdopen(fd, "wb") as out, open(source, "rb") as src:
                shutil.copyfileobj(src, out)
                out.flush()
                os.fsync(out.fileno())
            shutil.copymode(source, temp_path)
            os.replace(temp_path, destination)
        except OSError as e:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise DotsFilesystemError(
                f"Could not copy '{source}' to '{destination}': {e.strerror or e}",
                path=destination,
            ) from e

        logger.debug(f"Copied {source} -> {destination}")
        return destination
