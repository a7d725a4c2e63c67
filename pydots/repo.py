"""Creation of new dotfiles repositories."""

import logging
from pathlib import Path

from git import GitCommandError, Repo

from .config import write_root_config
from .exceptions import DotsError, DotsFilesystemError, DotsPreconditionError
from .utils import is_dir_null_or_empty

logger = logging.getLogger(__name__)


def init_repository(path: Path) -> Path:
    """Initialize a dotfiles repository in an empty directory.

    Writes the default ``dotfiles.toml`` and runs ``git init``.

    Args:
        path: Directory to initialize (created if missing)

    Returns:
        Path of the written root configuration file

    Raises:
        DotsPreconditionError: If the directory is not empty
        DotsError: If the git repository cannot be created
    """
    # check that we don't accidentally populate an existing directory
    if not is_dir_null_or_empty(path):
        raise DotsPreconditionError(f"Directory '{path}' is not empty.")

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DotsFilesystemError(
            f"Could not create '{path}': {e.strerror or e}", path=path
        ) from e

    root_config = write_root_config(path)

    try:
        Repo.init(path)
    except (GitCommandError, OSError) as e:
        raise DotsError(f"Could not initialize git repository: {e}") from e

    logger.debug(f"Initialized dotfiles repository at {path}")
    return root_config
