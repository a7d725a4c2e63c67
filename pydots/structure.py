"""Discovery of the configurations in a dotfiles repository."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import Configuration, RootConfiguration
from .exceptions import DotsConfigError, DotsFilesystemError
from .utils import CONFIG_FILE_NAME, ROOT_CONFIG_NAME

logger = logging.getLogger(__name__)


def find_repository_root(start: Path) -> Optional[Path]:
    """Walk up from ``start`` looking for a ``dotfiles.toml``.

    Args:
        start: Directory to start from

    Returns:
        The repository root, or None if ``start`` is not inside a repository
    """
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / ROOT_CONFIG_NAME).is_file():
            return candidate
    return None


@dataclass
class Structure:
    """The layout of a dotfiles repository.

    Resolved once per command. Configuration files are parsed lazily, so
    a broken configuration only fails the commands that touch it.
    """

    root: Path
    """Repository root"""

    root_config: RootConfiguration
    """Parsed ``dotfiles.toml``"""

    directories: dict[str, Path] = field(default_factory=dict)
    """Configuration name to configuration directory"""

    _loaded: dict[str, Configuration] = field(default_factory=dict, repr=False)

    @classmethod
    def resolve(cls, start: Path) -> "Structure":
        """Discover the repository containing ``start``.

        Every non-hidden directory at the repository root must contain a
        ``dotconfig.toml``; anything else makes the layout invalid.

        Args:
            start: A directory inside the repository

        Returns:
            Structure instance

        Raises:
            DotsConfigError: If there is no repository or its layout is invalid
        """
        root = find_repository_root(start)
        if root is None:
            raise DotsConfigError(
                f"No {ROOT_CONFIG_NAME} found in '{start}' or any parent directory. "
                "Run 'pydots init' first."
            )

        root_config = RootConfiguration.load(root)

        try:
            entries = sorted(root.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise DotsFilesystemError(
                f"Could not list '{root}': {e.strerror or e}", path=root
            ) from e

        directories: dict[str, Path] = {}
        for entry in entries:
            if entry.name.startswith(".") or not entry.is_dir():
                continue
            if not (entry / CONFIG_FILE_NAME).is_file():
                raise DotsConfigError(
                    "Structure of the dotfiles repository is invalid: "
                    f"'{entry.name}' has no {CONFIG_FILE_NAME}."
                )
            directories[entry.name] = entry

        logger.debug(f"Found {len(directories)} config(s) in {root}")
        return cls(root=root, root_config=root_config, directories=directories)

    @property
    def names(self) -> list[str]:
        return sorted(self.directories)

    def __contains__(self, name: str) -> bool:
        return name in self.directories

    def get(self, name: str) -> Configuration:
        """Load the configuration called ``name``.

        Raises:
            DotsConfigError: If it does not exist or cannot be loaded
        """
        if name not in self.directories:
            raise DotsConfigError(f"Config '{name}' does not exist.")
        if name not in self._loaded:
            self._loaded[name] = Configuration.load(self.directories[name])
        return self._loaded[name]
