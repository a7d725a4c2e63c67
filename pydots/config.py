"""Configuration files of a dotfiles repository.

A dotfiles repository has a ``dotfiles.toml`` at its root and one
directory per configuration. Every configuration directory contains a
``dotconfig.toml`` describing where its files are deployed to and pulled
from on each platform::

    [deploy]
    exclude = ["*.log"]
    target_require_empty = false

    [deploy.linux]
    target = "~/.config/nvim"
    exclude = []

    [pull.linux]
    from = "~/.config/nvim"
    exclude = ["lazy-lock.json"]
"""

import logging
import shutil
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .exceptions import DotsConfigError, DotsFilesystemError
from .platforms import Platform
from .sync.exclude import ExcludeMatcher
from .utils import CONFIG_FILE_NAME, ROOT_CONFIG_NAME, expand_path

logger = logging.getLogger(__name__)

ROOT_CONFIG_VERSION = 1

DEFAULT_ROOT_CONFIG = f"""\
# pydots repository
version = {ROOT_CONFIG_VERSION}
"""

DEFAULT_CONFIG_TEMPLATE = """\
[deploy]
exclude = []
target_require_empty = false

[deploy.linux]
target = "~/.config/{name}"
exclude = []

[deploy.windows]
target = "~/AppData/Roaming/{name}"
exclude = []

[pull]
exclude = []

[pull.linux]
exclude = []

[pull.windows]
exclude = []
"""


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise DotsConfigError(f"Could not parse '{path}': {e}") from e
    except OSError as e:
        raise DotsFilesystemError(
            f"Could not read '{path}': {e.strerror or e}", path=path
        ) from e


def _table(data: dict[str, Any], key: str, where: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise DotsConfigError(f"'{where}.{key}' must be a table")
    return value


def _string_list(data: dict[str, Any], key: str, where: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise DotsConfigError(f"'{where}.{key}' must be a list of strings")
    return list(value)


def _optional(data: dict[str, Any], key: str, kind: type, where: str) -> Any:
    value = data.get(key)
    if value is not None and not isinstance(value, kind):
        raise DotsConfigError(f"'{where}.{key}' must be a {kind.__name__}")
    return value


@dataclass
class TargetSpec:
    """Where a configuration is deployed to on one platform."""

    target: Optional[str] = None
    """Target directory, may start with ``~``"""

    exclude: list[str] = field(default_factory=list)
    """Exclude patterns for this platform"""

    target_require_empty: Optional[bool] = None
    """Overrides the configuration-level setting when not None"""

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str) -> "TargetSpec":
        return cls(
            target=_optional(data, "target", str, where),
            exclude=_string_list(data, "exclude", where),
            target_require_empty=_optional(data, "target_require_empty", bool, where),
        )


@dataclass
class PullSpec:
    """Where a configuration is pulled from on one platform."""

    from_path: Optional[str] = None
    """Source directory override (TOML key ``from``), defaults to the deploy target"""

    exclude: list[str] = field(default_factory=list)
    """Exclude patterns for this platform"""

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str) -> "PullSpec":
        return cls(
            from_path=_optional(data, "from", str, where),
            exclude=_string_list(data, "exclude", where),
        )


@dataclass
class DeploySpec:
    """The ``[deploy]`` table of a configuration."""

    exclude: list[str] = field(default_factory=list)
    target_require_empty: bool = False
    targets: dict[Platform, TargetSpec] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeploySpec":
        require_empty = _optional(data, "target_require_empty", bool, "deploy")
        return cls(
            exclude=_string_list(data, "exclude", "deploy"),
            target_require_empty=bool(require_empty),
            targets={
                platform: TargetSpec.from_dict(
                    _table(data, platform.value, "deploy"),
                    f"deploy.{platform.value}",
                )
                for platform in Platform
            },
        )


@dataclass
class PullSection:
    """The ``[pull]`` table of a configuration."""

    exclude: list[str] = field(default_factory=list)
    sources: dict[Platform, PullSpec] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PullSection":
        return cls(
            exclude=_string_list(data, "exclude", "pull"),
            sources={
                platform: PullSpec.from_dict(
                    _table(data, platform.value, "pull"),
                    f"pull.{platform.value}",
                )
                for platform in Platform
            },
        )


@dataclass
class Configuration:
    """A named configuration (one application's dotfiles)."""

    name: str
    """Configuration name (the directory name)"""

    directory: Path
    """Configuration directory inside the repository"""

    deploy: DeploySpec = field(default_factory=DeploySpec)
    pull: PullSection = field(default_factory=PullSection)

    @classmethod
    def from_dict(cls, name: str, directory: Path, data: dict[str, Any]) -> "Configuration":
        """Create a Configuration from a parsed ``dotconfig.toml``.

        Args:
            name: Configuration name
            directory: Configuration directory
            data: Parsed TOML document

        Returns:
            Configuration instance

        Raises:
            DotsConfigError: If a value has the wrong type
        """
        try:
            return cls(
                name=name,
                directory=directory,
                deploy=DeploySpec.from_dict(_table(data, "deploy", name)),
                pull=PullSection.from_dict(_table(data, "pull", name)),
            )
        except DotsConfigError as e:
            raise DotsConfigError(f"Config '{name}': {e}") from e

    @classmethod
    def load(cls, directory: Path) -> "Configuration":
        """Load and validate the configuration stored in ``directory``.

        Raises:
            DotsConfigError: If the file is missing, malformed or has an
                invalid exclude pattern
        """
        config_file = directory / CONFIG_FILE_NAME
        if not config_file.is_file():
            raise DotsConfigError(
                f"Config '{directory.name}' has no {CONFIG_FILE_NAME} file."
            )
        config = cls.from_dict(directory.name, directory, _read_toml(config_file))
        config.validate()
        logger.debug(f"Loaded config '{config.name}' from {config_file}")
        return config

    @property
    def config_file(self) -> Path:
        return self.directory / CONFIG_FILE_NAME

    def validate(self) -> None:
        """Compile every exclude pattern so a bad glob is reported early.

        Raises:
            DotsGlobError: Naming the bad pattern and its section
        """
        for platform in Platform:
            self.deploy_excludes(platform)
            self.pull_excludes(platform)

    def target_spec(self, platform: Platform) -> TargetSpec:
        return self.deploy.targets.get(platform) or TargetSpec()

    def pull_spec(self, platform: Platform) -> PullSpec:
        return self.pull.sources.get(platform) or PullSpec()

    def target_path(self, platform: Platform) -> Path:
        """Return the expanded deploy target for ``platform``.

        Raises:
            DotsConfigError: If no target is configured for the platform
        """
        target = self.target_spec(platform).target
        if not target:
            raise DotsConfigError(
                f"Config '{self.name}' has no deploy target for {platform.value}."
            )
        return expand_path(target)

    def pull_source_path(self, platform: Platform) -> Path:
        """Return the directory a pull reads from on ``platform``.

        The platform's ``from`` override wins, otherwise the deploy target of
        the same platform is used.
        """
        override = self.pull_spec(platform).from_path
        if override:
            return expand_path(override)
        return self.target_path(platform)

    def require_empty_target(self, platform: Platform) -> bool:
        """Resolve ``target_require_empty`` (per-target override first)."""
        override = self.target_spec(platform).target_require_empty
        if override is not None:
            return override
        return self.deploy.target_require_empty

    def deploy_excludes(self, platform: Platform) -> ExcludeMatcher:
        return ExcludeMatcher.from_sources(
            {
                "deploy": self.deploy.exclude,
                f"deploy.{platform.value}": self.target_spec(platform).exclude,
            }
        )

    def pull_excludes(self, platform: Platform) -> ExcludeMatcher:
        return ExcludeMatcher.from_sources(
            {
                "pull": self.pull.exclude,
                f"pull.{platform.value}": self.pull_spec(platform).exclude,
            }
        )


@dataclass
class RootConfiguration:
    """The ``dotfiles.toml`` file at the repository root."""

    version: int = ROOT_CONFIG_VERSION

    @classmethod
    def load(cls, root: Path) -> "RootConfiguration":
        path = root / ROOT_CONFIG_NAME
        data = _read_toml(path)
        version = data.get("version", ROOT_CONFIG_VERSION)
        if not isinstance(version, int):
            raise DotsConfigError(f"'version' in {path} must be an integer")
        if version > ROOT_CONFIG_VERSION:
            raise DotsConfigError(
                f"{path} was written by a newer pydots (version {version})."
            )
        return cls(version=version)


def write_root_config(root: Path) -> Path:
    """Write the default ``dotfiles.toml`` into ``root``."""
    path = root / ROOT_CONFIG_NAME
    try:
        path.write_text(DEFAULT_ROOT_CONFIG, encoding="utf-8")
    except OSError as e:
        raise DotsFilesystemError(
            f"Could not write '{path}': {e.strerror or e}", path=path
        ) from e
    return path


def create_config(root: Path, name: str) -> Path:
    """Create a new configuration directory with a default ``dotconfig.toml``.

    Args:
        root: Repository root
        name: Configuration name

    Returns:
        Path of the created configuration file

    Raises:
        DotsConfigError: If the name is not a plain directory name
        DotsFilesystemError: If the directory or file cannot be created
    """
    if (
        not name
        or name in (".", "..")
        or name.startswith(".")
        or any(c in name for c in '/\\"')
    ):
        raise DotsConfigError(f"'{name}' is not a valid config name.")

    directory = root / name
    config_file = directory / CONFIG_FILE_NAME
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with open(config_file, "x", encoding="utf-8") as f:
            f.write(DEFAULT_CONFIG_TEMPLATE.format(name=name))
    except FileExistsError as e:
        raise DotsConfigError(f"Config '{name}' already has a {CONFIG_FILE_NAME}.") from e
    except OSError as e:
        raise DotsFilesystemError(
            f"Could not create config '{name}': {e.strerror or e}", path=directory
        ) from e

    logger.debug(f"Created config '{name}' at {directory}")
    return config_file


def delete_config(root: Path, name: str) -> None:
    """Delete a configuration directory and everything in it.

    Raises:
        DotsFilesystemError: If the directory cannot be removed
    """
    directory = root / name
    try:
        shutil.rmtree(directory)
    except OSError as e:
        raise DotsFilesystemError(
            f"Could not delete config '{name}': {e.strerror or e}", path=directory
        ) from e
    logger.debug(f"Deleted config '{name}' at {directory}")
