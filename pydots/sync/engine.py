"""Core sync engine for deploying and pulling configurations."""

import logging
from typing import TYPE_CHECKING, Optional, Union

from ..exceptions import (
    DotsError,
    DotsFilesystemError,
    DotsProtectedPathError,
    DotsTargetNotEmptyError,
)
from ..output import OutputFormatter
from ..platforms import Platform, current_platform
from ..utils import CONFIG_FILE_NAME, is_dir_null_or_empty
from .comparator import FileComparator, SyncAction, SyncDecision
from .diff import DiffRenderer
from .operations import SyncOperations
from .prompt import ConfirmationGate
from .scanner import DirectoryScanner

if TYPE_CHECKING:
    from ..config import Configuration
    from ..structure import Structure

logger = logging.getLogger(__name__)


class SyncEngine:
    """Core sync engine that deploys and pulls configurations."""

    def __init__(
        self,
        output: Optional[OutputFormatter] = None,
        gate: Optional[ConfirmationGate] = None,
        platform: Optional[Platform] = None,
        dry_run: bool = False,
    ):
        """Initialize sync engine.

        Args:
            output: Output formatter for displaying previews and summaries
            gate: Confirmation prompt used by pull
            platform: Platform to resolve targets for (detected if None)
            dry_run: If True, show what would be done without copying
        """
        self.output = output or OutputFormatter()
        self.gate = gate or ConfirmationGate()
        self.platform = platform
        self.dry_run = dry_run
        self.operations = SyncOperations(dry_run=dry_run)
        self.scanner = DirectoryScanner()
        self.renderer = DiffRenderer(self.output.console)

    def _resolve_platform(self) -> Platform:
        if self.platform is None:
            self.platform = current_platform()
        return self.platform

    def _comparator(self, exclude, platform: Platform) -> FileComparator:
        return FileComparator(
            exclude,
            protected_path=CONFIG_FILE_NAME,
            case_sensitive=platform is not Platform.WINDOWS,
        )

    def deploy(self, config: "Configuration") -> dict:
        """Copy a configuration from the repository to the live system.

        Every file is overwritten without asking. Excluded files and the
        configuration's own ``dotconfig.toml`` are never copied.

        Args:
            config: Configuration to deploy

        Returns:
            Dictionary with deploy statistics

        Raises:
            DotsTargetNotEmptyError: If the target must be empty but is not
            DotsError: For any other failure; files copied so far stay
        """
        platform = self._resolve_platform()
        target = config.target_path(platform)

        # checks if the target directory already has files in it
        if config.require_empty_target(platform) and not is_dir_null_or_empty(target):
            raise DotsTargetNotEmptyError(
                f"Target directory '{target}' of config '{config.name}' is not empty."
            )

        comparator = self._comparator(config.deploy_excludes(platform), platform)

        if not self.output.quiet:
            self.output.info(f"Deploying '{config.name}' to {target}")
            if self.dry_run:
                self.output.info("Dry run: No changes will be made")

        self.operations.ensure_directory(target)

        stats = self._create_empty_stats()
        for local_file in self.scanner.iter_files(config.directory):
            decision = comparator.decide_deploy(local_file, target)
            if decision.action == SyncAction.COPY:
                logger.debug(f"Deploying {decision.relative_path}...")
                self.operations.copy_file(decision.source, decision.destination)
                stats["copied"] += 1
            elif decision.action == SyncAction.EXCLUDED:
                stats["excluded"] += 1
            elif decision.action == SyncAction.PROTECTED:
                logger.debug(f"Not deploying {decision.relative_path}: {decision.reason}")
                stats["protected"] += 1

        if not self.output.quiet:
            self._display_summary(f"Deployed '{config.name}'", stats)
        return stats

    def deploy_all(self, structure: "Structure") -> dict[str, Union[dict, DotsError]]:
        """Deploy every configuration of a repository.

        A failing configuration is reported and skipped; the remaining
        configurations are still deployed.

        Args:
            structure: Repository structure

        Returns:
            Mapping of configuration name to its statistics or its error
        """
        results: dict[str, Union[dict, DotsError]] = {}
        for name in structure.names:
            try:
                results[name] = self.deploy(structure.get(name))
            except DotsError as e:
                logger.warning(f"Deploy of '{name}' failed: {e}")
                self.output.error(f"Could not deploy config '{name}': {e}")
                results[name] = e
        return results

    def pull(self, config: "Configuration") -> dict:
        """Copy changes from the live system back into the repository.

        Each changed or new file is previewed and only copied after the user
        confirms it. Declining a file leaves its repository copy untouched
        and moves on to the next one.

        Args:
            config: Configuration to pull

        Returns:
            Dictionary with pull statistics

        Raises:
            DotsProtectedPathError: If a non-excluded file would overwrite
                ``dotconfig.toml``; nothing after it is processed and files
                copied before it stay
            DotsError: For any other failure
        """
        platform = self._resolve_platform()
        source_root = config.pull_source_path(platform)
        try:
            is_dir = source_root.is_dir()
        except OSError as e:
            raise DotsFilesystemError(
                f"Could not inspect '{source_root}': {e.strerror or e}", path=source_root
            ) from e
        if not is_dir:
            raise DotsFilesystemError(
                f"Pull source '{source_root}' of config '{config.name}' is not a directory.",
                path=source_root,
            )

        comparator = self._comparator(config.pull_excludes(platform), platform)

        if not self.output.quiet:
            self.output.info(f"Pulling '{config.name}' from {source_root}")
            if self.dry_run:
                self.output.info("Dry run: No changes will be made")

        stats = self._create_empty_stats()
        for local_file in self.scanner.iter_files(source_root):
            decision = comparator.decide_pull(local_file, config.directory)

            # ensure that we aren't accidentally overwriting the dotconfig
            if decision.action == SyncAction.PROTECTED:
                raise DotsProtectedPathError(
                    f"Trying to overwrite {CONFIG_FILE_NAME} configuration file. "
                    f"Please add '{CONFIG_FILE_NAME}' to your excludes in the pull "
                    "configuration."
                )
            if decision.action == SyncAction.EXCLUDED:
                stats["excluded"] += 1
                continue
            if decision.action == SyncAction.UNCHANGED:
                stats["unchanged"] += 1
                continue
            if not decision.requires_confirmation:
                logger.debug(f"Skipping {decision.relative_path}: {decision.reason}")
                continue

            self._preview(decision)

            if self.dry_run:
                stats["copied"] += 1
                continue

            if self.gate.confirm("Do you want to continue?", default=True):
                self.operations.copy_file(decision.source, decision.destination)
                stats["copied"] += 1
            else:
                logger.debug(f"Declined {decision.relative_path}")
                stats["declined"] += 1

        if not self.output.quiet:
            self._display_summary(f"Pulled '{config.name}'", stats)
        return stats

    def _preview(self, decision: SyncDecision) -> None:
        """Show what a pull would change for one file."""
        if decision.action == SyncAction.MODIFY:
            self.renderer.render_diff(
                decision.relative_path, decision.old_text or "", decision.new_text or ""
            )
        elif decision.action == SyncAction.MODIFY_BINARY:
            self.renderer.render_modified(decision.relative_path)
        elif decision.action == SyncAction.ADD:
            self.renderer.render_added(decision.relative_path)

    def _create_empty_stats(self) -> dict:
        """Create an empty statistics dictionary.

        Returns:
            Dictionary with zero counts for all stat categories
        """
        return {
            "copied": 0,
            "excluded": 0,
            "protected": 0,
            "unchanged": 0,
            "declined": 0,
        }

    def _display_summary(self, title: str, stats: dict) -> None:
        """Display the result of a deploy or pull.

        Args:
            title: Summary title
            stats: Statistics dictionary
        """
        copied_label = "Would copy" if self.dry_run else "Copied"
        rows = [(copied_label, f"{stats['copied']} file(s)")]
        if stats["excluded"]:
            rows.append(("Excluded", f"{stats['excluded']} file(s)"))
        if stats["unchanged"]:
            rows.append(("Unchanged", f"{stats['unchanged']} file(s)"))
        if stats["declined"]:
            rows.append(("Declined", f"{stats['declined']} file(s)"))
        self.output.print("")
        self.output.print_summary(title, rows)
