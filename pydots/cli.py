"""CLI interface for pydots."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .config import create_config, delete_config
from .exceptions import DotsConfigError, DotsError
from .output import OutputFormatter
from .repo import init_repository
from .structure import Structure
from .sync import ConfirmationGate, SyncEngine

logger = logging.getLogger(__name__)


def _fail(ctx: Any, out: OutputFormatter, error: Exception) -> None:
    out.error(f"{error} Aborting!")
    ctx.exit(1)


def _load_structure(ctx: Any) -> Structure:
    return Structure.resolve(ctx.obj["directory"])


@click.group()
@click.option(
    "--directory",
    "-C",
    envvar="PYDOTS_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Dotfiles repository to work in",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pydots")
@click.pass_context
def main(ctx: Any, directory: Path, quiet: bool, verbose: bool) -> None:
    """pydots - Manage your dotfiles in a git repository."""
    # Store settings in context for subcommands to access
    ctx.ensure_object(dict)
    ctx.obj["directory"] = directory
    ctx.obj["out"] = OutputFormatter(quiet=quiet)

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pydots").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.pass_context
def init(ctx: Any) -> None:
    """Initialize a new dotfiles repo in the current directory."""
    out: OutputFormatter = ctx.obj["out"]
    directory: Path = ctx.obj["directory"]

    try:
        root_config = init_repository(directory)
    except DotsError as e:
        _fail(ctx, out, e)
        return

    out.print_summary(
        "Initialization Complete",
        [
            ("Repository", str(directory.resolve())),
            ("Config file", str(root_config)),
            ("Next", "pydots config create <name>"),
        ],
    )


class DefaultCreateGroup(click.Group):
    """Group that treats an unknown first argument as ``create NAME``.

    Like ``git branch NAME``, ``pydots config NAME`` creates a config.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if args and not args[0].startswith("-") and args[0] not in self.commands:
            args = ["create", *args]
        return super().parse_args(ctx, args)


@main.group(cls=DefaultCreateGroup)
def config() -> None:
    """Manage your individual dotfile configurations."""


@config.command("create")
@click.argument("name")
@click.pass_context
def config_create(ctx: Any, name: str) -> None:
    """Create a new configuration."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        structure = _load_structure(ctx)
        if name in structure:
            raise DotsConfigError(f"There already exists a config with the name '{name}'.")
        config_file = create_config(structure.root, name)
    except DotsError as e:
        _fail(ctx, out, e)
        return

    out.success(f"Created config '{name}'")
    out.info(f"Edit {config_file} to set its deploy targets.")


@config.command("delete")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def config_delete(ctx: Any, name: str, yes: bool) -> None:
    """Delete a configuration."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        structure = _load_structure(ctx)
        if name not in structure:
            raise DotsConfigError(f"There is no config with the name '{name}'.")
    except DotsError as e:
        _fail(ctx, out, e)
        return

    if not yes and not click.confirm(
        f"Delete config '{name}' and all of its files from the repository?",
        default=False,
    ):
        out.warning("Deletion cancelled.")
        return

    try:
        delete_config(structure.root, name)
    except DotsError as e:
        _fail(ctx, out, e)
        return

    out.success(f"Deleted config '{name}'")


@config.command("pull")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Copy every change without asking")
@click.option(
    "--dry-run", is_flag=True, help="Show what would be pulled without copying"
)
@click.pass_context
def config_pull(ctx: Any, name: str, yes: bool, dry_run: bool) -> None:
    """Pull changes from the deployed configuration into the dotfiles repo."""
    out: OutputFormatter = ctx.obj["out"]

    engine = SyncEngine(output=out, gate=ConfirmationGate(assume_yes=yes), dry_run=dry_run)
    try:
        structure = _load_structure(ctx)
        engine.pull(structure.get(name))
    except KeyboardInterrupt:
        out.warning("\nPull cancelled by user")
        ctx.exit(130)
    except DotsError as e:
        _fail(ctx, out, e)


@config.command("list")
@click.pass_context
def config_list(ctx: Any) -> None:
    """List the configurations in the repository."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        structure = _load_structure(ctx)
    except DotsError as e:
        _fail(ctx, out, e)
        return

    if not structure.names:
        out.info("No configs yet. Create one with 'pydots config create <name>'.")
        return
    for name in structure.names:
        out.print(name)


@main.command()
@click.argument("name", required=False)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be deployed without copying"
)
@click.pass_context
def deploy(ctx: Any, name: Optional[str], dry_run: bool) -> None:
    """Deploy your configurations to the system.

    NAME: Configuration to deploy (all configurations if omitted)
    """
    out: OutputFormatter = ctx.obj["out"]

    engine = SyncEngine(output=out, dry_run=dry_run)
    try:
        structure = _load_structure(ctx)
        if name is not None:
            engine.deploy(structure.get(name))
            return
        results = engine.deploy_all(structure)
    except KeyboardInterrupt:
        out.warning("\nDeploy cancelled by user")
        ctx.exit(130)
        return
    except DotsError as e:
        _fail(ctx, out, e)
        return

    failed = [config_name for config_name, result in results.items() if isinstance(result, DotsError)]
    if failed:
        out.warning(f"{len(failed)} of {len(results)} config(s) could not be deployed.")
        ctx.exit(1)


if __name__ == "__main__":
    main()
