"""Unit tests for the pydots CLI commands."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from pydots.cli import main


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def repo(tmp_path):
    """Create a dotfiles repository without git."""
    root = tmp_path / "repo"
    root.mkdir()
    (root / "dotfiles.toml").write_text("version = 1\n")
    return root


@pytest.fixture
def live(tmp_path):
    return tmp_path / "live"


@pytest.fixture
def nvim(repo, live):
    """Create an 'nvim' configuration deploying to the live directory."""
    directory = repo / "nvim"
    directory.mkdir()
    (directory / "dotconfig.toml").write_text(f'[deploy.linux]\ntarget = "{live.as_posix()}"\n')
    (directory / "init.lua").write_text("a\nb\n")
    return directory


@pytest.fixture(autouse=True)
def linux(monkeypatch):
    """Run every command as if on Linux."""
    monkeypatch.setattr("pydots.platforms.sys.platform", "linux")


def invoke(runner, repo: Path, *args, input=None):
    return runner.invoke(main, ["-C", str(repo), *args], input=input)


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows all commands."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "pydots" in result.output
        assert "init" in result.output
        assert "config" in result.output
        assert "deploy" in result.output

    def test_directory_from_environment(self, runner, repo, nvim):
        result = runner.invoke(main, ["config", "list"], env={"PYDOTS_DIR": str(repo)})

        assert result.exit_code == 0
        assert "nvim" in result.output

    def test_outside_repository(self, runner, tmp_path):
        result = invoke(runner, tmp_path, "config", "list")

        assert result.exit_code == 1
        assert "No dotfiles.toml found" in result.output
        assert "Aborting!" in result.output


class TestInitCommand:
    """Tests for the init command."""

    def test_init_empty_directory(self, runner, tmp_path):
        target = tmp_path / "dotfiles"

        result = invoke(runner, target, "init")

        assert result.exit_code == 0
        assert "Initialization Complete" in result.output
        assert (target / "dotfiles.toml").is_file()
        assert (target / ".git").is_dir()

    def test_init_non_empty_directory(self, runner, tmp_path):
        (tmp_path / "file").write_text("x")

        result = invoke(runner, tmp_path, "init")

        assert result.exit_code == 1
        assert "is not empty" in result.output
        assert not (tmp_path / "dotfiles.toml").exists()


class TestConfigCommands:
    """Tests for the config command group."""

    def test_create(self, runner, repo):
        result = invoke(runner, repo, "config", "create", "nvim")

        assert result.exit_code == 0
        assert "Created config 'nvim'" in result.output
        assert (repo / "nvim" / "dotconfig.toml").is_file()

    def test_create_shorthand(self, runner, repo):
        """Test that 'config NAME' creates a config."""
        result = invoke(runner, repo, "config", "zsh")

        assert result.exit_code == 0
        assert (repo / "zsh" / "dotconfig.toml").is_file()

    def test_create_existing(self, runner, repo, nvim):
        original = (nvim / "dotconfig.toml").read_text()

        result = invoke(runner, repo, "config", "create", "nvim")

        assert result.exit_code == 1
        assert "There already exists a config with the name 'nvim'" in result.output
        assert (nvim / "dotconfig.toml").read_text() == original

    def test_delete_confirmed(self, runner, repo, nvim):
        result = invoke(runner, repo, "config", "delete", "nvim", input="y\n")

        assert result.exit_code == 0
        assert not nvim.exists()

    def test_delete_declined(self, runner, repo, nvim):
        result = invoke(runner, repo, "config", "delete", "nvim", input="n\n")

        assert result.exit_code == 0
        assert "Deletion cancelled." in result.output
        assert nvim.exists()

    def test_delete_with_yes_flag(self, runner, repo, nvim):
        result = invoke(runner, repo, "config", "delete", "nvim", "-y")

        assert result.exit_code == 0
        assert not nvim.exists()

    def test_delete_unknown(self, runner, repo):
        result = invoke(runner, repo, "config", "delete", "nvim", "-y")

        assert result.exit_code == 1
        assert "There is no config with the name 'nvim'" in result.output

    def test_list(self, runner, repo, nvim):
        (repo / "zsh").mkdir()
        (repo / "zsh" / "dotconfig.toml").write_text("")

        result = invoke(runner, repo, "config", "list")

        assert result.exit_code == 0
        assert result.output.split() == ["nvim", "zsh"]

    def test_list_empty(self, runner, repo):
        result = invoke(runner, repo, "config", "list")

        assert result.exit_code == 0
        assert "No configs yet" in result.output


class TestPullCommand:
    """Tests for the config pull command."""

    def test_pull_confirmed(self, runner, repo, nvim, live):
        live.mkdir()
        (live / "init.lua").write_text("a\nc\n")

        result = invoke(runner, repo, "config", "pull", "nvim", input="y\n")

        assert result.exit_code == 0
        assert "Do you want to continue?" in result.output
        assert "│ init.lua" in result.output
        assert (nvim / "init.lua").read_text() == "a\nc\n"

    def test_pull_declined(self, runner, repo, nvim, live):
        live.mkdir()
        (live / "init.lua").write_text("a\nc\n")

        result = invoke(runner, repo, "config", "pull", "nvim", input="n\n")

        assert result.exit_code == 0
        assert (nvim / "init.lua").read_text() == "a\nb\n"

    def test_pull_yes_flag(self, runner, repo, nvim, live):
        live.mkdir()
        (live / "init.lua").write_text("a\nc\n")

        result = invoke(runner, repo, "config", "pull", "nvim", "-y")

        assert result.exit_code == 0
        assert "Do you want to continue?" not in result.output
        assert (nvim / "init.lua").read_text() == "a\nc\n"

    def test_pull_dry_run(self, runner, repo, nvim, live):
        live.mkdir()
        (live / "init.lua").write_text("a\nc\n")

        result = invoke(runner, repo, "config", "pull", "nvim", "--dry-run")

        assert result.exit_code == 0
        assert "Would copy" in result.output
        assert (nvim / "init.lua").read_text() == "a\nb\n"

    def test_pull_protected_path_aborts(self, runner, repo, nvim, live):
        live.mkdir()
        (live / "dotconfig.toml").write_text("overwritten")

        result = invoke(runner, repo, "config", "pull", "nvim", "-y")

        assert result.exit_code == 1
        assert "Trying to overwrite dotconfig.toml" in result.output
        assert "overwritten" not in (nvim / "dotconfig.toml").read_text()

    def test_pull_unknown_config(self, runner, repo):
        result = invoke(runner, repo, "config", "pull", "vim")

        assert result.exit_code == 1
        assert "Config 'vim' does not exist." in result.output


class TestDeployCommand:
    """Tests for the deploy command."""

    def test_deploy_one(self, runner, repo, nvim, live):
        result = invoke(runner, repo, "deploy", "nvim")

        assert result.exit_code == 0
        assert (live / "init.lua").read_text() == "a\nb\n"
        assert not (live / "dotconfig.toml").exists()

    def test_deploy_all(self, runner, repo, nvim, live, tmp_path):
        zsh = repo / "zsh"
        zsh.mkdir()
        (zsh / "dotconfig.toml").write_text(
            f'[deploy.linux]\ntarget = "{(tmp_path / "home").as_posix()}"\n'
        )
        (zsh / ".zshrc").write_text("export A=1\n")

        result = invoke(runner, repo, "deploy")

        assert result.exit_code == 0
        assert (live / "init.lua").exists()
        assert (tmp_path / "home" / ".zshrc").exists()

    def test_deploy_all_reports_failures(self, runner, repo, nvim, live):
        broken = repo / "broken"
        broken.mkdir()
        (broken / "dotconfig.toml").write_text("")

        result = invoke(runner, repo, "deploy")

        assert result.exit_code == 1
        assert "Could not deploy config 'broken'" in result.output
        assert "1 of 2 config(s) could not be deployed." in result.output
        assert (live / "init.lua").exists()

    def test_deploy_target_not_empty(self, runner, repo, live):
        directory = repo / "nvim"
        directory.mkdir()
        (directory / "dotconfig.toml").write_text(
            "[deploy]\ntarget_require_empty = true\n\n"
            f'[deploy.linux]\ntarget = "{live.as_posix()}"\n'
        )
        (directory / "init.lua").write_text("new")
        live.mkdir()
        (live / "init.lua").write_text("old")

        result = invoke(runner, repo, "deploy", "nvim")

        assert result.exit_code == 1
        assert "is not empty" in result.output
        assert (live / "init.lua").read_text() == "old"

    def test_deploy_dry_run(self, runner, repo, nvim, live):
        result = invoke(runner, repo, "deploy", "nvim", "--dry-run")

        assert result.exit_code == 0
        assert "Dry run" in result.output
        assert not live.exists()

    def test_quiet(self, runner, repo, nvim, live):
        result = runner.invoke(main, ["-q", "-C", str(repo), "deploy", "nvim"])

        assert result.exit_code == 0
        assert result.output == ""
        assert (live / "init.lua").exists()
