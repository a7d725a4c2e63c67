"""Tests for repository initialization."""

from unittest.mock import patch

import pytest
from git import GitCommandError

from pydots.exceptions import DotsError, DotsPreconditionError
from pydots.repo import init_repository


class TestInitRepository:
    """Tests for init_repository."""

    def test_initializes_empty_directory(self, tmp_path):
        config_file = init_repository(tmp_path)

        assert config_file == tmp_path / "dotfiles.toml"
        assert "version = 1" in config_file.read_text()
        assert (tmp_path / ".git").is_dir()

    def test_creates_missing_directory(self, tmp_path):
        target = tmp_path / "new" / "dotfiles"

        init_repository(target)

        assert (target / "dotfiles.toml").is_file()

    def test_refuses_non_empty_directory(self, tmp_path):
        (tmp_path / "existing").write_text("x")

        with pytest.raises(DotsPreconditionError, match="is not empty"):
            init_repository(tmp_path)

        assert not (tmp_path / "dotfiles.toml").exists()

    @patch("pydots.repo.Repo")
    def test_git_failure(self, mock_repo, tmp_path):
        mock_repo.init.side_effect = GitCommandError("git init", 128)

        with pytest.raises(DotsError, match="Could not initialize git repository"):
            init_repository(tmp_path)
