"""Tests for the git subprocess wrapper."""

from __future__ import annotations

from pathlib import Path

import pytest
from git import Repo

from gitmcp.config import ServerConfig
from gitmcp.git.errors import (
    ErrorKind,
    GitCommandFailure,
    GitOperationError,
    NotARepositoryError,
    ValidationError,
)
from gitmcp.git.runner import GitRunner


def test_run_returns_output(repo: Repo, repo_path: Path) -> None:
    output = GitRunner(repo_path).run("rev-parse", "HEAD")

    assert output.status == 0
    assert output.stdout == repo.head.commit.hexsha
    assert output.text == repo.head.commit.hexsha
    assert output.args[1:] == ["rev-parse", "HEAD"]
    assert output.duration_ms >= 0


def test_arguments_are_not_shell_interpreted(repo_path: Path) -> None:
    runner = GitRunner(repo_path)
    runner.run("commit", "--allow-empty", "-m", 'quote " and $HOME; rm -rf /')

    assert runner.run("log", "-1", "--format=%s").stdout == 'quote " and $HOME; rm -rf /'


def test_failure_is_classified(repo_path: Path) -> None:
    with pytest.raises(GitCommandFailure) as excinfo:
        GitRunner(repo_path).run("checkout", "does-not-exist")

    failure = excinfo.value
    assert failure.status != 0
    assert failure.kind is ErrorKind.UNKNOWN
    assert "does-not-exist" in failure.stderr


def test_extra_environment_is_passed(repo_path: Path) -> None:
    output = GitRunner(repo_path).run("var", "GIT_AUTHOR_IDENT", env={"GIT_AUTHOR_NAME": "Env Person"})
    assert output.stdout.startswith("Env Person")


def test_missing_directory(tmp_path: Path) -> None:
    runner = GitRunner(tmp_path / "missing")

    with pytest.raises(ValidationError, match="Directory does not exist"):
        runner.run("status")
    assert runner.is_repository() is False


def test_missing_git_executable(repo_path: Path) -> None:
    runner = GitRunner(repo_path, ServerConfig(git_executable="git-binary-that-does-not-exist"))

    with pytest.raises(GitOperationError) as excinfo:
        runner.run("status")
    assert excinfo.value.kind is ErrorKind.COMMAND_NOT_FOUND


def test_repository_detection(repo_path: Path, plain_dir: Path) -> None:
    assert GitRunner(repo_path).is_repository() is True
    assert GitRunner(plain_dir).is_repository() is False

    GitRunner(repo_path).require_repository()
    with pytest.raises(NotARepositoryError):
        GitRunner(plain_dir).require_repository()


def test_helpers(repo: Repo, repo_path: Path) -> None:
    runner = GitRunner(repo_path)

    assert runner.current_branch() == repo.active_branch.name
    assert runner.remote_url() is None
    assert runner.porcelain_status() == []
    assert runner.ref_exists("HEAD") is True
    assert runner.ref_exists("no-such-branch") is False

    (repo_path / "README.md").write_text("changed\n")
    (repo_path / "new.txt").write_text("new\n")
    runner.run("add", "new.txt")

    assert sorted(runner.porcelain_status()) == [" M README.md", "A  new.txt"]
    assert runner.staged_changes() == ["A\tnew.txt"]
    assert runner.conflicted_files() == []


def test_remote_url(repo: Repo, repo_path: Path) -> None:
    repo.create_remote("origin", "https://example.com/project.git")
    assert GitRunner(repo_path).remote_url("origin") == "https://example.com/project.git"
