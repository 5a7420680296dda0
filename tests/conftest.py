"""Shared fixtures: throwaway repositories built with GitPython."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest
from git import Repo

from gitmcp.mcp.contracts import OperationResult
from gitmcp.mcp.server import GitMCPServer, create_server


def _configure_identity(repo: Repo) -> None:
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")


def commit_file(repo: Repo, name: str, content: str, message: str) -> str:
    """Write ``name`` into the work tree, commit it and return the hexsha."""
    path = Path(repo.working_tree_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([name])
    return repo.index.commit(message).hexsha


@pytest.fixture
def empty_repo(tmp_path: Path) -> Path:
    """A repository without any commit."""
    repo_path = tmp_path / "empty"
    repo_path.mkdir()
    _configure_identity(Repo.init(repo_path))
    return repo_path


@pytest.fixture
def repo(tmp_path: Path) -> Repo:
    """A repository with one commit of README.md."""
    repo_path = tmp_path / "work"
    repo_path.mkdir()
    repository = Repo.init(repo_path)
    _configure_identity(repository)
    commit_file(repository, "README.md", "# Test Repository\n", "Initial commit")
    return repository


@pytest.fixture
def repo_path(repo: Repo) -> Path:
    return Path(repo.working_tree_dir)


@pytest.fixture
def origin(tmp_path: Path, repo: Repo) -> Repo:
    """Bare repository registered as ``origin`` of ``repo`` with upstream set."""
    bare = Repo.init(tmp_path / "origin.git", bare=True)
    repo.create_remote("origin", str(bare.git_dir))
    repo.git.push("-u", "origin", repo.active_branch.name)
    return bare


@pytest.fixture
def plain_dir(tmp_path: Path) -> Path:
    """A directory that is not a git repository."""
    path = tmp_path / "plain"
    path.mkdir()
    return path


@pytest.fixture
def server() -> GitMCPServer:
    return create_server()


@pytest.fixture
def call(server: GitMCPServer):
    """``call(tool, directory, **arguments)`` dispatches one tool."""

    def _call(tool: str, directory: Path, /, **arguments: Any) -> OperationResult:
        return server.dispatch(tool, {"directory": str(directory), **arguments})

    return _call


@pytest.fixture
def make_commit():
    """``make_commit(repo, name, content, message)`` -> hexsha."""
    return commit_file


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to a captured stream once the test ends."""
    yield
    logger = logging.getLogger("gitmcp")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
