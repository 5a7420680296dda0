"""Tests for tool registration and the dispatch boundary."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gitmcp.mcp.contracts import OperationResult
from gitmcp.mcp.server import GitMCPServer

EXPECTED_TOOLS = {
    "git-add-all",
    "git-add",
    "git-remove",
    "git-remove-all",
    "git-status",
    "git-commit",
    "git-push",
    "git-pull",
    "git-branch",
    "git-checkout",
    "git-log",
    "git-diff",
    "git-stash",
    "git-stash-pop",
    "git-reset",
    "git-clone",
    "git-init",
    "git-remote-list",
    "git-remote-add",
    "git-remote-remove",
    "git-remote-set-url",
    "git-tag",
    "git-merge",
    "git-rebase",
    "git-cherry-pick",
    "git-blame",
    "git-bisect",
    "git-flow",
    "git-quick-commit",
    "git-sync",
    "git-save",
    "git-fresh",
    "git-dev",
    "git-fix",
    "git-release",
    "git-backup",
    "git-cleanup",
}


def test_all_tools_registered(server: GitMCPServer) -> None:
    assert set(server.tool_metadata) == EXPECTED_TOOLS


def test_every_schema_accepts_directory(server: GitMCPServer) -> None:
    for name, (description, schema) in server.tool_metadata.items():
        assert description, name
        assert schema["type"] == "object"
        assert "directory" in schema["properties"], name
        for required in schema.get("required", []):
            assert required in schema["properties"], (name, required)


def test_repository_free_tools(server: GitMCPServer) -> None:
    assert EXPECTED_TOOLS - server.repository_tools == {"git-init", "git-clone"}


def test_not_a_repository_for_every_repo_tool(server: GitMCPServer, plain_dir: Path) -> None:
    for name in sorted(server.repository_tools):
        result = server.dispatch(name, {"directory": str(plain_dir), "message": "x"})
        assert result.is_error, name
        assert "Not a git repository" in result.text, name


def test_missing_directory(server: GitMCPServer, tmp_path: Path) -> None:
    result = server.dispatch("git-status", {"directory": str(tmp_path / "nope")})

    assert result.is_error
    assert "Directory does not exist" in result.text


def test_unknown_tool(server: GitMCPServer, repo_path: Path) -> None:
    result = server.dispatch("git-frobnicate", {"directory": str(repo_path)})

    assert result.is_error
    assert "Unknown tool: git-frobnicate" in result.text
    assert "gitmcp list" in result.text


def test_unexpected_exception_becomes_failure(server: GitMCPServer, repo_path: Path) -> None:
    def explode(runner, args):
        raise RuntimeError("boom")

    server.register_tool("git-explode", "Raises", {"type": "object", "properties": {}}, explode)
    result = server.dispatch("git-explode", {"directory": str(repo_path)})

    assert result.is_error
    assert result.text == "Error: boom"


def test_result_envelope(server: GitMCPServer, repo_path: Path) -> None:
    result = server.dispatch("git-status", {"directory": str(repo_path)})
    payload = json.loads(result.to_json())

    assert payload["success"] is True
    assert payload["isError"] is False
    assert payload["content"] == [{"type": "text", "text": result.text}]
    assert payload["metadata"]["operation"] == "git-status"
    assert payload["metadata"]["workingDirectory"] == str(repo_path.resolve())
    assert isinstance(payload["metadata"]["duration"], int)
    assert payload["metadata"]["timestamp"].endswith("+00:00")
    assert server.operation_count == 1


def test_failure_envelope() -> None:
    payload = OperationResult.failure("Error: nope").to_payload()

    assert payload == {
        "success": False,
        "content": [{"type": "text", "text": "Error: nope"}],
        "isError": True,
    }


@pytest.mark.parametrize("directory", ["bad\x00dir", "~no_such_user_zz/repo"])
def test_unusable_directory_becomes_failure(server: GitMCPServer, directory: str) -> None:
    result = server.dispatch("git-status", {"directory": directory})

    assert result.is_error
    assert result.metadata is not None
    assert result.metadata.operation == "git-status"
    assert server.operation_count == 1


@pytest.mark.parametrize("directory", [5, ["/tmp"], {"path": "/tmp"}])
def test_non_string_directory_is_rejected(server: GitMCPServer, repo_path: Path, monkeypatch, directory) -> None:
    monkeypatch.chdir(repo_path)

    result = server.dispatch("git-status", {"directory": directory})

    assert result.is_error
    assert "directory must be a string" in result.text


def test_blank_directory_uses_working_directory(server: GitMCPServer, repo_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(repo_path)

    result = server.dispatch("git-status", {"directory": "  "})

    assert result.success
    assert result.metadata.working_directory == str(repo_path.resolve())
