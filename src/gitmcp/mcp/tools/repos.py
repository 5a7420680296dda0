"""Repository and remote management tools for MCP server."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Dict, List

from ...git.errors import ValidationError
from ...git.runner import GitRunner
from ..arguments import optional_ref, require_ref, require_text, schema
from ..contracts import OperationResult

if TYPE_CHECKING:
    from ..server import GitMCPServer

GIT_URL_PATTERN = re.compile(r"^(https?://|git@|ssh://|file://)")


def _validate_url(url: str) -> str:
    if not GIT_URL_PATTERN.match(url):
        raise ValidationError(
            "Invalid Git URL format. Use HTTPS (https://...), SSH (git@... or ssh://...) "
            "or a file:// URL."
        )
    return url


def clone(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Clone ``url`` into the working directory (optionally into ``targetDir``)."""
    url = _validate_url(require_text(args, "url", "url parameter is required"))
    target_dir = optional_ref(args, "targetDir")

    command: List[str] = ["clone", "--", url]
    if target_dir:
        command.append(target_dir)
    output = runner.run(*command, timeout=runner.config.network_timeout)
    return OperationResult.ok(
        f"✅ Successfully cloned repository from {url}.\n{output.text or 'Clone completed.'}"
    )


def init(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    if runner.is_repository():
        return OperationResult.ok("✅ Directory is already a Git repository.")

    output = runner.run("init")
    return OperationResult.ok(
        f"🎉 Successfully initialized empty Git repository.\n{output.text or 'Repository initialized.'}"
    )


def remote_list(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    remotes = runner.run("remote", "-v").stdout.strip()
    if not remotes:
        return OperationResult.ok("📭 No remote repositories configured.")
    return OperationResult.ok(f"🔗 Remote repositories:\n{remotes}")


def remote_add(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    name = require_ref(args, "name", "Remote name and URL are required")
    url = _validate_url(require_text(args, "url", "Remote name and URL are required"))
    runner.run("remote", "add", name, url)
    return OperationResult.ok(f"✅ Successfully added remote '{name}' with URL: {url}")


def remote_remove(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    name = require_ref(args, "name", "Remote name is required")
    runner.run("remote", "remove", name)
    return OperationResult.ok(f"✅ Successfully removed remote '{name}'")


def remote_set_url(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    name = require_ref(args, "name", "Remote name and URL are required")
    url = _validate_url(require_text(args, "url", "Remote name and URL are required"))
    runner.run("remote", "set-url", name, url)
    return OperationResult.ok(f"✅ Successfully updated remote '{name}' URL to: {url}")


def register_tools(server: GitMCPServer) -> None:
    """Register repository tools with the MCP server.

    Parameters
    ----------
    server:
        MCP server instance
    """
    server.register_tool(
        name="git-clone",
        description="Clones a repository",
        input_schema=schema(
            {
                "url": {"type": "string", "description": "Repository URL to clone"},
                "targetDir": {
                    "type": "string",
                    "description": "Target directory name for the cloned repository",
                },
            },
            required=["url"],
        ),
        handler=clone,
        requires_repository=False,
    )

    server.register_tool(
        name="git-init",
        description="Initializes a new Git repository",
        input_schema=schema(),
        handler=init,
        requires_repository=False,
    )

    server.register_tool(
        name="git-remote-list",
        description="Lists all remote repositories",
        input_schema=schema(),
        handler=remote_list,
    )

    server.register_tool(
        name="git-remote-add",
        description="Adds a remote repository",
        input_schema=schema(
            {
                "name": {"type": "string", "description": "Name for the remote repository"},
                "url": {"type": "string", "description": "URL of the remote repository"},
            },
            required=["name", "url"],
        ),
        handler=remote_add,
    )

    server.register_tool(
        name="git-remote-remove",
        description="Removes a remote repository",
        input_schema=schema(
            {"name": {"type": "string", "description": "Name of the remote repository to remove"}},
            required=["name"],
        ),
        handler=remote_remove,
    )

    server.register_tool(
        name="git-remote-set-url",
        description="Changes the URL of an existing remote repository",
        input_schema=schema(
            {
                "name": {"type": "string", "description": "Name of the remote repository"},
                "url": {"type": "string", "description": "New URL for the remote repository"},
            },
            required=["name", "url"],
        ),
        handler=remote_set_url,
    )
