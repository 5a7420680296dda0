"""Commit and remote synchronisation tools for MCP server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from ...git.errors import ErrorKind, GitCommandFailure, GitOperationError, ValidationError
from ...git.runner import GitRunner
from ..arguments import optional_text, plural, schema
from ..contracts import OperationResult
from .history import repository_context

if TYPE_CHECKING:
    from ..server import GitMCPServer


def commit(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Commit the staged changes with ``message``.

    Fails with a "message required" error for an empty message and with a
    hint to stage files when nothing is staged.
    """
    message = optional_text(args, "message")
    if message is None:
        raise ValidationError("Commit message cannot be empty (message required).")

    staged = runner.staged_changes()
    if not staged:
        raise GitOperationError(
            "No staged changes to commit.",
            kind=ErrorKind.NOTHING_TO_COMMIT,
            suggestion='Use "git add" to stage files first.',
        )

    output = runner.run("commit", "-m", message)
    files = "\n".join(staged)
    return OperationResult.ok(
        f'✅ Successfully committed {plural(len(staged), "file")} with message: "{message}"\n\n'
        f"📝 Commit details:\n{output.stdout}\n\n"
        f"📁 Files committed:\n{files}"
    )


def push(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Push the current branch to its upstream."""
    if runner.remote_url("origin") is None:
        raise GitOperationError(
            "No remote repository configured.",
            kind=ErrorKind.INVALID_ARGUMENT,
            suggestion='Add a remote with "git remote add origin <url>".',
        )

    try:
        pending = runner.run("log", "@{u}..", "--oneline")
    except GitCommandFailure:
        # No upstream yet; let the push itself report what is wrong.
        pending = None
    if pending is not None and not pending.stdout.strip():
        return OperationResult.ok("✅ Nothing to push - all commits are already on remote.")

    context = repository_context(runner)
    output = runner.run("push", timeout=runner.config.network_timeout)
    return OperationResult.ok(
        f"🚀 Successfully pushed changes to remote repository.\n\n{context}\n"
        f"{output.text or 'Push completed successfully.'}"
    )


def pull(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    output = runner.run("pull", timeout=runner.config.network_timeout)
    return OperationResult.ok(
        f"✅ Successfully pulled changes from remote repository.\n{output.stdout or 'Already up to date.'}"
    )


def register_tools(server: GitMCPServer) -> None:
    """Register commit and sync tools with the MCP server.

    Parameters
    ----------
    server:
        MCP server instance
    """
    server.register_tool(
        name="git-commit",
        description="Commits staged files",
        input_schema=schema(
            {"message": {"type": "string", "description": "Commit message"}},
            required=["message"],
        ),
        handler=commit,
    )

    server.register_tool(
        name="git-push",
        description="Pushes committed files to the remote repository",
        input_schema=schema(),
        handler=push,
    )

    server.register_tool(
        name="git-pull",
        description="Pulls changes from the remote repository",
        input_schema=schema(),
        handler=pull,
    )
