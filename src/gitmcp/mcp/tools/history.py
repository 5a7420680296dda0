"""Repository inspection tools for MCP server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from ...git.errors import GitCommandFailure, ValidationError
from ...git.runner import GitRunner
from ..arguments import choice, optional_int, optional_ref, optional_text, require_text, schema
from ..contracts import OperationResult

if TYPE_CHECKING:
    from ..server import GitMCPServer

BISECT_ACTIONS = ("start", "bad", "good", "reset", "status")


def repository_context(runner: GitRunner) -> str:
    """Directory, origin and branch lines shown before status and push output."""
    remote = runner.remote_url("origin") or "Not configured"
    try:
        branch = runner.current_branch() or "HEAD (detached)"
    except GitCommandFailure:
        branch = "Unknown"
    return (
        f"📁 Directory: {runner.working_dir.name}\n"
        f"🔗 Remote: {remote}\n"
        f"🌿 Branch: {branch}\n"
    )


def status(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    context = repository_context(runner)
    lines = runner.porcelain_status()
    if not lines:
        return OperationResult.ok(f"{context}\n✅ Repository is clean (no changes)")
    listing = "\n".join(lines)
    return OperationResult.ok(f"{context}\n📊 Current repository status:\n{listing}")


def log(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Show the most recent commits, one line each.

    ``maxCount`` defaults to 10 and is clamped to ``config.max_log_entries``.
    """
    count = optional_int(args, "maxCount", 10)
    if count < 1:
        raise ValidationError("maxCount must be at least 1")
    count = min(count, runner.config.max_log_entries)

    try:
        output = runner.run("log", "--oneline", f"-{count}")
    except GitCommandFailure as exc:
        # Fresh repository without any commit yet.
        if "does not have any commits" in exc.stderr:
            return OperationResult.ok("📝 No commits found")
        raise
    return OperationResult.ok(output.stdout or "📝 No commits found")


def diff(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    target = optional_ref(args, "target")
    command: List[str] = ["diff"]
    if target:
        command.append(target)
    output = runner.run(*command)
    return OperationResult.ok(output.stdout or "📄 No differences found")


def blame(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    file_path = require_text(args, "filePath", "File path is required for blame.")
    if not (runner.working_dir / file_path).exists():
        raise ValidationError(f"File '{file_path}' does not exist.")

    command: List[str] = ["blame"]
    line_range = optional_text(args, "lineRange")
    if line_range:
        command += ["-L", line_range]
    command += ["--", file_path]

    output = runner.run(*command)
    return OperationResult.ok(f"📝 Blame information for '{file_path}':\n\n{output.stdout}")


def bisect(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Drive ``git bisect`` one step at a time; ``status`` shows the bisect log."""
    action = choice(args, "action", BISECT_ACTIONS)
    if action is None:
        raise ValidationError(f"Invalid action. Use: {', '.join(BISECT_ACTIONS)}.")
    commit = optional_ref(args, "commit")

    if action == "status":
        command = ["bisect", "log"]
    elif action in ("bad", "good"):
        command = ["bisect", action] + ([commit] if commit else [])
    else:
        command = ["bisect", action]

    output = runner.run(*command)
    return OperationResult.ok(f"🔍 Bisect {action}:\n\n{output.text}")


def register_tools(server: GitMCPServer) -> None:
    """Register inspection tools with the MCP server.

    Parameters
    ----------
    server:
        MCP server instance
    """
    server.register_tool(
        name="git-status",
        description="Displays the status of the git repository",
        input_schema=schema(),
        handler=status,
    )

    server.register_tool(
        name="git-log",
        description="Shows commit history",
        input_schema=schema(
            {"maxCount": {"type": "number", "description": "Maximum number of commits to show (default: 10)"}}
        ),
        handler=log,
    )

    server.register_tool(
        name="git-diff",
        description="Shows differences between commits, branches, or working directory",
        input_schema=schema(
            {"target": {"type": "string", "description": "Target to compare against (commit hash, branch name, etc.)"}}
        ),
        handler=diff,
    )

    server.register_tool(
        name="git-blame",
        description="Show line-by-line authorship information for a file",
        input_schema=schema(
            {
                "filePath": {"type": "string", "description": "The path to the file to show blame information for"},
                "lineRange": {"type": "string", "description": "Line range to show blame for (e.g., '1,10' or '5,+10')"},
            },
            required=["filePath"],
        ),
        handler=blame,
    )

    server.register_tool(
        name="git-bisect",
        description="Binary search through commit history to find bugs",
        input_schema=schema(
            {
                "action": {
                    "type": "string",
                    "enum": list(BISECT_ACTIONS),
                    "description": "The bisect action to perform",
                },
                "commit": {"type": "string", "description": "Specific commit hash (optional for bad/good actions)"},
            },
            required=["action"],
        ),
        handler=bisect,
    )
