"""Stash and reset tools for MCP server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from ...git.errors import ErrorKind, GitCommandFailure
from ...git.runner import GitRunner
from ..arguments import choice, optional_ref, optional_text, schema
from ..contracts import OperationResult
from .branches import conflict_report

if TYPE_CHECKING:
    from ..server import GitMCPServer

RESET_MODES = ("soft", "mixed", "hard")

HARD_RESET_WARNING = (
    "⚠️  WARNING: --hard is destructive. Uncommitted changes in the index and "
    "working tree were discarded, and this is irreversible."
)


def stash(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    message = optional_text(args, "message")
    command: List[str] = ["stash", "push"]
    if message:
        command += ["-m", message]

    output = runner.run(*command)
    if "no local changes to save" in output.text.lower():
        return OperationResult.ok("💾 No local changes to save.")
    return OperationResult.ok(f"💾 Successfully stashed changes.\n{output.text or 'Changes stashed successfully.'}")


def stash_pop(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    try:
        output = runner.run("stash", "pop")
    except GitCommandFailure as exc:
        if exc.kind is ErrorKind.CONFLICT:
            # git keeps the stash entry when applying it conflicts.
            return conflict_report(runner, "Stash", "git stash drop", "git reset --merge")
        raise
    return OperationResult.ok(f"💾 Successfully applied stash.\n{output.text or 'Stash applied successfully.'}")


def reset(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Reset HEAD to ``target`` with the given ``mode``.

    A hard reset always carries an explicit warning in its text.
    """
    mode = choice(args, "mode", RESET_MODES, default="mixed")
    target = optional_ref(args, "target") or "HEAD"

    output = runner.run("reset", f"--{mode}", target)
    text = f"🔄 Successfully reset repository ({mode}) to {target}.\n{output.text or 'Reset completed.'}"
    if mode == "hard":
        text = f"{text}\n\n{HARD_RESET_WARNING}"
    return OperationResult.ok(text)


def register_tools(server: GitMCPServer) -> None:
    """Register stash and reset tools with the MCP server.

    Parameters
    ----------
    server:
        MCP server instance
    """
    server.register_tool(
        name="git-stash",
        description="Stashes current changes",
        input_schema=schema({"message": {"type": "string", "description": "Message for the stash"}}),
        handler=stash,
    )

    server.register_tool(
        name="git-stash-pop",
        description="Applies the most recent stash",
        input_schema=schema(),
        handler=stash_pop,
    )

    server.register_tool(
        name="git-reset",
        description="Resets repository to a specific commit or state",
        input_schema=schema(
            {
                "mode": {
                    "type": "string",
                    "enum": list(RESET_MODES),
                    "description": "Reset mode (default: mixed)",
                },
                "target": {"type": "string", "description": "Target commit or reference (default: HEAD)"},
            }
        ),
        handler=reset,
    )
