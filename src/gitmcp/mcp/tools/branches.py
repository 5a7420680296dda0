"""Branch tools for MCP server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from ...git.errors import ErrorKind, GitCommandFailure, ValidationError
from ...git.runner import GitRunner
from ..arguments import optional_bool, optional_ref, optional_text, require_ref, schema
from ..contracts import OperationResult

if TYPE_CHECKING:
    from ..server import GitMCPServer


def conflict_report(runner: GitRunner, label: str, continue_command: str, abort_command: str) -> OperationResult:
    """Failure result listing conflicted files and how to resolve them."""
    files = runner.conflicted_files()
    listing = "\n".join(f"  • {name}" for name in files) or "  (none reported)"
    return OperationResult.failure(
        f"⚠️ {label} conflict detected!\n\n"
        f"Conflicted files:\n{listing}\n\n"
        "To resolve:\n"
        "1. Edit the conflicted files\n"
        "2. Run: git add <resolved-files>\n"
        f"3. Run: {continue_command}\n"
        f"\nOr abort with: {abort_command}"
    )


def _require_clean_tree(runner: GitRunner, action: str) -> None:
    if runner.porcelain_status():
        raise ValidationError(
            f"You have uncommitted changes. Please commit or stash them before {action}.",
            suggestion='Use "git stash" to set them aside.',
        )


def branch(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Create ``branchName`` or, without it, list every branch."""
    name = optional_ref(args, "branchName")
    if name:
        runner.run("branch", name)
        return OperationResult.ok(f"✅ Successfully created branch: {name}")

    output = runner.run("branch", "-a")
    return OperationResult.ok(f"🌿 Available branches:\n{output.stdout}")


def checkout(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    name = require_ref(args, "branchName", "branchName parameter is required")
    create = optional_bool(args, "createNew")

    command = ["checkout", "-b", name] if create else ["checkout", name]
    output = runner.run(*command)
    message = (
        f"✅ Successfully created and switched to branch: {name}"
        if create
        else f"✅ Successfully switched to branch: {name}"
    )
    return OperationResult.ok(f"{message}\n{output.text}".rstrip())


def merge(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Merge ``branch`` into the current branch, reporting conflicts."""
    target = require_ref(args, "branch", "Branch name is required for merge.")
    if not runner.ref_exists(target):
        raise ValidationError(f"Branch '{target}' does not exist.")
    _require_clean_tree(runner, "merging")

    command: List[str] = ["merge", "--no-edit", target]
    strategy = optional_ref(args, "strategy")
    if strategy:
        command.append(f"--strategy={strategy}")

    try:
        output = runner.run(*command)
    except GitCommandFailure as exc:
        if exc.kind is ErrorKind.CONFLICT:
            return conflict_report(runner, "Merge", "git commit", "git merge --abort")
        raise
    return OperationResult.ok(f"✅ Successfully merged '{target}' into current branch.\n\n{output.text}")


def rebase(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Rebase the current branch onto ``target`` (default ``HEAD~1``).

    ``interactive`` runs ``git rebase -i`` with the generated todo list
    accepted as-is, since no editor can be attached to the server.
    """
    target = optional_ref(args, "target") or "HEAD~1"
    interactive = optional_bool(args, "interactive")
    _require_clean_tree(runner, "rebasing")

    command = ["rebase", "-i", target] if interactive else ["rebase", target]
    env = {"GIT_SEQUENCE_EDITOR": "true", "GIT_EDITOR": "true"} if interactive else None

    try:
        output = runner.run(*command, env=env)
    except GitCommandFailure as exc:
        if exc.kind is ErrorKind.CONFLICT:
            return conflict_report(runner, "Rebase", "git rebase --continue", "git rebase --abort")
        raise
    return OperationResult.ok(f"✅ Rebase completed successfully.\n\n{output.text}")


def cherry_pick(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    commit_hash = require_ref(args, "commitHash", "Commit hash is required for cherry-pick.")
    if not runner.ref_exists(commit_hash):
        raise ValidationError(f"Commit '{commit_hash}' does not exist.")
    _require_clean_tree(runner, "cherry-picking")

    try:
        output = runner.run("cherry-pick", commit_hash)
    except GitCommandFailure as exc:
        if exc.kind is ErrorKind.CONFLICT:
            return conflict_report(runner, "Cherry-pick", "git cherry-pick --continue", "git cherry-pick --abort")
        raise
    return OperationResult.ok(f"🍒 Successfully cherry-picked commit '{commit_hash[:8]}'.\n\n{output.text}")


def register_tools(server: GitMCPServer) -> None:
    """Register branch tools with the MCP server.

    Parameters
    ----------
    server:
        MCP server instance
    """
    server.register_tool(
        name="git-branch",
        description="Lists all branches or creates a new branch",
        input_schema=schema(
            {
                "branchName": {
                    "type": "string",
                    "description": "Name of the branch to create (leave empty to list branches)",
                },
            }
        ),
        handler=branch,
    )

    server.register_tool(
        name="git-checkout",
        description="Switches to a branch or creates and switches to a new branch",
        input_schema=schema(
            {
                "branchName": {"type": "string", "description": "Name of the branch to switch to"},
                "createNew": {
                    "type": "boolean",
                    "description": "Create a new branch if it doesn't exist (default: false)",
                },
            },
            required=["branchName"],
        ),
        handler=checkout,
    )

    server.register_tool(
        name="git-merge",
        description="Merge a branch into the current branch with conflict detection",
        input_schema=schema(
            {
                "branch": {"type": "string", "description": "The branch to merge into the current branch"},
                "strategy": {
                    "type": "string",
                    "description": "Merge strategy (optional): ours, recursive, ort, etc.",
                },
            },
            required=["branch"],
        ),
        handler=merge,
    )

    server.register_tool(
        name="git-rebase",
        description="Rebase current branch onto another branch or commit",
        input_schema=schema(
            {
                "target": {
                    "type": "string",
                    "description": "The target branch or commit to rebase onto (defaults to HEAD~1)",
                },
                "interactive": {"type": "boolean", "description": "Whether to use interactive rebase mode"},
            }
        ),
        handler=rebase,
    )

    server.register_tool(
        name="git-cherry-pick",
        description="Apply changes from a specific commit to the current branch",
        input_schema=schema(
            {"commitHash": {"type": "string", "description": "The commit hash to cherry-pick"}},
            required=["commitHash"],
        ),
        handler=cherry_pick,
    )
