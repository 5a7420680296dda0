"""Staging area tools for MCP server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from ...git.errors import ValidationError
from ...git.runner import GitRunner
from ..arguments import plural, require_text, schema, string_list
from ..contracts import OperationResult

if TYPE_CHECKING:
    from ..server import GitMCPServer


def add_all(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Stage every modified and untracked file.

    A clean working tree is reported as success without running ``git add``.
    """
    if not runner.porcelain_status():
        return OperationResult.ok("No changes to add. Working directory is clean.")

    runner.run("add", "-A")
    staged = runner.staged_changes()
    if not staged:
        return OperationResult.ok("✅ All files added to staging area.")

    listing = "\n".join(staged)
    return OperationResult.ok(f"✅ {plural(len(staged), 'file')} staged.\n\nStaged files:\n{listing}")


def add(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Stage the files named in ``files``."""
    files = string_list(args, "files")
    if not files:
        raise ValidationError("No files specified to add")

    for name in files:
        if not (runner.working_dir / name).exists():
            raise ValidationError(f"File does not exist: {name}")

    output = runner.run("add", "--", *files)
    return OperationResult.ok(
        f"✅ Successfully added files to staging area: {', '.join(files)}\n"
        f"{output.text or 'Files staged successfully.'}"
    )


def remove(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Unstage a single file, keeping its working tree changes."""
    name = require_text(args, "file", "file parameter is required")
    output = runner.run("reset", "HEAD", "--", name)
    return OperationResult.ok(
        f"✅ Successfully removed file from staging area: {name}\n"
        f"{output.text or 'File unstaged successfully.'}"
    )


def remove_all(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    output = runner.run("reset", "HEAD", ".")
    return OperationResult.ok(
        "✅ Successfully removed all files from staging area.\n"
        f"{output.text or 'All files unstaged successfully.'}"
    )


def register_tools(server: GitMCPServer) -> None:
    """Register staging tools with the MCP server.

    Parameters
    ----------
    server:
        MCP server instance
    """
    server.register_tool(
        name="git-add-all",
        description="Adds all files to the staging area",
        input_schema=schema(),
        handler=add_all,
    )

    server.register_tool(
        name="git-add",
        description="Adds specific files to the staging area",
        input_schema=schema(
            {
                "files": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "The files to add to the staging area",
                },
            },
            required=["files"],
        ),
        handler=add,
    )

    server.register_tool(
        name="git-remove",
        description="Removes a specific file from the staging area",
        input_schema=schema(
            {"file": {"type": "string", "description": "The file to remove from the staging area"}},
            required=["file"],
        ),
        handler=remove,
    )

    server.register_tool(
        name="git-remove-all",
        description="Removes all files from the staging area",
        input_schema=schema(),
        handler=remove_all,
    )
