"""Tag tools for MCP server."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from ...git.errors import ValidationError
from ...git.runner import GitRunner
from ..arguments import choice, optional_ref, optional_text, schema
from ..contracts import OperationResult

if TYPE_CHECKING:
    from ..server import GitMCPServer

TAG_ACTIONS = ("list", "create", "delete", "show")


def tag(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """List, create, delete or show tags. ``action`` defaults to ``list``."""
    action = choice(args, "action", TAG_ACTIONS, default="list")
    tag_name = optional_ref(args, "tagName")
    message = optional_text(args, "message")

    if action == "list":
        output = runner.run("tag", "--sort=-version:refname")
        tags = [line.strip() for line in output.stdout.splitlines() if line.strip()]
        if not tags:
            return OperationResult.ok("📌 No tags found in this repository.")
        listing = "\n".join(f"  • {name}" for name in tags)
        return OperationResult.ok(f"📌 Available tags ({len(tags)}):\n\n{listing}")

    if not tag_name:
        verb = {"create": "creating", "delete": "deleting", "show": "showing"}[action]
        raise ValidationError(f"Tag name is required for {verb} tags.")

    if action == "create":
        if message:
            runner.run("tag", "-a", tag_name, "-m", message)
            return OperationResult.ok(f"✅ Tag '{tag_name}' created successfully.\nMessage: {message}")
        runner.run("tag", tag_name)
        return OperationResult.ok(f"✅ Tag '{tag_name}' created successfully.")

    if action == "delete":
        runner.run("tag", "-d", tag_name)
        return OperationResult.ok(f"🗑️ Tag '{tag_name}' deleted successfully.")

    output = runner.run("show", "--stat", tag_name)
    return OperationResult.ok(f"📋 Tag details for '{tag_name}':\n\n{output.stdout}")


def register_tools(server: GitMCPServer) -> None:
    """Register tag tools with the MCP server.

    Parameters
    ----------
    server:
        MCP server instance
    """
    server.register_tool(
        name="git-tag",
        description="Manage Git tags: create, list, delete, or show tag details",
        input_schema=schema(
            {
                "action": {
                    "type": "string",
                    "enum": list(TAG_ACTIONS),
                    "description": "The tag action to perform (list, create, delete, show)",
                },
                "tagName": {
                    "type": "string",
                    "description": "The name of the tag (required for create, delete, show actions)",
                },
                "message": {"type": "string", "description": "The tag message (optional for create action)"},
            }
        ),
        handler=tag,
    )
