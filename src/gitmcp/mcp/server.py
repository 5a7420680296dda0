"""MCP server exposing git operations as tools."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, Set

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .. import __version__
from ..config import ServerConfig
from ..git.errors import GitOperationError, ValidationError
from ..git.runner import GitRunner
from .contracts import OperationRequest, OperationResult, ResultMetadata

logger = logging.getLogger(__name__)

Handler = Callable[[GitRunner, Dict[str, Any]], OperationResult]


class GitMCPServer:
    """MCP server for git repository operations."""

    def __init__(self, config: ServerConfig | None = None):
        self.config = config or ServerConfig()
        self.server = Server("gitmcp", version=__version__)
        self.tools: Dict[str, Handler] = {}
        self.tool_metadata: Dict[str, tuple[str, Dict]] = {}
        self.repository_tools: Set[str] = set()
        self.started_at = time.monotonic()
        self.operation_count = 0

        # Register handlers once at initialization
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Set up MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return [
                types.Tool(
                    name=tool_name,
                    description=desc,
                    inputSchema=schema,
                )
                for tool_name, (desc, schema) in self.tool_metadata.items()
            ]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
            result = self.dispatch(name, arguments or {})
            return [types.TextContent(type="text", text=result.to_json())]

    def register_tool(
        self,
        name: str,
        description: str,
        input_schema: Dict[str, Any],
        handler: Handler,
        requires_repository: bool = True,
    ) -> None:
        """Register an MCP tool.

        Parameters
        ----------
        name:
            Tool name, e.g. ``git-commit``
        description:
            Tool description
        input_schema:
            JSON schema for tool inputs
        handler:
            Function called with a ``GitRunner`` and the raw arguments
        requires_repository:
            Refuse the call unless the working directory is a git repository
        """
        self.tools[name] = handler
        self.tool_metadata[name] = (description, input_schema)
        if requires_repository:
            self.repository_tools.add(name)
        else:
            self.repository_tools.discard(name)

    def dispatch(self, name: str, arguments: Dict[str, Any] | None = None) -> OperationResult:
        """Run one tool and return its result.

        Never raises: every failure becomes an error result.
        """
        request = OperationRequest(name=name, arguments=dict(arguments or {}))
        started = time.monotonic()
        working_dir: Path | None = None

        try:
            working_dir = self._working_dir(request)
            handler = self.tools.get(request.name)
            if handler is None:
                raise ValidationError(
                    f"Unknown tool: {request.name}",
                    suggestion="Run 'gitmcp list' to see the available tools.",
                )
            runner = GitRunner(working_dir, self.config)
            if request.name in self.repository_tools:
                runner.require_repository()
            result = handler(runner, request.arguments)
        except GitOperationError as exc:
            result = OperationResult.failure(exc.render())
        except Exception as exc:
            logger.exception("Unexpected failure in %s", request.name)
            result = OperationResult.failure(f"Error: {exc}")

        duration_ms = int((time.monotonic() - started) * 1000)
        location = str(working_dir) if working_dir is not None else str(request.arguments.get("directory", ""))
        result.metadata = ResultMetadata.stamp(request.name, duration_ms, location)
        self.operation_count += 1
        logger.info(
            "[MCP-GIT] %s | %s | %dms | uptime=%ds | ops=%d",
            request.name,
            "SUCCESS" if result.success else "ERROR",
            duration_ms,
            int(time.monotonic() - self.started_at),
            self.operation_count,
        )
        return result

    def _working_dir(self, request: OperationRequest) -> Path:
        directory = request.directory
        try:
            return self.config.resolve_directory(directory)
        except (ValueError, RuntimeError, OSError) as exc:
            # Embedded NUL bytes, unknown ~user and similar.
            raise ValidationError(f"Invalid directory: {directory!r} ({exc})") from exc

    async def run(self) -> None:
        """Run the MCP server with stdio transport."""
        logger.info("Serving %d git tools over stdio", len(self.tools))
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def create_server(config: ServerConfig | None = None) -> GitMCPServer:
    """Create and configure an MCP server instance.

    Parameters
    ----------
    config:
        Server configuration

    Returns
    -------
    Configured GitMCPServer instance
    """
    server = GitMCPServer(config)

    from .tools import branches, commits, history, repos, routines, staging, tags, workspace, workflows

    # Register staging tools (add, remove)
    staging.register_tools(server)

    # Register inspection tools (status, log, diff, blame, bisect)
    history.register_tools(server)

    # Register commit and remote sync tools
    commits.register_tools(server)

    # Register branch tools (branch, checkout, merge, rebase, cherry-pick)
    branches.register_tools(server)

    # Register stash and reset tools
    workspace.register_tools(server)

    # Register repository and remote management tools
    repos.register_tools(server)

    # Register tag tools
    tags.register_tools(server)

    # Register composite workflows (flow, quick-commit, sync)
    workflows.register_tools(server)

    # Register developer routines (dev, fix, release, backup, cleanup)
    routines.register_tools(server)

    return server
