"""Command line entry point for the git MCP server."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable

from .aliases import ALIASES, run_alias
from .config import ServerConfig
from .log import configure_logging

logger = logging.getLogger(__name__)


def _resolve_config(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig().with_overrides(
        default_directory=args.directory,
        default_timeout=args.timeout,
        log_level=args.log_level,
    )


def _parse_assignments(pairs: Iterable[str]) -> Dict[str, Any]:
    """Parse ``key=value`` pairs; values are read as JSON when they parse."""
    arguments: Dict[str, Any] = {}
    for pair in pairs:
        key, separator, raw = pair.partition("=")
        if not separator or not key:
            raise SystemExit(f"Expected key=value, got: {pair}")
        try:
            arguments[key] = json.loads(raw)
        except json.JSONDecodeError:
            arguments[key] = raw
    return arguments


def _serve(args: argparse.Namespace) -> int:
    """Start the MCP server on stdio."""
    config = _resolve_config(args)
    configure_logging(config.log_level)

    from .mcp.server import create_server

    server = create_server(config)
    logger.info("Starting gitmcp server (default directory: %s)", config.resolve_directory(None))
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Shutting down server")
    return 0


def _list(args: argparse.Namespace) -> int:
    from .mcp.server import create_server

    server = create_server(_resolve_config(args))
    print(f"Tools ({len(server.tool_metadata)}):")
    for name, (description, _schema) in sorted(server.tool_metadata.items()):
        print(f"  {name:<20} {description}")

    print(f"\nAliases ({len(ALIASES)}):")
    for alias in ALIASES.values():
        print(f"  {alias.name:<16} -> {alias.tool:<20} {alias.description}")
    return 0


def _run(args: argparse.Namespace) -> int:
    """Run one tool (``key=value`` arguments) or one alias (its own arguments)."""
    config = _resolve_config(args)
    if args.name in ALIASES:
        return run_alias(args.name, args.arguments, config)

    configure_logging(config.log_level)
    from .mcp.server import create_server

    as_json = args.json or "--json" in args.arguments
    pairs = [item for item in args.arguments if item != "--json"]
    result = create_server(config).dispatch(args.name, _parse_assignments(pairs))
    if as_json:
        print(result.to_json())
    elif result.success:
        print(result.text)
    else:
        print(result.text, file=sys.stderr)
    return 0 if result.success else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gitmcp", description=__doc__)
    parser.add_argument(
        "--directory",
        type=Path,
        help="Default working directory for tools called without one (defaults to the current directory)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Timeout in seconds for local git commands (default 30)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr diagnostics (default WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Start the MCP server on stdio")
    serve_parser.set_defaults(func=_serve)

    list_parser = subparsers.add_parser("list", help="List the available tools and aliases")
    list_parser.set_defaults(func=_list)

    run_parser = subparsers.add_parser("run", help="Run a single tool or alias")
    run_parser.add_argument("name", help="Tool name (git-commit) or alias (gcommit)")
    run_parser.add_argument("--json", action="store_true", help="Print the raw result envelope")
    run_parser.add_argument(
        "arguments",
        nargs=argparse.REMAINDER,
        help="key=value pairs for tools, or the alias' own arguments",
    )
    run_parser.set_defaults(func=_run)

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return args.func(args)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    run()
