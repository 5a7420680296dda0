"""Configuration for running the git MCP server and its command aliases."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path


@dataclass(slots=True)
class ServerConfig:
    """Runtime configuration shared by the MCP server and the CLI.

    Attributes
    ----------
    default_directory:
        Directory used when a request does not name one. ``None`` means the
        process working directory at the time of the call.
    default_timeout:
        Seconds before a local git command is killed.
    network_timeout:
        Seconds before a command that talks to a remote (push, pull, clone)
        is killed.
    validation_timeout:
        Seconds allowed for the quick "is this a repository" check.
    max_log_entries:
        Upper bound for ``git-log``'s ``maxCount``.
    git_executable:
        Name or path of the git binary.
    log_level:
        Level name applied to the ``gitmcp`` logger.
    """

    default_directory: Path | None = None
    default_timeout: float = 30.0
    network_timeout: float = 60.0
    validation_timeout: float = 5.0
    max_log_entries: int = 50
    git_executable: str = "git"
    log_level: str = "WARNING"

    def resolve_directory(self, directory: str | os.PathLike[str] | None) -> Path:
        """Return the absolute working directory for a request.

        The directory is not required to exist; callers decide how to report
        a missing path.
        """

        if directory:
            target = Path(directory).expanduser()
        elif self.default_directory is not None:
            target = Path(self.default_directory).expanduser()
        else:
            target = Path.cwd()
        return target.resolve()

    def with_overrides(self, **changes: object) -> "ServerConfig":
        """Return a copy with the non-``None`` values in ``changes`` applied."""

        return replace(self, **{k: v for k, v in changes.items() if v is not None})


DEFAULT_CONFIG = ServerConfig()
