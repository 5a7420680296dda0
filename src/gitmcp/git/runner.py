"""Run git commands for a single working directory."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from git import Git
from git.exc import GitCommandNotFound

from ..config import DEFAULT_CONFIG, ServerConfig
from .errors import (
    ErrorKind,
    GitCommandFailure,
    GitOperationError,
    NotARepositoryError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Never wait on a credential prompt nobody can answer.
BASE_ENVIRONMENT: Dict[str, str] = {"GIT_TERMINAL_PROMPT": "0"}


@dataclass(slots=True)
class CommandOutput:
    """Outcome of one successful git invocation."""

    args: List[str]
    status: int
    stdout: str
    stderr: str
    duration_ms: int

    @property
    def text(self) -> str:
        """stdout, or stderr for commands that report progress there."""

        return self.stdout.strip() or self.stderr.strip()


class GitRunner:
    """Wrapper around GitPython's command layer bound to one directory."""

    def __init__(self, working_dir: Path, config: ServerConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self.working_dir = Path(working_dir)
        self._git = Git(str(self.working_dir))

    def run(
        self,
        *args: str,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandOutput:
        """Run ``git <args>`` and return its output.

        Parameters
        ----------
        args:
            Arguments after ``git``. They are passed as a list, never through
            a shell.
        timeout:
            Seconds before the process is killed. Defaults to
            ``config.default_timeout``.
        env:
            Extra environment variables for this invocation.

        Raises
        ------
        GitCommandFailure
            When git exits with a non-zero status or is killed.
        GitOperationError
            When git cannot be started at all.
        """

        if not self.working_dir.is_dir():
            raise ValidationError(f"Directory does not exist: {self.working_dir}")

        limit = self.config.default_timeout if timeout is None else timeout
        command = [self.config.git_executable, *args]
        environment = dict(BASE_ENVIRONMENT)
        if env:
            environment.update(env)

        started = time.monotonic()
        try:
            status, stdout, stderr = self._git.execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
                kill_after_timeout=limit,
                env=environment,
            )
        except GitCommandNotFound as exc:
            raise GitOperationError(
                f"Could not run {self.config.git_executable!r}: {exc}",
                kind=ErrorKind.COMMAND_NOT_FOUND,
            ) from exc
        duration_ms = int((time.monotonic() - started) * 1000)

        printable = " ".join(command)
        if status != 0:
            failure = GitCommandFailure(command, status, stdout or "", stderr or "", timeout=limit)
            logger.warning(
                "[GIT-ERROR] %s | %dms | %s | %s",
                printable,
                duration_ms,
                self.working_dir,
                failure.message,
            )
            raise failure

        logger.debug("[GIT-CMD] %s | %dms | %s", printable, duration_ms, self.working_dir)
        return CommandOutput(
            args=command,
            status=status,
            stdout=stdout or "",
            stderr=stderr or "",
            duration_ms=duration_ms,
        )

    def is_repository(self) -> bool:
        """Return True when the working directory is inside a work tree."""

        try:
            self.run("rev-parse", "--git-dir", timeout=self.config.validation_timeout)
        except GitOperationError:
            return False
        return True

    def require_repository(self) -> None:
        if not self.working_dir.is_dir():
            raise ValidationError(f"Directory does not exist: {self.working_dir}")
        if not self.is_repository():
            raise NotARepositoryError(str(self.working_dir))

    def current_branch(self) -> str:
        """Name of the checked out branch, empty when HEAD is detached."""

        return self.run("branch", "--show-current").stdout.strip()

    def remote_url(self, name: str = "origin") -> Optional[str]:
        """URL of remote ``name`` or None when it is not configured."""

        try:
            return self.run("remote", "get-url", name).stdout.strip() or None
        except GitCommandFailure:
            return None

    def porcelain_status(self) -> List[str]:
        """``git status --porcelain`` lines; empty for a clean tree."""

        output = self.run("status", "--porcelain").stdout
        return [line for line in output.splitlines() if line.strip()]

    def staged_changes(self) -> List[str]:
        """``git diff --cached --name-status`` lines."""

        output = self.run("diff", "--cached", "--name-status").stdout
        return [line for line in output.splitlines() if line.strip()]

    def conflicted_files(self) -> List[str]:
        output = self.run("diff", "--name-only", "--diff-filter=U").stdout
        return [line.strip() for line in output.splitlines() if line.strip()]

    def ref_exists(self, ref: str) -> bool:
        """Return True when ``ref`` resolves to a commit."""

        try:
            self.run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        except GitCommandFailure:
            return False
        return True
