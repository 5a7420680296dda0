"""Failure taxonomy and stderr classification for git commands.

Classification is substring matching on git's stderr. GitPython runs git
under the C locale, so the needles below are matched against English output;
other locales are not supported.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence, Tuple


class ErrorKind(str, Enum):
    NOT_A_REPOSITORY = "not-a-repository"
    INVALID_ARGUMENT = "invalid-argument"
    TIMEOUT = "timeout"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    CREDENTIALS = "credentials"
    PERMISSION = "permission"
    NETWORK = "network"
    PUSH_REJECTED = "push-rejected"
    NO_UPSTREAM = "no-upstream"
    NOTHING_TO_COMMIT = "nothing-to-commit"
    COMMAND_NOT_FOUND = "command-not-found"
    UNKNOWN = "unknown"


SUGGESTIONS = {
    ErrorKind.NOT_A_REPOSITORY: 'Run "git init" to initialize or navigate to a git repository.',
    ErrorKind.TIMEOUT: "Try with a smaller scope or check network connectivity.",
    ErrorKind.CONFLICT: "Resolve the conflicts manually before proceeding.",
    ErrorKind.AUTHENTICATION: (
        'Check your credentials with "git config --list", update your personal '
        "access token and verify repository access permissions."
    ),
    ErrorKind.CREDENTIALS: (
        'Configure a credential helper ("git config --global credential.helper store"), '
        "set up SSH keys or check that your access token is valid."
    ),
    ErrorKind.PERMISSION: (
        'Verify your SSH key setup ("ssh -T git@github.com") and that you have '
        "access to the repository."
    ),
    ErrorKind.NETWORK: "Check your internet connection and the remote URL.",
    ErrorKind.PUSH_REJECTED: 'Pull the latest changes first with "git pull", then push again.',
    ErrorKind.NO_UPSTREAM: 'Set the upstream branch with "git push -u origin <branch-name>".',
    ErrorKind.NOTHING_TO_COMMIT: 'Stage files with "git add" first.',
    ErrorKind.COMMAND_NOT_FOUND: "Install git and make sure it is on PATH.",
}


# First match wins.
_STDERR_PATTERNS: List[Tuple[Sequence[str], ErrorKind, str]] = [
    (
        ("timeout:", "did not complete in"),
        ErrorKind.TIMEOUT,
        "Git command timed out.",
    ),
    (
        ("not a git repository",),
        ErrorKind.NOT_A_REPOSITORY,
        "Not a git repository.",
    ),
    (
        ("merge conflict", "conflict (", "could not apply"),
        ErrorKind.CONFLICT,
        "Merge conflict detected.",
    ),
    (
        ("authentication failed", "terminal prompts disabled", "could not read username"),
        ErrorKind.AUTHENTICATION,
        "Git authentication failed. Please check your credentials and remote access.",
    ),
    (
        ("remote rejected", "[rejected]", "failed to push some refs"),
        ErrorKind.PUSH_REJECTED,
        "Push rejected by remote. Pull latest changes first or check branch permissions.",
    ),
    (
        ("has no upstream branch",),
        ErrorKind.NO_UPSTREAM,
        "The current branch has no upstream branch.",
    ),
    (
        ("credential",),
        ErrorKind.CREDENTIALS,
        "Git credential error. Please configure your Git credentials or check your access tokens.",
    ),
    (
        ("permission denied",),
        ErrorKind.PERMISSION,
        "Permission denied. Check your SSH keys or repository access permissions.",
    ),
    (
        (
            "could not resolve hostname",
            "could not resolve host",
            "connection refused",
            "connection timed out",
        ),
        ErrorKind.NETWORK,
        "Network error: could not reach the remote. Check your internet connection.",
    ),
    (
        ("nothing to commit",),
        ErrorKind.NOTHING_TO_COMMIT,
        "Nothing to commit. All changes are already committed or there are no changes.",
    ),
]


def classify_failure(stderr: str, stdout: str = "", status: Optional[int] = None) -> Tuple[ErrorKind, str]:
    """Map a failed command's output to an ``ErrorKind`` and a short message.

    Parameters
    ----------
    stderr:
        Standard error of the failed command.
    stdout:
        Standard output, used as the fallback message and for conflicts that
        git reports on stdout.
    status:
        Exit status, quoted in the fallback message.

    Returns
    -------
    ``(kind, message)``
    """

    haystack = f"{stderr}\n{stdout}".lower()
    for needles, kind, message in _STDERR_PATTERNS:
        if any(needle in haystack for needle in needles):
            return kind, message

    fallback = stderr.strip() or stdout.strip()
    if not fallback:
        fallback = f"git exited with status {status}" if status is not None else "git command failed"
    return ErrorKind.UNKNOWN, fallback


class GitOperationError(Exception):
    """Base failure raised inside an operation handler."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        suggestion: Optional[str] = None,
        detail: str = "",
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.suggestion = suggestion if suggestion is not None else SUGGESTIONS.get(kind)
        self.detail = detail

    def render(self) -> str:
        """Return the failure text shown to callers."""

        text = f"Error: {self.message}"
        detail = self.detail.strip()
        if detail and detail != self.message:
            text += f"\n\n{detail}"
        if self.suggestion:
            text += f"\n\n💡 Suggestion: {self.suggestion}"
        return text


class NotARepositoryError(GitOperationError):
    def __init__(self, directory: str):
        super().__init__(
            f"Not a git repository: {directory}",
            kind=ErrorKind.NOT_A_REPOSITORY,
        )
        self.directory = directory


class ValidationError(GitOperationError):
    """A request argument is missing or malformed."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message, kind=ErrorKind.INVALID_ARGUMENT, suggestion=suggestion)


class GitCommandFailure(GitOperationError):
    """A git invocation exited with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        status: Optional[int],
        stdout: str = "",
        stderr: str = "",
        timeout: Optional[float] = None,
    ):
        kind, message = classify_failure(stderr, stdout, status)
        if kind is ErrorKind.TIMEOUT and timeout is not None:
            message = f"Git command timed out after {timeout:g}s."
        detail = "" if kind is ErrorKind.UNKNOWN else (stderr.strip() or stdout.strip())
        super().__init__(message, kind=kind, detail=detail)
        self.command = list(command)
        self.status = status
        self.stdout = stdout
        self.stderr = stderr

    @property
    def output(self) -> str:
        """Combined stdout and stderr, as git printed them."""

        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)
