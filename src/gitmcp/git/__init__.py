"""Git command execution and failure classification."""

from .errors import (
    ErrorKind,
    GitCommandFailure,
    GitOperationError,
    NotARepositoryError,
    ValidationError,
    classify_failure,
)
from .runner import CommandOutput, GitRunner

__all__ = [
    "CommandOutput",
    "ErrorKind",
    "GitCommandFailure",
    "GitOperationError",
    "GitRunner",
    "NotARepositoryError",
    "ValidationError",
    "classify_failure",
]
