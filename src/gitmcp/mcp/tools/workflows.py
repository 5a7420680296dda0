"""Composite workflows built from the single-operation tools.

A workflow is an ordered list of steps. Steps run one after another and the
first failing step ends the workflow; nothing is rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Sequence

from ...git.errors import GitOperationError, ValidationError
from ...git.runner import GitRunner
from ..arguments import choice, optional_bool, optional_text, schema
from ..contracts import OperationResult
from . import commits, history, staging, workspace

if TYPE_CHECKING:
    from ..server import GitMCPServer

FRESH_MODES = ("reset", "safe", "hard")


@dataclass(slots=True)
class Step:
    label: str
    action: Callable[[], OperationResult]
    optional: bool = False


def run_steps(title: str, steps: Sequence[Step], preamble: str = "") -> OperationResult:
    """Run ``steps`` in order, stopping at the first failure.

    Parameters
    ----------
    title:
        Workflow name used in the progress log, e.g. ``"Git Flow"``
    steps:
        Steps to run
    preamble:
        Text placed after the opening line of the log

    Returns
    -------
    Success with the accumulated progress log, or a failure naming the step
    that failed. Later steps are not attempted after a failure, unless the
    failed step is ``optional``.
    """
    log: List[str] = [f"🚀 Starting {title}...", ""]
    if preamble:
        log += [preamble, ""]

    total = len(steps)
    for index, step in enumerate(steps, start=1):
        log.append(f"▶️  Step {index}/{total}: {step.label}")
        try:
            result = step.action()
        except GitOperationError as exc:
            result = OperationResult.failure(exc.render())
        log += [result.text, ""]
        if result.is_error and step.optional:
            log += [f"⚠️  {step.label} failed, continuing.", ""]
            continue
        if result.is_error:
            log.append(f"❌ {title} failed at step {index}/{total}: {step.label}")
            return OperationResult.failure("\n".join(log))

    log.append(f"🎉 {title} complete!")
    return OperationResult.ok("\n".join(log))


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def commit_steps(runner: GitRunner, message: str) -> List[Step]:
    return [
        Step("add all changes", lambda: staging.add_all(runner, {})),
        Step("commit", lambda: commits.commit(runner, {"message": message})),
    ]


def flow(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """add all -> commit -> push."""
    message = optional_text(args, "message")
    if message is None:
        raise ValidationError("Commit message is required for git flow.")

    steps = commit_steps(runner, message)
    steps.append(Step("push to remote", lambda: commits.push(runner, {})))
    return run_steps("Git Flow", steps, preamble=history.repository_context(runner))


def quick_commit(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """add all -> commit."""
    message = optional_text(args, "message")
    if message is None:
        raise ValidationError("Commit message is required.")
    return run_steps("Quick Commit", commit_steps(runner, message))


def sync(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """pull -> push."""
    steps = [
        Step("pull from remote", lambda: commits.pull(runner, {})),
        Step("push to remote", lambda: commits.push(runner, {})),
    ]
    return run_steps("Git Sync", steps)


def save(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """add all -> commit [-> push], generating a message when none is given.

    ``wip`` uses ``WIP: <branch> - <time>``, ``backup`` uses
    ``Backup: <time>`` and the default is ``Quick save: <time>``.
    """
    message = optional_text(args, "message")
    if message is None:
        if optional_bool(args, "wip"):
            branch = runner.current_branch() or "HEAD"
            message = f"WIP: {branch} - {_timestamp()}"
        elif optional_bool(args, "backup"):
            message = f"Backup: {_timestamp()}"
        else:
            message = f"Quick save: {_timestamp()}"

    steps = commit_steps(runner, message)
    if optional_bool(args, "push"):
        steps.append(Step("push to remote", lambda: commits.push(runner, {})))
    return run_steps("Quick Save", steps, preamble=f'📝 Message: "{message}"')


def fresh(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Bring the working tree up to date with the remote.

    ``reset`` (default): pull -> mixed reset -> status.
    ``safe``: pull -> stash -> pull -> status.
    ``hard``: pull -> hard reset -> status, discarding local changes.
    """
    mode = choice(args, "mode", FRESH_MODES, default="reset")

    steps = [Step("pull latest changes", lambda: commits.pull(runner, {}))]
    if mode == "safe":
        steps += [
            Step(
                "stash local changes",
                lambda: workspace.stash(runner, {"message": "Auto-stash before fresh sync"}),
            ),
            Step("pull again", lambda: commits.pull(runner, {})),
        ]
    else:
        reset_mode = "hard" if mode == "hard" else "mixed"
        steps.append(Step(f"{reset_mode} reset", lambda: workspace.reset(runner, {"mode": reset_mode})))
    steps.append(Step("final status", lambda: history.status(runner, {})))
    return run_steps("Fresh Start", steps)


def register_tools(server: GitMCPServer) -> None:
    """Register composite workflows with the MCP server.

    Parameters
    ----------
    server:
        MCP server instance
    """
    message_schema = {"message": {"type": "string", "description": "Commit message for the workflow"}}

    server.register_tool(
        name="git-flow",
        description="Complete Git workflow: add all changes, commit with message, and push to remote",
        input_schema=schema(message_schema, required=["message"]),
        handler=flow,
    )

    server.register_tool(
        name="git-quick-commit",
        description="Quick commit: add all changes and commit them with the given message",
        input_schema=schema(message_schema, required=["message"]),
        handler=quick_commit,
    )

    server.register_tool(
        name="git-sync",
        description="Synchronize repository: pull from remote, then push local changes",
        input_schema=schema(),
        handler=sync,
    )

    server.register_tool(
        name="git-save",
        description="Quick save: add all and commit with a generated or given message, optionally push",
        input_schema=schema(
            {
                "message": {"type": "string", "description": "Commit message (generated when omitted)"},
                "wip": {"type": "boolean", "description": "Use a 'WIP: <branch>' message"},
                "backup": {"type": "boolean", "description": "Use a 'Backup: <time>' message"},
                "push": {"type": "boolean", "description": "Push after committing"},
            }
        ),
        handler=save,
    )

    server.register_tool(
        name="git-fresh",
        description="Fresh start: pull, then reset or stash local changes, then show status",
        input_schema=schema(
            {
                "mode": {
                    "type": "string",
                    "enum": list(FRESH_MODES),
                    "description": "reset (default), safe (stash local changes) or hard (discard them)",
                },
            }
        ),
        handler=fresh,
    )
