"""Day-to-day developer routines built on the workflow step runner.

git-dev starts or resumes a working session, git-fix ships small fixes and
hotfixes, git-release cuts a tagged release, git-backup snapshots the current
state and git-cleanup removes branches that are already merged.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple

from ...git.errors import GitCommandFailure, ValidationError
from ...git.runner import GitRunner
from ..arguments import choice, optional_bool, optional_ref, optional_text, plural, schema
from ..contracts import OperationResult
from . import branches, commits, history, staging, tags, workspace
from .workflows import Step, commit_steps, run_steps

if TYPE_CHECKING:
    from ..server import GitMCPServer

DEV_ACTIONS = ("start", "continue", "sync")
FIX_MODES = ("fix", "hotfix", "amend")
RELEASE_BUMPS = ("patch", "minor", "major")
BACKUP_STRATEGIES = ("smart", "branch", "tag", "stash", "list")

BASE_CANDIDATES = ("main", "master")
PROTECTED_BRANCHES = ("main", "master", "develop", "dev")
VERSION_PATTERN = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)$")

Version = Tuple[int, int, int]


def base_branch(runner: GitRunner, args: Dict[str, Any]) -> str:
    """``base`` when given, otherwise the first of main/master that exists."""
    explicit = optional_ref(args, "base")
    if explicit:
        return explicit
    for candidate in BASE_CANDIDATES:
        if runner.ref_exists(f"refs/heads/{candidate}"):
            return candidate
    raise ValidationError(
        "No main or master branch found.",
        suggestion="Pass base with the name of your main branch.",
    )


def _git(runner: GitRunner, summary: str, *args: str, timeout: Optional[float] = None) -> Callable[[], OperationResult]:
    def action() -> OperationResult:
        output = runner.run(*args, timeout=timeout)
        return OperationResult.ok(f"{summary}\n{output.text}".rstrip())

    return action


def _switch(runner: GitRunner, name: str, create: bool = False) -> Step:
    label = f"create branch {name}" if create else f"switch to {name}"
    return Step(label, lambda: branches.checkout(runner, {"branchName": name, "createNew": create}))


def _status(runner: GitRunner) -> Step:
    return Step("status", lambda: history.status(runner, {}))


def _pull(runner: GitRunner, label: str = "pull latest changes", optional: bool = False) -> Step:
    return Step(label, lambda: commits.pull(runner, {}), optional=optional)


def dev(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Start, resume or sync a development session.

    ``start`` without ``branchName``: status -> pull -> list branches.
    ``start`` with ``branchName``: switch to base -> pull -> create branch -> status.
    ``continue``: pop the latest stash -> status.
    ``sync``: bring base up to date and merge it into the current branch.

    Pulls during ``start`` may fail (no remote yet) without ending the session.
    """
    action = choice(args, "action", DEV_ACTIONS, default="start")
    name = optional_ref(args, "branchName")

    if action == "continue":
        steps = [
            Step("restore stashed work", lambda: workspace.stash_pop(runner, {}), optional=True),
            _status(runner),
        ]
        return run_steps("Dev Continue", steps)

    if action == "sync":
        base = base_branch(runner, args)
        current = runner.current_branch()
        if not current:
            raise ValidationError("HEAD is detached. Check out a branch before syncing.")
        if current == base:
            steps = [_pull(runner, f"pull {base}"), _status(runner)]
        else:
            steps = [
                _switch(runner, base),
                _pull(runner, f"pull {base}"),
                _switch(runner, current),
                Step(f"merge {base} into {current}", lambda: branches.merge(runner, {"branch": base})),
                _status(runner),
            ]
        return run_steps("Dev Sync", steps, preamble=f"🌿 Syncing {current} with {base}")

    if name:
        base = base_branch(runner, args)
        steps = [
            _switch(runner, base),
            _pull(runner, optional=True),
            _switch(runner, name, create=True),
            _status(runner),
        ]
        return run_steps("Dev Start", steps, preamble=f"🌿 New branch: {name} (from {base})")

    steps = [
        _status(runner),
        _pull(runner, optional=True),
        Step("list branches", lambda: branches.branch(runner, {})),
    ]
    return run_steps("Dev Session", steps)


def fix(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Commit a fix.

    ``fix`` (default): add all -> commit ``Fix: <message>``.
    ``hotfix``: switch to base -> pull -> create ``hotfix-<time>`` -> add all
    -> commit ``HOTFIX: <message>``.
    ``amend``: add all -> amend the last commit, rewording it when a message
    is given.
    """
    mode = choice(args, "mode", FIX_MODES, default="fix")
    message = optional_text(args, "message")

    if mode == "amend":
        command = ["commit", "--amend", "-m", message] if message else ["commit", "--amend", "--no-edit"]
        steps = [
            Step("add all changes", lambda: staging.add_all(runner, {})),
            Step("amend last commit", _git(runner, "✏️ Amended the last commit.", *command)),
        ]
        return run_steps("Amend Fix", steps)

    if message is None:
        raise ValidationError("A description of the fix is required.")

    if mode == "fix":
        return run_steps("Quick Fix", commit_steps(runner, f"Fix: {message}"))

    base = base_branch(runner, args)
    hotfix_branch = f"hotfix-{datetime.now().strftime('%Y-%m-%d-%H-%M')}"
    steps = [
        _switch(runner, base),
        _pull(runner, optional=True),
        _switch(runner, hotfix_branch, create=True),
        *commit_steps(runner, f"HOTFIX: {message}"),
    ]
    return run_steps("Hotfix", steps, preamble=f"🚨 Hotfix branch: {hotfix_branch} (from {base})")


def latest_version(runner: GitRunner) -> Version:
    """Highest ``[v]X.Y.Z`` tag, ``(0, 0, 0)`` when there is none."""
    output = runner.run("tag", "--list", "--sort=-version:refname")
    for line in output.stdout.splitlines():
        match = VERSION_PATTERN.match(line.strip())
        if match:
            major, minor, patch = (int(part) for part in match.groups())
            return major, minor, patch
    return 0, 0, 0


def bump_version(version: Version, part: str) -> str:
    major, minor, patch = version
    if part == "major":
        return f"{major + 1}.0.0"
    if part == "minor":
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"


def _release_readiness(runner: GitRunner) -> OperationResult:
    checks: List[str] = []
    blocking = False

    changes = runner.porcelain_status()
    if changes:
        checks.append(f"❌ Uncommitted changes ({plural(len(changes), 'file')})")
        blocking = True
    else:
        checks.append("✅ Working tree is clean")

    current = runner.current_branch() or "HEAD (detached)"
    if current in BASE_CANDIDATES:
        checks.append(f"✅ On {current}")
    else:
        checks.append(f"⚠️  On '{current}'; releases are usually cut from main or master")

    if runner.remote_url("origin") is None:
        checks.append("⚠️  No origin remote configured")
    else:
        try:
            runner.run("fetch", timeout=runner.config.network_timeout)
            counts = runner.run("rev-list", "--left-right", "--count", "HEAD...@{u}").stdout.split()
        except GitCommandFailure as exc:
            checks.append(f"⚠️  Could not compare with remote: {exc.message}")
        else:
            ahead, behind = (int(value) for value in counts)
            if behind:
                checks.append(f"❌ Behind remote by {plural(behind, 'commit')}")
                blocking = True
            elif ahead:
                checks.append(f"⚠️  {plural(ahead, 'commit')} not pushed yet")
            else:
                checks.append("✅ Up to date with remote")

    latest = latest_version(runner)
    current_version = "v" + ".".join(str(part) for part in latest) if latest != (0, 0, 0) else "none"
    checks.append(f"📌 Latest version: {current_version} (next patch: v{bump_version(latest, 'patch')})")

    report = "🔍 Release readiness:\n\n" + "\n".join(checks)
    if blocking:
        return OperationResult.failure(f"{report}\n\n❌ Not ready to release.")
    return OperationResult.ok(f"{report}\n\n✅ Ready to release.")


def release(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Tag a release and push it.

    The version is ``version`` or the latest version tag bumped by ``bump``.
    Uncommitted changes are committed as ``Prepare release vX.Y.Z`` first.
    ``push`` defaults to true. ``prepare`` only reports readiness.
    """
    if optional_bool(args, "prepare"):
        return _release_readiness(runner)

    version = optional_ref(args, "version")
    bump = choice(args, "bump", RELEASE_BUMPS)
    if version and bump:
        raise ValidationError("Pass either version or bump, not both.")
    if version is None:
        if bump is None:
            raise ValidationError("A version or a bump (patch, minor, major) is required.")
        version = bump_version(latest_version(runner), bump)

    tag_name = version if version.startswith("v") else f"v{version}"
    if runner.ref_exists(f"refs/tags/{tag_name}"):
        raise ValidationError(f"Tag '{tag_name}' already exists.")
    push = args.get("push") is None or optional_bool(args, "push")

    steps: List[Step] = []
    if runner.porcelain_status():
        steps += commit_steps(runner, f"Prepare release {tag_name}")
    steps.append(
        Step(
            f"tag {tag_name}",
            lambda: tags.tag(runner, {"action": "create", "tagName": tag_name, "message": f"Release {tag_name}"}),
        )
    )
    if push:
        steps += [
            Step("push commits", lambda: commits.push(runner, {})),
            Step(
                f"push tag {tag_name}",
                _git(
                    runner,
                    f"🚀 Pushed tag {tag_name}.",
                    "push",
                    "origin",
                    tag_name,
                    timeout=runner.config.network_timeout,
                ),
            ),
        ]
    return run_steps(f"Release {tag_name}", steps)


def _stamp() -> str:
    return datetime.now().strftime("%Y%m%d-%H%M%S")


def _snapshot_stash(runner: GitRunner, message: str) -> OperationResult:
    # stash create + store records the stash without touching the work tree.
    sha = runner.run("stash", "create", message).stdout.strip()
    if not sha:
        return OperationResult.failure("💾 No tracked changes to back up.")
    runner.run("stash", "store", "-m", message, sha)
    return OperationResult.ok(f"💾 Saved stash: {message}\nYour changes are still in place.")


def _list_backups(runner: GitRunner) -> OperationResult:
    backup_branches = runner.run("branch", "--list", "backup-*", "--format=%(refname:short)").stdout.split()
    backup_tags = runner.run("tag", "--list", "backup-*").stdout.split()
    stashes = [line for line in runner.run("stash", "list").stdout.splitlines() if "backup" in line.lower()]

    if not (backup_branches or backup_tags or stashes):
        return OperationResult.ok("📭 No backups found.")

    sections = []
    for title, items in (("Branches", backup_branches), ("Tags", backup_tags), ("Stashes", stashes)):
        if items:
            listing = "\n".join(f"  • {item}" for item in items)
            sections.append(f"{title} ({len(items)}):\n{listing}")
    return OperationResult.ok("🗄️ Backups:\n\n" + "\n\n".join(sections))


def backup(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Back up the current state without changing the checked out branch.

    ``smart`` (default) saves a stash and a branch when there are local
    changes, otherwise a branch and a tag. ``branch``, ``tag`` and ``stash``
    create only that kind of backup. ``list`` shows existing backups.
    ``push`` also pushes a backup branch to origin.
    """
    strategy = choice(args, "strategy", BACKUP_STRATEGIES, default="smart")
    if strategy == "list":
        return _list_backups(runner)

    if not runner.ref_exists("HEAD"):
        raise ValidationError("Nothing to back up: the repository has no commits yet.")

    current = runner.current_branch() or "detached"
    name = optional_ref(args, "name") or f"backup-{current}-{_stamp()}"
    note = f"Backup of {current} at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
    dirty = bool(runner.porcelain_status())

    if strategy == "smart":
        kinds = ["stash", "branch"] if dirty else ["branch", "tag"]
    else:
        kinds = [strategy]
    if kinds == ["stash"] and not dirty:
        raise ValidationError("No local changes to back up.")

    steps: List[Step] = []
    for kind in kinds:
        if kind == "stash":
            # Untracked-only changes leave nothing to stash; the branch still runs.
            steps.append(Step("save stash", lambda: _snapshot_stash(runner, note), optional=strategy == "smart"))
        elif kind == "branch":
            steps.append(Step(f"create branch {name}", _git(runner, f"🌿 Created backup branch: {name}", "branch", name)))
        else:
            tag_name = f"{name}-tag" if "branch" in kinds else name
            steps.append(
                Step(
                    f"create tag {tag_name}",
                    _git(runner, f"📌 Created backup tag: {tag_name}", "tag", "-a", tag_name, "-m", note),
                )
            )
    if optional_bool(args, "push") and "branch" in kinds:
        steps.append(
            Step(
                "push backup branch",
                _git(
                    runner,
                    f"🚀 Pushed {name} to origin.",
                    "push",
                    "origin",
                    name,
                    timeout=runner.config.network_timeout,
                ),
            )
        )
    return run_steps("Backup", steps, preamble=f"🗄️ {note}")


def cleanup(runner: GitRunner, args: Dict[str, Any]) -> OperationResult:
    """Delete local branches already merged into base.

    Without ``apply`` only the candidates are listed. main, master, develop,
    dev, base and the current branch are never deleted. Stale origin
    tracking branches are pruned too.
    """
    base = base_branch(runner, args)
    apply = optional_bool(args, "apply")
    current = runner.current_branch()
    keep = {*PROTECTED_BRANCHES, base, current}

    merged = runner.run("branch", "--merged", base, "--format=%(refname:short)").stdout.split()
    candidates = [name for name in merged if name not in keep]
    has_origin = runner.remote_url("origin") is not None

    if not apply:
        lines = [f"🧹 Branches merged into {base}:"]
        lines += [f"  • {name}" for name in candidates] or ["  (none)"]
        if has_origin:
            stale = runner.run("remote", "prune", "--dry-run", "origin", timeout=runner.config.network_timeout).text
            if stale:
                lines += ["", stale]
        lines += ["", "Nothing was deleted. Pass apply=true to delete these branches."]
        return OperationResult.ok("\n".join(lines))

    if not candidates and not has_origin:
        return OperationResult.ok(f"✨ No merged branches to clean up (base: {base}).")

    steps = [
        Step(f"delete {name}", _git(runner, f"🗑️ Deleted branch {name}", "branch", "-d", name))
        for name in candidates
    ]
    if has_origin:
        steps.append(
            Step(
                "prune origin",
                _git(runner, "✂️ Pruned stale origin branches.", "remote", "prune", "origin", timeout=runner.config.network_timeout),
            )
        )
    return run_steps("Branch Cleanup", steps, preamble=f"🧹 Merged branches to delete: {len(candidates)}")


def register_tools(server: GitMCPServer) -> None:
    """Register developer routines with the MCP server.

    Parameters
    ----------
    server:
        MCP server instance
    """
    base_property = {
        "type": "string",
        "description": "Main branch to work from (defaults to main, then master)",
    }

    server.register_tool(
        name="git-dev",
        description="Development session: start work, start a feature branch, resume stashed work or sync with main",
        input_schema=schema(
            {
                "action": {
                    "type": "string",
                    "enum": list(DEV_ACTIONS),
                    "description": "start (default), continue (pop stash) or sync (merge main into branch)",
                },
                "branchName": {"type": "string", "description": "Feature branch to create from main"},
                "base": base_property,
            }
        ),
        handler=dev,
    )

    server.register_tool(
        name="git-fix",
        description="Commit a fix: 'Fix: ...' commit, hotfix branch from main, or amend the last commit",
        input_schema=schema(
            {
                "message": {"type": "string", "description": "Description of the fix"},
                "mode": {
                    "type": "string",
                    "enum": list(FIX_MODES),
                    "description": "fix (default), hotfix or amend",
                },
                "base": base_property,
            }
        ),
        handler=fix,
    )

    server.register_tool(
        name="git-release",
        description="Create an annotated release tag (explicit or bumped version) and push it, or check readiness",
        input_schema=schema(
            {
                "version": {"type": "string", "description": "Version to release, e.g. 1.2.0"},
                "bump": {
                    "type": "string",
                    "enum": list(RELEASE_BUMPS),
                    "description": "Bump the latest version tag instead of naming a version",
                },
                "push": {"type": "boolean", "description": "Push the commit and tag (default: true)"},
                "prepare": {"type": "boolean", "description": "Only report whether the repository is ready"},
            }
        ),
        handler=release,
    )

    server.register_tool(
        name="git-backup",
        description="Back up the current state as a stash, branch or tag without leaving the branch",
        input_schema=schema(
            {
                "strategy": {
                    "type": "string",
                    "enum": list(BACKUP_STRATEGIES),
                    "description": "smart (default), branch, tag, stash or list",
                },
                "name": {"type": "string", "description": "Backup name (default: backup-<branch>-<time>)"},
                "push": {"type": "boolean", "description": "Push the backup branch to origin"},
            }
        ),
        handler=backup,
    )

    server.register_tool(
        name="git-cleanup",
        description="List, or with apply delete, local branches already merged into main and prune origin",
        input_schema=schema(
            {
                "apply": {"type": "boolean", "description": "Delete the branches (default: only list them)"},
                "base": base_property,
            }
        ),
        handler=cleanup,
    )
