"""Tests for the dev, fix, release, backup and cleanup routines."""

from __future__ import annotations

from pathlib import Path

import pytest
from git import Repo

from gitmcp.mcp.tools.routines import bump_version


@pytest.mark.parametrize(
    ("part", "expected"),
    [("patch", "1.2.4"), ("minor", "1.3.0"), ("major", "2.0.0")],
)
def test_bump_version(part: str, expected: str) -> None:
    assert bump_version((1, 2, 3), part) == expected


def test_dev_session_without_remote_keeps_going(call, repo_path: Path) -> None:
    result = call("git-dev", repo_path)

    assert result.success
    assert "pull latest changes failed, continuing." in result.text
    assert "Available branches" in result.text


def test_dev_starts_feature_branch_from_base(call, make_commit, repo: Repo, repo_path: Path) -> None:
    base = repo.active_branch.name
    repo.git.checkout("-b", "elsewhere")
    make_commit(repo, "other.txt", "other\n", "elsewhere work")

    result = call("git-dev", repo_path, branchName="feature-login")

    assert result.success, result.text
    assert f"from {base}" in result.text
    current = Repo(repo_path)
    assert current.active_branch.name == "feature-login"
    assert current.head.commit.hexsha == current.heads[base].commit.hexsha


def test_dev_start_with_unknown_base(call, repo_path: Path) -> None:
    result = call("git-dev", repo_path, branchName="feature", base="trunk")

    assert result.is_error
    assert "failed at step 1/4: switch to trunk" in result.text


def test_dev_continue_restores_stash(call, repo: Repo, repo_path: Path) -> None:
    (repo_path / "README.md").write_text("in progress\n")
    repo.git.stash("push")

    result = call("git-dev", repo_path, action="continue")

    assert result.success
    assert (repo_path / "README.md").read_text() == "in progress\n"


def test_dev_continue_without_stash_shows_status(call, repo_path: Path) -> None:
    result = call("git-dev", repo_path, action="continue")

    assert result.success
    assert "restore stashed work failed, continuing." in result.text
    assert "Repository is clean" in result.text


def test_dev_sync_merges_base(call, make_commit, repo: Repo, repo_path: Path, origin: Repo) -> None:
    base = repo.active_branch.name
    repo.git.checkout("-b", "feature")
    make_commit(repo, "feature.txt", "feature\n", "feature work")
    repo.git.checkout(base)
    base_commit = make_commit(repo, "base.txt", "base\n", "base work")
    repo.git.checkout("feature")

    result = call("git-dev", repo_path, action="sync")

    assert result.success, result.text
    current = Repo(repo_path)
    assert current.active_branch.name == "feature"
    assert current.is_ancestor(base_commit, current.head.commit.hexsha)
    assert (repo_path / "base.txt").exists()


def test_fix_commits_with_prefix(call, repo: Repo, repo_path: Path) -> None:
    (repo_path / "README.md").write_text("fixed\n")

    result = call("git-fix", repo_path, message="typo in readme")

    assert result.success
    assert Repo(repo_path).head.commit.message.strip() == "Fix: typo in readme"


def test_fix_requires_description(call, repo_path: Path) -> None:
    result = call("git-fix", repo_path)

    assert result.is_error
    assert "description of the fix is required" in result.text


def test_hotfix_branches_from_base(call, repo: Repo, repo_path: Path) -> None:
    (repo_path / "README.md").write_text("urgent\n")

    result = call("git-fix", repo_path, message="crash on start", mode="hotfix")

    assert result.success, result.text
    current = Repo(repo_path)
    assert current.active_branch.name.startswith("hotfix-")
    assert current.head.commit.message.strip() == "HOTFIX: crash on start"


def test_amend_keeps_or_rewords_message(call, repo: Repo, repo_path: Path) -> None:
    (repo_path / "extra.txt").write_text("extra\n")

    kept = call("git-fix", repo_path, mode="amend")
    assert kept.success, kept.text
    head = Repo(repo_path).head.commit
    assert head.message.strip() == "Initial commit"
    assert "extra.txt" in head.stats.files
    assert len(list(Repo(repo_path).iter_commits())) == 1

    reworded = call("git-fix", repo_path, mode="amend", message="Initial import")
    assert reworded.success
    assert Repo(repo_path).head.commit.message.strip() == "Initial import"


def test_release_bumps_latest_tag(call, repo: Repo, repo_path: Path) -> None:
    repo.create_tag("v1.4.2", message="Release v1.4.2")
    (repo_path / "CHANGELOG.md").write_text("1.5.0\n")

    result = call("git-release", repo_path, bump="minor", push=False)

    assert result.success, result.text
    current = Repo(repo_path)
    assert "v1.5.0" in [tag.name for tag in current.tags]
    assert current.tags["v1.5.0"].tag.message.strip() == "Release v1.5.0"
    assert current.head.commit.message.strip() == "Prepare release v1.5.0"


def test_release_pushes_tag(call, repo_path: Path, origin: Repo) -> None:
    result = call("git-release", repo_path, version="2.0.0")

    assert result.success, result.text
    assert "v2.0.0" in [tag.name for tag in origin.tags]


def test_release_without_remote_fails_after_tagging(call, repo: Repo, repo_path: Path) -> None:
    result = call("git-release", repo_path, version="1.0.0")

    assert result.is_error
    assert "failed at step 2/3: push commits" in result.text
    assert "v1.0.0" in [tag.name for tag in Repo(repo_path).tags]


@pytest.mark.parametrize(
    ("arguments", "message"),
    [
        ({}, "A version or a bump"),
        ({"version": "1.0.0", "bump": "patch"}, "either version or bump"),
        ({"version": "--force"}, "must not start with '-'"),
        ({"bump": "huge"}, "Invalid bump"),
    ],
)
def test_release_argument_errors(call, repo_path: Path, arguments: dict, message: str) -> None:
    result = call("git-release", repo_path, **arguments)

    assert result.is_error
    assert message in result.text


def test_release_refuses_existing_tag(call, repo: Repo, repo_path: Path) -> None:
    repo.create_tag("v1.0.0")

    result = call("git-release", repo_path, version="1.0.0", push=False)

    assert result.is_error
    assert "Tag 'v1.0.0' already exists" in result.text


def test_release_readiness(call, repo_path: Path, origin: Repo) -> None:
    ready = call("git-release", repo_path, prepare=True)
    assert ready.success, ready.text
    assert "✅ Working tree is clean" in ready.text
    assert "✅ Up to date with remote" in ready.text
    assert "next patch: v0.0.1" in ready.text

    (repo_path / "README.md").write_text("dirty\n")
    blocked = call("git-release", repo_path, prepare=True)
    assert blocked.is_error
    assert "Uncommitted changes (1 file)" in blocked.text
    assert "Not ready to release" in blocked.text


def test_smart_backup_of_clean_tree(call, repo: Repo, repo_path: Path) -> None:
    result = call("git-backup", repo_path, name="backup-before-refactor")

    assert result.success, result.text
    current = Repo(repo_path)
    assert "backup-before-refactor" in [head.name for head in current.heads]
    assert "backup-before-refactor-tag" in [tag.name for tag in current.tags]
    assert current.active_branch.name == repo.active_branch.name


def test_smart_backup_keeps_local_changes(call, repo: Repo, repo_path: Path) -> None:
    (repo_path / "README.md").write_text("work in progress\n")

    result = call("git-backup", repo_path, name="backup-wip")

    assert result.success, result.text
    assert (repo_path / "README.md").read_text() == "work in progress\n"
    assert "Backup of" in Repo(repo_path).git.stash("list")
    assert "backup-wip" in [head.name for head in Repo(repo_path).heads]

    listing = call("git-backup", repo_path, strategy="list")
    assert listing.success
    assert "backup-wip" in listing.text
    assert "Stashes (1)" in listing.text


def test_backup_errors(call, repo_path: Path, empty_repo: Path) -> None:
    assert "no commits yet" in call("git-backup", empty_repo).text
    assert "No local changes to back up" in call("git-backup", repo_path, strategy="stash").text
    assert "No backups found" in call("git-backup", repo_path, strategy="list").text


def test_cleanup_lists_then_deletes_merged_branches(call, make_commit, repo: Repo, repo_path: Path) -> None:
    base = repo.active_branch.name
    repo.git.branch("done")
    repo.git.checkout("-b", "unfinished")
    make_commit(repo, "wip.txt", "wip\n", "unfinished work")
    repo.git.checkout(base)

    preview = call("git-cleanup", repo_path)
    assert preview.success
    assert "• done" in preview.text
    assert "unfinished" not in preview.text
    assert "Nothing was deleted" in preview.text
    assert "done" in [head.name for head in Repo(repo_path).heads]

    applied = call("git-cleanup", repo_path, apply=True)
    assert applied.success, applied.text
    names = [head.name for head in Repo(repo_path).heads]
    assert "done" not in names
    assert "unfinished" in names
    assert base in names
