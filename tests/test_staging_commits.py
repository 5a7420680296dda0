"""Tests for staging and committing."""

from __future__ import annotations

from pathlib import Path

from git import Repo


def test_add_all_on_clean_tree(call, repo_path: Path) -> None:
    result = call("git-add-all", repo_path)

    assert result.success
    assert result.text == "No changes to add. Working directory is clean."


def test_add_all_stages_everything(call, repo: Repo, repo_path: Path) -> None:
    (repo_path / "README.md").write_text("changed\n")
    (repo_path / "notes.txt").write_text("notes\n")

    result = call("git-add-all", repo_path)

    assert result.success
    assert "2 files staged" in result.text
    assert "notes.txt" in result.text
    assert sorted(item.a_path for item in repo.index.diff("HEAD")) == ["README.md", "notes.txt"]


def test_add_all_from_subdirectory_stages_whole_tree(call, repo: Repo, repo_path: Path) -> None:
    nested = repo_path / "src"
    nested.mkdir()
    (nested / "module.py").write_text("x = 1\n")
    (repo_path / "README.md").write_text("changed\n")

    result = call("git-add-all", nested)

    assert result.success
    assert "2 files staged" in result.text
    assert sorted(item.a_path for item in repo.index.diff("HEAD")) == ["README.md", "src/module.py"]
    assert not repo.is_dirty(index=False, untracked_files=True)


def test_add_specific_files(call, repo: Repo, repo_path: Path) -> None:
    (repo_path / "a.txt").write_text("a\n")
    (repo_path / "b.txt").write_text("b\n")

    result = call("git-add", repo_path, files=["a.txt"])

    assert result.success
    assert "a.txt" in result.text
    assert [item.a_path for item in repo.index.diff("HEAD")] == ["a.txt"]
    assert "b.txt" in repo.untracked_files


def test_add_rejects_missing_or_empty(call, repo_path: Path) -> None:
    missing = call("git-add", repo_path, files=["ghost.txt"])
    empty = call("git-add", repo_path, files=[])

    assert missing.is_error
    assert "File does not exist: ghost.txt" in missing.text
    assert empty.is_error
    assert "No files specified" in empty.text


def test_remove_and_remove_all(call, repo: Repo, repo_path: Path) -> None:
    (repo_path / "a.txt").write_text("a\n")
    (repo_path / "b.txt").write_text("b\n")
    repo.index.add(["a.txt", "b.txt"])

    single = call("git-remove", repo_path, file="a.txt")
    assert single.success
    assert [item.a_path for item in Repo(repo_path).index.diff("HEAD")] == ["b.txt"]

    everything = call("git-remove-all", repo_path)
    assert everything.success
    assert list(Repo(repo_path).index.diff("HEAD")) == []


def test_commit_requires_message(call, repo: Repo, repo_path: Path) -> None:
    (repo_path / "a.txt").write_text("a\n")
    repo.index.add(["a.txt"])
    head = repo.head.commit.hexsha

    for message in ("", "   "):
        result = call("git-commit", repo_path, message=message)
        assert result.is_error
        assert "message required" in result.text
    assert Repo(repo_path).head.commit.hexsha == head


def test_commit_without_staged_changes(call, repo_path: Path) -> None:
    result = call("git-commit", repo_path, message="nothing here")

    assert result.is_error
    assert "No staged changes" in result.text
    assert "git add" in result.text


def test_commit_reports_count_and_hash(call, repo_path: Path) -> None:
    (repo_path / "a.txt").write_text("a\n")
    call("git-add-all", repo_path)

    result = call("git-commit", repo_path, message="add a")
    repo = Repo(repo_path)

    assert result.success
    assert '1 file with message: "add a"' in result.text
    assert repo.head.commit.hexsha[:7] in result.text
    assert repo.head.commit.message.strip() == "add a"


def test_init_add_commit_log_round_trip(call, tmp_path: Path) -> None:
    project = tmp_path / "fresh"
    project.mkdir()

    assert call("git-init", project).success
    with Repo(project).config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
    (project / "a.txt").write_text("hello\n")

    added = call("git-add-all", project)
    committed = call("git-commit", project, message="initial")
    history = call("git-log", project, maxCount=1)

    assert "1 file staged" in added.text
    assert committed.success
    assert len(history.text.splitlines()) == 1
    assert history.text.endswith("initial")
    assert call("git-status", project).text.endswith("Repository is clean (no changes)")
