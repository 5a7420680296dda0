"""Short shell aliases (``gstatus``, ``gcommit "msg"``, ``gflow "msg"``, ...).

Each alias parses its own command line, runs one tool through the same
dispatch path as the MCP server and exits 0 on success, 1 on failure.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .config import ServerConfig
from .log import configure_logging
from .mcp.tools.workspace import RESET_MODES

GLOBAL_OPTIONS = {"directory", "json", "verbose"}
JOINED_OPTIONS = {"message"}


def _no_arguments(parser: argparse.ArgumentParser) -> None:
    return None


def _collect(namespace: argparse.Namespace) -> Dict[str, Any]:
    """Turn parsed options into tool arguments, dropping unset values."""
    arguments: Dict[str, Any] = {}
    for key, value in vars(namespace).items():
        if key in GLOBAL_OPTIONS or value is None or value is False:
            continue
        if key in JOINED_OPTIONS and isinstance(value, list):
            value = " ".join(value).strip()
            if not value:
                continue
        if isinstance(value, list) and not value:
            continue
        arguments[key] = value
    return arguments


@dataclass(slots=True)
class Alias:
    name: str
    tool: str
    description: str
    configure: Callable[[argparse.ArgumentParser], None] = _no_arguments
    collect: Callable[[argparse.Namespace], Dict[str, Any]] = _collect
    route: Optional[Callable[[Dict[str, Any]], str]] = field(default=None)

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(prog=self.name, description=self.description)
        parser.add_argument(
            "-C",
            "--directory",
            help="Repository directory (defaults to the current directory)",
        )
        parser.add_argument("--json", action="store_true", help="Print the raw result envelope")
        parser.add_argument("-v", "--verbose", action="store_true", help="Log git commands to stderr")
        self.configure(parser)
        return parser

    def request(self, argv: Iterable[str] | None = None) -> Tuple[str, Dict[str, Any], argparse.Namespace]:
        """Parse ``argv`` into ``(tool name, tool arguments, namespace)``."""
        namespace = self.build_parser().parse_args(list(argv) if argv is not None else None)
        arguments = self.collect(namespace)
        if namespace.directory:
            arguments["directory"] = namespace.directory
        tool = self.route(arguments) if self.route else self.tool
        return tool, arguments, namespace


def _message(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("message", nargs="*", help="Message words")


def _add(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("files", nargs="*", help="Files to stage (all changes when omitted)")


def _remove(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="File to unstage")


def _branch(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("branchName", nargs="?", help="Branch to create (lists branches when omitted)")


def _checkout(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("branchName", help="Branch to switch to")
    parser.add_argument(
        "-b",
        "--create",
        dest="createNew",
        action="store_true",
        help="Create the branch first",
    )


def _log(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("maxCount", nargs="?", type=int, help="Number of commits (default 10)")


def _diff(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("target", nargs="?", help="Commit, branch or path to compare against")


def _reset(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("words", nargs="*", metavar="[mode] [target]", help="soft|mixed|hard and a target")
    modes = parser.add_mutually_exclusive_group()
    for mode in RESET_MODES:
        modes.add_argument(f"--{mode}", dest="mode", action="store_const", const=mode)


def _collect_reset(namespace: argparse.Namespace) -> Dict[str, Any]:
    words: List[str] = list(namespace.words)
    mode = namespace.mode
    if words and words[0] in RESET_MODES:
        mode = mode or words.pop(0)
    arguments: Dict[str, Any] = {}
    if mode:
        arguments["mode"] = mode
    if words:
        arguments["target"] = words[0]
    return arguments


def _clone(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="Repository URL")
    parser.add_argument("targetDir", nargs="?", help="Directory to clone into")


def _remote_name(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Remote name")


def _remote_name_url(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Remote name")
    parser.add_argument("url", help="Remote URL")


def _tag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("action", nargs="?", choices=["list", "create", "delete", "show"])
    parser.add_argument("tagName", nargs="?")
    parser.add_argument("message", nargs="*")


def _merge(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("branch", help="Branch to merge into the current branch")
    parser.add_argument("strategy", nargs="?", help="Merge strategy")


def _rebase(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("target", nargs="?", help="Branch or commit to rebase onto (default HEAD~1)")
    parser.add_argument("-i", "--interactive", action="store_true")


def _cherry(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("commitHash", help="Commit to apply")


def _blame(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("filePath", help="File to annotate")
    parser.add_argument("lineRange", nargs="?", help="Line range, e.g. 1,10")


def _bisect(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("action", choices=["start", "bad", "good", "reset", "status"])
    parser.add_argument("commit", nargs="?")


def _save(parser: argparse.ArgumentParser) -> None:
    _message(parser)
    parser.add_argument("--wip", action="store_true", help="Commit as 'WIP: <branch>'")
    parser.add_argument("--backup", action="store_true", help="Commit as 'Backup: <time>'")
    parser.add_argument("--push", action="store_true", help="Push after committing")


def _fresh(parser: argparse.ArgumentParser) -> None:
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("--safe", dest="mode", action="store_const", const="safe", help="Stash local changes")
    modes.add_argument("--hard", dest="mode", action="store_const", const="hard", help="Discard local changes")


def _dev(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("branchName", nargs="?", help="Feature branch to create from main")
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("--continue", dest="action", action="store_const", const="continue", help="Resume stashed work")
    actions.add_argument("--sync", dest="action", action="store_const", const="sync", help="Merge the latest main")
    parser.add_argument("--base", help="Main branch name (default main, then master)")


def _fix(parser: argparse.ArgumentParser) -> None:
    _message(parser)
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("--hotfix", dest="mode", action="store_const", const="hotfix", help="Commit on a new hotfix branch")
    modes.add_argument("--amend", dest="mode", action="store_const", const="amend", help="Amend the last commit")
    parser.add_argument("--base", help="Main branch name (default main, then master)")


def _release(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("version", nargs="?", help="Version to release, e.g. 1.2.0")
    bumps = parser.add_mutually_exclusive_group()
    for bump in ("patch", "minor", "major"):
        bumps.add_argument(f"--{bump}", dest="bump", action="store_const", const=bump)
    parser.add_argument("--prepare", action="store_true", help="Only check release readiness")
    parser.add_argument("--no-push", dest="push", action="store_const", const=False, help="Do not push")


def _collect_release(namespace: argparse.Namespace) -> Dict[str, Any]:
    arguments = _collect(namespace)
    if namespace.push is False:
        arguments["push"] = False
    return arguments


def _backup(parser: argparse.ArgumentParser) -> None:
    strategies = parser.add_mutually_exclusive_group()
    for strategy in ("branch", "tag", "stash", "list"):
        strategies.add_argument(f"--{strategy}", dest="strategy", action="store_const", const=strategy)
    parser.add_argument("--remote", dest="push", action="store_true", help="Push the backup branch to origin")
    parser.add_argument("name", nargs="?", help="Backup name")


def _cleanup(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--apply", action="store_true", help="Delete the merged branches")
    parser.add_argument("--base", help="Main branch name (default main, then master)")


ALIASES: Dict[str, Alias] = {
    alias.name: alias
    for alias in [
        Alias("gstatus", "git-status", "Check repository status"),
        Alias(
            "gadd",
            "git-add-all",
            "Stage all changes, or only the given files",
            _add,
            route=lambda arguments: "git-add" if arguments.get("files") else "git-add-all",
        ),
        Alias("grm", "git-remove", "Unstage a file", _remove),
        Alias("grm-all", "git-remove-all", "Unstage everything"),
        Alias("gcommit", "git-commit", "Commit staged changes", _message),
        Alias("gpush", "git-push", "Push to remote repository"),
        Alias("gpull", "git-pull", "Pull from remote repository"),
        Alias("gbranch", "git-branch", "List or create branches", _branch),
        Alias("gcheckout", "git-checkout", "Switch branches", _checkout),
        Alias("glog", "git-log", "Show commit history", _log),
        Alias("gdiff", "git-diff", "Show differences", _diff),
        Alias("gstash", "git-stash", "Stash current changes", _message),
        Alias("gpop", "git-stash-pop", "Apply most recent stash"),
        Alias("greset", "git-reset", "Reset repository state", _reset, _collect_reset),
        Alias("gclone", "git-clone", "Clone repository", _clone),
        Alias("ginit", "git-init", "Initialize a repository"),
        Alias("gremote", "git-remote-list", "List remote repositories"),
        Alias("gremote-add", "git-remote-add", "Add remote repository", _remote_name_url),
        Alias("gremote-remove", "git-remote-remove", "Remove remote repository", _remote_name),
        Alias("gremote-set-url", "git-remote-set-url", "Change remote URL", _remote_name_url),
        Alias("gflow", "git-flow", "Complete workflow: add -> commit -> push", _message),
        Alias("gquick", "git-quick-commit", "Quick workflow: add -> commit", _message),
        Alias("gsync", "git-sync", "Sync with remote: pull -> push"),
        Alias("gsave", "git-save", "Quick save: add -> commit [-> push]", _save),
        Alias("gfresh", "git-fresh", "Fresh start: pull -> reset or stash -> status", _fresh),
        Alias("gtag", "git-tag", "Manage tags", _tag),
        Alias("gmerge", "git-merge", "Merge branch into current", _merge),
        Alias("grebase", "git-rebase", "Rebase current branch", _rebase),
        Alias("gcherry", "git-cherry-pick", "Apply specific commit", _cherry),
        Alias("gblame", "git-blame", "Show line-by-line authorship", _blame),
        Alias("gbisect", "git-bisect", "Binary search for bugs", _bisect),
        Alias("gdev", "git-dev", "Development session: start, new branch, --continue or --sync", _dev),
        Alias("gfix", "git-fix", "Commit a fix, a hotfix branch or amend the last commit", _fix),
        Alias("grelease", "git-release", "Tag and push a release", _release, _collect_release),
        Alias("gbackup", "git-backup", "Back up the current state", _backup),
        Alias("gclean", "git-cleanup", "Clean up merged branches", _cleanup),
    ]
}


def run_alias(name: str, argv: Iterable[str] | None = None, config: ServerConfig | None = None) -> int:
    """Run alias ``name`` and return the process exit status."""
    from .mcp.server import create_server

    alias = ALIASES[name]
    tool, arguments, namespace = alias.request(argv)
    configure_logging("DEBUG" if namespace.verbose else (config.log_level if config else "WARNING"))

    result = create_server(config).dispatch(tool, arguments)
    if namespace.json:
        print(result.to_json())
    elif result.success:
        print(result.text)
    else:
        print(result.text, file=sys.stderr)
    return 0 if result.success else 1


def _entry_point(name: str) -> Callable[[], None]:
    def main() -> None:
        sys.exit(run_alias(name))

    main.__name__ = name.replace("-", "_")
    main.__doc__ = ALIASES[name].description
    return main


gstatus = _entry_point("gstatus")
gadd = _entry_point("gadd")
grm = _entry_point("grm")
grm_all = _entry_point("grm-all")
gcommit = _entry_point("gcommit")
gpush = _entry_point("gpush")
gpull = _entry_point("gpull")
gbranch = _entry_point("gbranch")
gcheckout = _entry_point("gcheckout")
glog = _entry_point("glog")
gdiff = _entry_point("gdiff")
gstash = _entry_point("gstash")
gpop = _entry_point("gpop")
greset = _entry_point("greset")
gclone = _entry_point("gclone")
ginit = _entry_point("ginit")
gremote = _entry_point("gremote")
gremote_add = _entry_point("gremote-add")
gremote_remove = _entry_point("gremote-remove")
gremote_set_url = _entry_point("gremote-set-url")
gflow = _entry_point("gflow")
gquick = _entry_point("gquick")
gsync = _entry_point("gsync")
gsave = _entry_point("gsave")
gfresh = _entry_point("gfresh")
gtag = _entry_point("gtag")
gmerge = _entry_point("gmerge")
grebase = _entry_point("grebase")
gcherry = _entry_point("gcherry")
gblame = _entry_point("gblame")
gbisect = _entry_point("gbisect")
gdev = _entry_point("gdev")
gfix = _entry_point("gfix")
grelease = _entry_point("grelease")
gbackup = _entry_point("gbackup")
gclean = _entry_point("gclean")
