"""Thin wrappers around the ``git``, ``gh`` and ``pre-commit`` executables.

All helpers run with ``check=False`` and report failure through their
return value; callers decide whether a failure is a warning or an error.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

DEFAULT_BRANCH_CANDIDATES = ("main", "master")


def tool_available(name: str) -> bool:
    """True if an executable is on ``PATH``."""
    return shutil.which(name) is not None


def run_tool(
    cmd: Sequence[str],
    cwd: Path | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, capturing text output.

    A missing executable is reported as exit code 127 instead of raising.
    """
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        return subprocess.CompletedProcess(list(cmd), 127, "", str(exc))


def git(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    return run_tool(["git", *args], cwd=cwd)


def _output(result: subprocess.CompletedProcess[str]) -> str | None:
    if result.returncode != 0:
        return None
    value = result.stdout.strip()
    return value or None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def is_inside_work_tree(cwd: Path) -> bool:
    result = git("rev-parse", "--is-inside-work-tree", cwd=cwd)
    return result.returncode == 0 and result.stdout.strip() == "true"


def repo_root(cwd: Path) -> Path | None:
    value = _output(git("rev-parse", "--show-toplevel", cwd=cwd))
    return Path(value) if value else None


def has_uncommitted_changes(cwd: Path) -> bool:
    """True if ``git status --porcelain`` reports anything (untracked included)."""
    result = git("status", "--porcelain", cwd=cwd)
    return result.returncode == 0 and bool(result.stdout.strip())


def current_branch(cwd: Path) -> str | None:
    return _output(git("rev-parse", "--abbrev-ref", "HEAD", cwd=cwd))


def branch_exists(cwd: Path, branch: str) -> bool:
    result = git("rev-parse", "--verify", "--quiet", f"refs/heads/{branch}", cwd=cwd)
    return result.returncode == 0


def default_branch(cwd: Path) -> str | None:
    """Default branch: ``origin/HEAD`` if set, else ``main`` or ``master``."""
    remote_head = _output(
        git("symbolic-ref", "--quiet", "--short", "refs/remotes/origin/HEAD", cwd=cwd),
    )
    if remote_head:
        return remote_head.split("/", 1)[-1]
    for candidate in DEFAULT_BRANCH_CANDIDATES:
        if branch_exists(cwd, candidate):
            return candidate
    return None


def config_value(key: str, cwd: Path | None = None) -> str | None:
    """Value of ``git config <key>``, or ``None`` if unset."""
    return _output(git("config", key, cwd=cwd))


def tag_exists(cwd: Path, tag: str) -> bool:
    result = git("rev-parse", "--verify", "--quiet", f"refs/tags/{tag}", cwd=cwd)
    return result.returncode == 0


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def switch_to_new_branch(cwd: Path, branch: str, start_point: str | None) -> bool:
    """Create and check out ``branch`` (from ``start_point`` when given)."""
    args = ["checkout", "-b", branch]
    if start_point:
        args.append(start_point)
    return git(*args, cwd=cwd).returncode == 0


def switch_branch(cwd: Path, branch: str) -> bool:
    return git("checkout", branch, cwd=cwd).returncode == 0


def stage(cwd: Path, paths: Sequence[Path]) -> bool:
    return git("add", "--", *(str(path) for path in paths), cwd=cwd).returncode == 0


def init_repository(cwd: Path) -> bool:
    return git("init", cwd=cwd).returncode == 0


def commit(cwd: Path, message: str) -> bool:
    """Commit whatever is staged."""
    return git("commit", "-m", message, cwd=cwd).returncode == 0


def commit_all(cwd: Path, message: str) -> bool:
    if git("add", "-A", cwd=cwd).returncode != 0:
        return False
    return commit(cwd, message)


def create_annotated_tag(cwd: Path, tag: str, message: str) -> bool:
    return git("tag", "-a", tag, "-m", message, cwd=cwd).returncode == 0


def create_private_github_repo(cwd: Path, name: str) -> bool:
    """Create a private GitHub repository via ``gh`` and push to it."""
    result = run_tool(
        ["gh", "repo", "create", name, "--private", "--source=.", "--push"],
        cwd=cwd,
    )
    return result.returncode == 0


def install_pre_commit(cwd: Path) -> bool:
    return run_tool(["pre-commit", "install"], cwd=cwd).returncode == 0
