"""Thin wrappers around git CLI commands."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

from .commands import run_command


def run_git(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    return run_command(["git", *args], cwd=cwd, check=check)


def clone(remote: str, target: Path) -> None:
    run_git(["clone", remote, str(target)])


def init(path: Path) -> None:
    run_git(["init"], cwd=path)


def worktree_add_orphan(repo_path: Path, target: Path, branch: str) -> None:
    run_git(["worktree", "add", "--orphan", "-b", branch, str(target)], cwd=repo_path)


def add_safe_directory(path: Path) -> None:
    run_git(["config", "--global", "--add", "safe.directory", str(path)])


def remove_safe_directory(path: Path) -> None:
    run_git(
        ["config", "--global", "--fixed-value", "--unset-all", "safe.directory", str(path)],
        check=False,
    )


def commit_empty(path: Path, message: str = "Initial commit") -> None:
    run_git(["commit", "--allow-empty", "-m", message], cwd=path)


def push_upstream(path: Path, branch: str, remote: str = "origin") -> None:
    run_git(["push", "-u", remote, branch], cwd=path)


__all__ = [
    "run_git",
    "clone",
    "init",
    "worktree_add_orphan",
    "add_safe_directory",
    "remove_safe_directory",
    "commit_empty",
    "push_upstream",
]
