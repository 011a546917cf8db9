"""Filesystem helpers for bitswan-gitops."""

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path
from typing import Iterator

from .commands import run_command
from .exceptions import ConfigError, ExternalToolError, OwnershipError

logger = logging.getLogger(__name__)


def ensure_directory(path: Path, mode: int = 0o755) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True, mode=mode)
    except OSError as exc:
        raise ConfigError(f"Failed to create directory {path}: {exc}") from exc


def create_directory(path: Path, mode: int = 0o755) -> None:
    """Create ``path`` and fail if it already exists."""

    try:
        path.mkdir(mode=mode)
    except OSError as exc:
        raise ConfigError(f"Failed to create directory {path}: {exc}") from exc


def write_file(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to write {path}: {exc}") from exc


def is_owned_by(path: Path, uid: int, gid: int) -> bool:
    """Return True when ``path`` and everything below it belongs to uid:gid."""

    def _matches(entry: Path) -> bool:
        info = entry.lstat()
        return info.st_uid == uid and info.st_gid == gid

    if not _matches(path):
        return False
    for dirpath, dirnames, filenames in os.walk(path):
        for name in (*dirnames, *filenames):
            if not _matches(Path(dirpath) / name):
                return False
    return True


def change_ownership(path: Path, uid: int, gid: int) -> None:
    """Recursively hand ``path`` to uid:gid so containers can write to it."""

    if is_owned_by(path, uid, gid):
        logger.debug("%s is already owned by %d:%d", path, uid, gid)
        return
    try:
        run_command(["chown", "-R", f"{uid}:{gid}", str(path)])
    except ExternalToolError as exc:
        raise OwnershipError(
            exc.command,
            exc.returncode,
            stdout=exc.stdout,
            stderr=exc.stderr or f"unable to change ownership of {path}",
        ) from exc


@contextlib.contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """Temporarily switch the process working directory."""

    previous = Path.cwd()
    os.chdir(path)
    try:
        yield path
    finally:
        os.chdir(previous)


__all__ = [
    "ensure_directory",
    "create_directory",
    "write_file",
    "is_owned_by",
    "change_ownership",
    "working_directory",
]
