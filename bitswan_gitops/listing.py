"""Read-only inspection of existing workspaces."""

from __future__ import annotations

import logging
from pathlib import Path

from . import docker
from .caddy import editor_service
from .compose import read_deploy_secret
from .exceptions import ConfigError, ExternalToolError
from .models import WorkspacePaths, WorkspaceSummary

logger = logging.getLogger(__name__)

RESERVED_DIRS = {"caddy"}


def list_workspaces(root: Path, *, with_passwords: bool = False) -> list[WorkspaceSummary]:
    if not root.is_dir():
        raise ConfigError(f"Workspaces directory not found: {root}")
    summaries: list[WorkspaceSummary] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir() or entry.name in RESERVED_DIRS:
            continue
        summary = WorkspaceSummary(name=entry.name, path=entry)
        if with_passwords:
            paths = WorkspacePaths(name=entry.name, root=root)
            summary.editor_password = _editor_password(paths)
            summary.secret = _deploy_secret(paths)
        summaries.append(summary)
    return summaries


def _editor_password(paths: WorkspacePaths) -> str | None:
    service = editor_service(paths.name)
    if not docker.service_running(paths.project_name, service):
        return None
    try:
        return docker.read_editor_password(paths.project_name, service)
    except ExternalToolError as exc:
        logger.debug("Could not read editor password for %s: %s", paths.name, exc)
        return None


def _deploy_secret(paths: WorkspacePaths) -> str | None:
    try:
        text = paths.compose_file.read_text(encoding="utf-8")
    except OSError:
        return None
    return read_deploy_secret(text, paths.name)


__all__ = ["list_workspaces"]
