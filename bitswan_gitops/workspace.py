"""Create a workspace directory with its full-history checkout and gitops worktree."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from . import git
from .exceptions import ConflictError
from .fs import change_ownership, create_directory
from .models import WorkspacePaths
from .rollback import RollbackStack

logger = logging.getLogger(__name__)


def check_available(paths: WorkspacePaths) -> None:
    if paths.config_dir.exists():
        raise ConflictError(f"GitOps with this name was already initialized: {paths.name}")


@dataclass
class WorkspaceProvisioner:
    root: Path
    console: Console
    owner_uid: int = 1000
    owner_gid: int = 1000

    def provision(
        self,
        name: str,
        remote_url: str | None = None,
        *,
        rollback: RollbackStack | None = None,
    ) -> tuple[Path, Path]:
        """Create ``<root>/<name>`` and return ``(workspace_dir, gitops_dir)``.

        When ``rollback`` is given the caller owns the scope and decides when to
        unwind; otherwise a failure here removes the workspace directory before
        the error propagates.
        """

        paths = WorkspacePaths(name=name, root=self.root)
        check_available(paths)
        create_directory(paths.config_dir)

        if rollback is not None:
            rollback.remove_tree(paths.config_dir)
            self._populate(paths, remote_url, rollback)
        else:
            stack = RollbackStack(f"workspace {name}")
            stack.remove_tree(paths.config_dir)
            with stack.guard():
                self._populate(paths, remote_url, stack)
        return paths.workspace_dir, paths.gitops_dir

    def _populate(self, paths: WorkspacePaths, remote_url: str | None, rollback: RollbackStack) -> None:
        if remote_url:
            with self.console.status("Cloning remote repository…"):
                git.clone(remote_url, paths.workspace_dir)
            logger.info("Remote repository cloned")
        else:
            create_directory(paths.workspace_dir)
            git.init(paths.workspace_dir)
            logger.info("Git initialized in workspace")

        change_ownership(paths.workspace_dir, self.owner_uid, self.owner_gid)

        logger.info("Setting up GitOps worktree...")
        git.worktree_add_orphan(paths.workspace_dir, paths.gitops_dir, paths.name)

        git.add_safe_directory(paths.gitops_dir)
        rollback.push(
            f"unregister safe.directory {paths.gitops_dir}",
            lambda: git.remove_safe_directory(paths.gitops_dir),
        )

        if remote_url:
            git.commit_empty(paths.gitops_dir)
            with self.console.status(f"Pushing branch '{paths.name}'…"):
                git.push_upstream(paths.gitops_dir, paths.name)

        logger.info("GitOps worktree set up successfully")


__all__ = ["WorkspaceProvisioner", "check_available"]
