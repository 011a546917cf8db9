"""Compensating cleanup for partially provisioned resources.

Each provisioning scope (the shared proxy, a single workspace) owns its own
``RollbackStack``. Stages push an undo action as soon as they create something;
if the scope fails, the actions run in reverse order and the original error is
re-raised. Stacks are never shared between scopes, so a workspace failure can
not remove the proxy and vice versa.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RollbackAction:
    description: str
    undo: Callable[[], None]


@dataclass
class RollbackStack:
    scope: str
    actions: list[RollbackAction] = field(default_factory=list)

    def push(self, description: str, undo: Callable[[], None]) -> None:
        self.actions.append(RollbackAction(description, undo))

    def remove_tree(self, path: Path) -> None:
        """Register removal of ``path`` (created by the current scope)."""

        def _undo() -> None:
            if path.exists():
                shutil.rmtree(path)

        self.push(f"remove {path}", _undo)

    def unwind(self) -> list[str]:
        """Run every registered action, newest first. Returns the failures."""

        failures: list[str] = []
        while self.actions:
            action = self.actions.pop()
            logger.info("Rolling back %s: %s", self.scope, action.description)
            try:
                action.undo()
            except Exception as exc:  # noqa: BLE001 - keep unwinding the remaining actions
                logger.error("Rollback step failed (%s): %s", action.description, exc)
                failures.append(f"{action.description}: {exc}")
        return failures

    def discard(self) -> None:
        self.actions.clear()

    @contextlib.contextmanager
    def guard(self) -> Iterator["RollbackStack"]:
        try:
            yield self
        except BaseException as exc:
            logger.error("Failed to provision %s: %s", self.scope, exc)
            self.unwind()
            raise
        else:
            self.discard()


__all__ = ["RollbackAction", "RollbackStack"]
