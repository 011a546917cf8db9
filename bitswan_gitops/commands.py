"""Minimal utilities for invoking external tools."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from .exceptions import ExternalToolError

logger = logging.getLogger(__name__)


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    command = list(args)
    logger.debug("Running command: %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            cwd=str(cwd) if cwd else None,
            env=env,
            text=True,
            capture_output=True,
        )
    except FileNotFoundError as exc:
        raise ExternalToolError(command, 127, stderr=f"executable not found: {command[0]}") from exc
    if check and result.returncode != 0:
        raise ExternalToolError(
            command,
            result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result


__all__ = ["run_command"]
