"""Thin wrappers around the docker CLI."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from .commands import run_command
from .exceptions import ExternalToolError

logger = logging.getLogger(__name__)

EDITOR_CONFIG_PATH = "/home/coder/.config/code-server/config.yaml"

_PASSWORD_RE = re.compile(r"password: (.+)")


def list_networks() -> list[str]:
    output = run_command(["docker", "network", "ls", "--format", "json"]).stdout
    names: list[str] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            network = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ExternalToolError(
                ["docker", "network", "ls", "--format", "json"],
                0,
                stderr=f"unparseable network listing: {exc}",
            ) from exc
        names.append(network.get("Name", ""))
    return names


def create_network(name: str) -> None:
    run_command(["docker", "network", "create", name])


def compose_up(project: str, cwd: Path) -> None:
    run_command(["docker", "compose", "-p", project, "up", "-d"], cwd=cwd)


def compose_down(project: str, cwd: Path | None = None) -> None:
    run_command(["docker", "compose", "-p", project, "down"], cwd=cwd)


def service_running(project: str, service: str) -> bool:
    result = run_command(
        ["docker", "compose", "-p", project, "ps", "-q", service],
        check=False,
    )
    return result.returncode == 0 and bool(result.stdout.strip())


def read_editor_password(project: str, service: str) -> str | None:
    output = run_command(
        ["docker", "compose", "-p", project, "exec", "-T", service, "cat", EDITOR_CONFIG_PATH],
    ).stdout
    return parse_editor_password(output)


def parse_editor_password(config_text: str) -> str | None:
    match = _PASSWORD_RE.search(config_text)
    if not match:
        return None
    return match.group(1).strip()


__all__ = [
    "list_networks",
    "create_network",
    "compose_up",
    "compose_down",
    "service_running",
    "read_editor_password",
    "parse_editor_password",
]
