"""Environment configuration helpers."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ConfigError, ValidationError

NETWORK_NAME = "bitswan_network"
PROXY_PROJECT_NAME = "bitswan-caddy"
DEFAULT_ADMIN_URL = "http://localhost:2019"
DEFAULT_ACME_EMAIL = "info@bitswan.space"
DEFAULT_WORKSPACE_NAME = "gitops"
WORKSPACE_OWNER_ID = 1000

GITOPS_IMAGE_REPOSITORY = "bitswan/gitops"
EDITOR_IMAGE_REPOSITORY = "bitswan/bitswan-editor"
GITOPS_TAGS_URL = "https://hub.docker.com/v2/repositories/bitswan/gitops/tags/"
EDITOR_TAGS_URL = "https://hub.docker.com/v2/repositories/bitswan/bitswan-editor/tags/"

_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


@dataclass(slots=True)
class Settings:
    """Runtime settings resolved from the environment."""

    config_root: Path
    admin_url: str = DEFAULT_ADMIN_URL
    network_name: str = NETWORK_NAME
    acme_email: str = DEFAULT_ACME_EMAIL
    owner_uid: int = WORKSPACE_OWNER_ID
    owner_gid: int = WORKSPACE_OWNER_ID
    proxy_ready_timeout: float = 30.0


def load_settings() -> Settings:
    root = os.environ.get("BITSWAN_CONFIG_ROOT")
    config_root = Path(root).expanduser() if root else Path.home() / ".config" / "bitswan"
    return Settings(
        config_root=config_root,
        admin_url=os.environ.get("BITSWAN_CADDY_ADMIN_URL", DEFAULT_ADMIN_URL).rstrip("/"),
        network_name=os.environ.get("BITSWAN_NETWORK", NETWORK_NAME),
        acme_email=os.environ.get("BITSWAN_ACME_EMAIL", DEFAULT_ACME_EMAIL),
        owner_uid=_int_env("BITSWAN_WORKSPACE_UID", WORKSPACE_OWNER_ID),
        owner_gid=_int_env("BITSWAN_WORKSPACE_GID", WORKSPACE_OWNER_ID),
        proxy_ready_timeout=_float_env("BITSWAN_PROXY_READY_TIMEOUT", 30.0),
    )


def ensure_config_root(settings: Settings) -> Path:
    try:
        settings.config_root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(
            f"Failed to create config directory {settings.config_root}: {exc}"
        ) from exc
    return settings.config_root


def validate_workspace_name(name: str) -> str:
    value = name.strip()
    if not value:
        raise ValidationError("Workspace name cannot be empty.")
    if value == "caddy":
        raise ValidationError("'caddy' is reserved for the shared reverse proxy.")
    if not _NAME_RE.match(value):
        raise ValidationError(
            f"Invalid workspace name {value!r}. Use letters, digits, '.', '_' or '-'."
        )
    return value


def _int_env(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {var} must be an integer, got {raw!r}.") from exc


def _float_env(var: str, default: float) -> float:
    raw = os.environ.get(var)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {var} must be a number, got {raw!r}.") from exc
    if value < 0:
        raise ConfigError(f"Environment variable {var} must not be negative, got {raw!r}.")
    return value


__all__ = [
    "Settings",
    "load_settings",
    "ensure_config_root",
    "validate_workspace_name",
]
