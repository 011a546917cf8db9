"""Shared dataclasses used throughout the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class WorkspacePaths:
    """Filesystem locations owned by a single workspace."""

    name: str
    root: Path

    @property
    def config_dir(self) -> Path:
        return self.root / self.name

    @property
    def workspace_dir(self) -> Path:
        return self.config_dir / "workspace"

    @property
    def gitops_dir(self) -> Path:
        return self.config_dir / "gitops"

    @property
    def secrets_dir(self) -> Path:
        return self.config_dir / "secrets"

    @property
    def deployment_dir(self) -> Path:
        return self.config_dir / "deployment"

    @property
    def compose_file(self) -> Path:
        return self.deployment_dir / "docker-compose.yml"

    @property
    def project_name(self) -> str:
        return f"{self.name}-site"


@dataclass(slots=True, frozen=True)
class ProxyPaths:
    """Filesystem locations of the shared reverse proxy."""

    root: Path

    @property
    def config_dir(self) -> Path:
        return self.root / "caddy"

    @property
    def caddyfile(self) -> Path:
        return self.config_dir / "Caddyfile"

    @property
    def compose_file(self) -> Path:
        return self.config_dir / "docker-compose.yml"

    @property
    def certs_dir(self) -> Path:
        return self.config_dir / "certs"


@dataclass(slots=True)
class InitOptions:
    name: str
    domain: str
    remote: str | None = None
    certs_dir: Path | None = None
    mkcerts: bool = False
    no_ide: bool = False
    gitops_image: str | None = None
    editor_image: str | None = None


@dataclass(slots=True)
class DeploymentRequest:
    paths: WorkspacePaths
    domain: str
    secret: str
    has_custom_certs: bool = False
    no_ide: bool = False
    gitops_image: str | None = None
    editor_image: str | None = None


@dataclass(slots=True)
class DeploymentResult:
    secret: str
    gitops_image: str
    editor_image: str | None
    editor_password: str | None = None


@dataclass(slots=True)
class InitResult:
    name: str
    domain: str
    paths: WorkspacePaths
    deployment: DeploymentResult

    @property
    def gitops_url(self) -> str:
        return f"https://{self.domain}"

    @property
    def editor_url(self) -> str | None:
        if self.deployment.editor_image is None:
            return None
        return f"https://editor.{self.domain}"


@dataclass(slots=True)
class WorkspaceSummary:
    """A workspace directory found on disk by the ``list`` command."""

    name: str
    path: Path
    editor_password: str | None = None
    secret: str | None = None


__all__ = [
    "WorkspacePaths",
    "ProxyPaths",
    "InitOptions",
    "DeploymentRequest",
    "DeploymentResult",
    "InitResult",
    "WorkspaceSummary",
]
