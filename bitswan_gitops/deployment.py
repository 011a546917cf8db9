"""Resolve images, register routes and start a workspace's container stack."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from rich.console import Console

from . import docker
from .caddy import CaddyAdmin, editor_service
from .compose import render_workspace_compose
from .config import (
    EDITOR_IMAGE_REPOSITORY,
    EDITOR_TAGS_URL,
    GITOPS_IMAGE_REPOSITORY,
    GITOPS_TAGS_URL,
)
from .exceptions import ExternalToolError
from .fs import ensure_directory, write_file
from .models import DeploymentRequest, DeploymentResult
from .rollback import RollbackStack
from .versions import VersionResolver

logger = logging.getLogger(__name__)

PASSWORD_ATTEMPTS = 5
PASSWORD_RETRY_DELAY = 2.0


@dataclass
class DeploymentComposer:
    admin: CaddyAdmin
    resolver: VersionResolver
    console: Console
    network: str = "bitswan_network"
    sleep: Callable[[float], None] = time.sleep

    def resolve_images(self, request: DeploymentRequest) -> tuple[str, str | None]:
        gitops_image = request.gitops_image
        if not gitops_image:
            gitops_image = f"{GITOPS_IMAGE_REPOSITORY}:{self.resolver.latest(GITOPS_TAGS_URL)}"
        editor_image = request.editor_image
        if request.no_ide:
            editor_image = None
        elif not editor_image:
            editor_image = f"{EDITOR_IMAGE_REPOSITORY}:{self.resolver.latest(EDITOR_TAGS_URL)}"
        return gitops_image, editor_image

    def deploy(self, request: DeploymentRequest, rollback: RollbackStack) -> DeploymentResult:
        paths = request.paths
        # Version lookups happen before anything external is touched.
        gitops_image, editor_image = self.resolve_images(request)
        logger.info("Using images %s%s", gitops_image, f", {editor_image}" if editor_image else "")

        ensure_directory(paths.deployment_dir)

        self.admin.add_records(paths.name, request.domain, request.has_custom_certs, request.no_ide)
        rollback.push(
            f"remove proxy records for {paths.name}",
            lambda: self.admin.remove_records(paths.name),
        )

        compose = render_workspace_compose(
            paths,
            gitops_image=gitops_image,
            editor_image=editor_image,
            domain=request.domain,
            secret=request.secret,
            no_ide=request.no_ide,
            network=self.network,
        )
        write_file(paths.compose_file, compose)

        with self.console.status("Starting BitSwan GitOps…"):
            docker.compose_up(paths.project_name, cwd=paths.deployment_dir)
        rollback.push(
            f"stop {paths.project_name}",
            lambda: docker.compose_down(paths.project_name, cwd=paths.deployment_dir),
        )
        logger.info("BitSwan GitOps started")

        password = None
        if not request.no_ide:
            password = self.fetch_editor_password(paths.project_name, editor_service(paths.name))

        return DeploymentResult(
            secret=request.secret,
            gitops_image=gitops_image,
            editor_image=editor_image,
            editor_password=password,
        )

    def fetch_editor_password(self, project: str, service: str) -> str:
        """Read the code-server password, retrying while the container starts up."""

        last_error: ExternalToolError | None = None
        for attempt in range(1, PASSWORD_ATTEMPTS + 1):
            try:
                password = docker.read_editor_password(project, service)
            except ExternalToolError as exc:
                last_error = exc
                password = None
            if password:
                return password
            if attempt < PASSWORD_ATTEMPTS:
                logger.debug("Editor password not available yet (attempt %d)", attempt)
                self.sleep(PASSWORD_RETRY_DELAY)
        if last_error is not None:
            raise last_error
        raise ExternalToolError(
            ["docker", "compose", "-p", project, "exec", "-T", service, "cat", docker.EDITOR_CONFIG_PATH],
            0,
            stderr="password not found in editor config",
        )


__all__ = ["DeploymentComposer"]
