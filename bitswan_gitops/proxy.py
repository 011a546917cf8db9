"""Bootstrap the shared Caddy reverse proxy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from . import docker
from .caddy import CaddyAdmin
from .compose import render_caddy_compose
from .config import PROXY_PROJECT_NAME
from .fs import ensure_directory, write_file
from .models import ProxyPaths
from .rollback import RollbackStack

logger = logging.getLogger(__name__)


def render_caddyfile(email: str, admin_listen: str = "0.0.0.0:2019") -> str:
    return f"{{\n\temail {email}\n\tadmin {admin_listen}\n}}\n"


@dataclass
class ProxyBootstrapper:
    paths: ProxyPaths
    admin: CaddyAdmin
    console: Console
    email: str
    network: str = "bitswan_network"
    ready_timeout: float = 30.0

    def ensure_proxy(self, domain: str) -> Path:
        """Make sure a single Caddy instance is running and return its cert store."""

        if self.admin.is_reachable():
            logger.info("A running instance of Caddy with admin found")
            return self.paths.certs_dir

        logger.info("Setting up Caddy...")
        config_dir = self.paths.config_dir
        ensure_directory(config_dir)

        rollback = RollbackStack("reverse proxy")
        rollback.remove_tree(config_dir)
        with rollback.guard():
            write_file(self.paths.caddyfile, render_caddyfile(self.email))
            write_file(
                self.paths.compose_file,
                render_caddy_compose(domain, config_dir, network=self.network),
            )
            ensure_directory(self.paths.certs_dir, mode=0o740)

            with self.console.status("Starting Caddy…"):
                docker.compose_up(PROXY_PROJECT_NAME, cwd=config_dir)
            rollback.push(
                f"stop {PROXY_PROJECT_NAME}",
                lambda: docker.compose_down(PROXY_PROJECT_NAME, cwd=config_dir),
            )

            with self.console.status("Waiting for Caddy admin API…"):
                self.admin.wait_until_ready(self.ready_timeout)
            self.admin.init()

        logger.info("Caddy started successfully")
        return self.paths.certs_dir


__all__ = ["ProxyBootstrapper", "render_caddyfile"]
