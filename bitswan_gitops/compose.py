"""Render docker compose definitions for the proxy and for workspaces."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .caddy import CERTS_MOUNT, GITOPS_PORT, editor_service, gitops_service
from .models import WorkspacePaths

CADDY_IMAGE = "caddy:2.9"


def _external_network(network: str) -> dict[str, Any]:
    return {network: {"external": True}}


def _dump(document: dict[str, Any]) -> str:
    return yaml.safe_dump(document, sort_keys=False, default_flow_style=False)


def render_caddy_compose(domain: str, caddy_dir: Path, network: str = "bitswan_network") -> str:
    service = {
        "image": CADDY_IMAGE,
        "restart": "always",
        "container_name": "caddy",
        "ports": ["80:80", "443:443", "2019:2019"],
        "networks": [network],
        "labels": {"space.bitswan.domain": domain},
        "volumes": [
            f"{caddy_dir / 'Caddyfile'}:/etc/caddy/Caddyfile",
            f"{caddy_dir / 'data'}:/data",
            f"{caddy_dir / 'config'}:/config",
            f"{caddy_dir / 'certs'}:{CERTS_MOUNT}",
        ],
    }
    return _dump({"services": {"caddy": service}, "networks": _external_network(network)})


def render_workspace_compose(
    paths: WorkspacePaths,
    *,
    gitops_image: str,
    editor_image: str | None,
    domain: str,
    secret: str,
    no_ide: bool,
    network: str = "bitswan_network",
) -> str:
    name = paths.name
    gitops = {
        "image": gitops_image,
        "restart": "always",
        "hostname": gitops_service(name),
        "networks": [network],
        "volumes": [
            f"{paths.gitops_dir}:/gitops/gitops:z",
            f"{paths.secrets_dir}:/gitops/secrets:z",
            "/var/run/docker.sock:/var/run/docker.sock",
        ],
        "environment": [
            "BITSWAN_GITOPS_DIR=/gitops",
            f"BITSWAN_GITOPS_DIR_HOST={paths.config_dir}",
            f"BITSWAN_GITOPS_ID={name}",
            f"BITSWAN_GITOPS_SECRET={secret}",
            f"BITSWAN_GITOPS_DOMAIN={domain}",
        ],
    }
    services: dict[str, Any] = {gitops_service(name): gitops}
    if not no_ide:
        if not editor_image:
            raise ValueError("editor_image is required unless no_ide is set")
        services[editor_service(name)] = {
            "image": editor_image,
            "restart": "always",
            "hostname": editor_service(name),
            "networks": [network],
            "depends_on": [gitops_service(name)],
            "environment": [
                f"BITSWAN_DEPLOY_URL=http://{gitops_service(name)}:{GITOPS_PORT}",
                f"BITSWAN_DEPLOY_SECRET={secret}",
                "BITSWAN_GITOPS_DIR=/home/coder/workspace",
            ],
            "volumes": [
                f"{paths.workspace_dir}:/home/coder/workspace/workspace",
                f"{paths.gitops_dir}:/home/coder/workspace/gitops",
                f"{paths.secrets_dir}:/home/coder/workspace/secrets",
            ],
        }
    return _dump({"services": services, "networks": _external_network(network)})


def read_deploy_secret(compose_text: str, name: str) -> str | None:
    """Extract the deployment secret from a rendered workspace compose file."""

    document = yaml.safe_load(compose_text) or {}
    services = document.get("services") or {}
    lookups = (
        (editor_service(name), "BITSWAN_DEPLOY_SECRET="),
        (gitops_service(name), "BITSWAN_GITOPS_SECRET="),
    )
    for service_name, prefix in lookups:
        service = services.get(service_name) or {}
        for item in service.get("environment") or []:
            if isinstance(item, str) and item.startswith(prefix):
                return item.split("=", 1)[1]
    return None


__all__ = ["render_caddy_compose", "render_workspace_compose", "read_deploy_secret"]
