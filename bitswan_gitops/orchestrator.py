"""High-level orchestration for ``init``: shared infrastructure, then the workspace."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from rich.console import Console

from .caddy import CaddyAdmin
from .certs import generate_wildcard_certs, install_certs
from .config import Settings, ensure_config_root
from .deployment import DeploymentComposer
from .models import DeploymentRequest, InitOptions, InitResult, ProxyPaths, WorkspacePaths
from .network import ensure_network
from .proxy import ProxyBootstrapper
from .rollback import RollbackStack
from .secret_manager import issue_secret
from .versions import VersionResolver
from .workspace import WorkspaceProvisioner, check_available

logger = logging.getLogger(__name__)


def prepare_certificates(options: InitOptions, cert_store: Path, console: Console) -> bool:
    """Install custom certificates for the domain. Returns True when any were installed."""

    source = options.certs_dir
    generated: Path | None = None
    if options.mkcerts:
        if source is not None:
            logger.info("--mkcerts takes precedence over --certs-dir %s", source)
        with console.status(f"Generating certificates for *.{options.domain}…"):
            generated = generate_wildcard_certs(options.domain)
        source = generated
    if source is None:
        return False
    try:
        logger.info("Installing certs from %s", source)
        install_certs(source, cert_store, options.domain)
    finally:
        if generated is not None:
            shutil.rmtree(generated, ignore_errors=True)
    return True


def run_init(
    options: InitOptions,
    settings: Settings,
    console: Console,
    *,
    admin: CaddyAdmin | None = None,
    resolver: VersionResolver | None = None,
) -> InitResult:
    admin = admin or CaddyAdmin(settings.admin_url)
    resolver = resolver or VersionResolver()
    paths = WorkspacePaths(name=options.name, root=settings.config_root)

    # Refuse a taken name before touching any shared infrastructure.
    check_available(paths)
    ensure_config_root(settings)

    ensure_network(settings.network_name)

    proxy = ProxyBootstrapper(
        paths=ProxyPaths(settings.config_root),
        admin=admin,
        console=console,
        email=settings.acme_email,
        network=settings.network_name,
        ready_timeout=settings.proxy_ready_timeout,
    )
    cert_store = proxy.ensure_proxy(options.domain)

    has_custom_certs = prepare_certificates(options, cert_store, console)

    provisioner = WorkspaceProvisioner(
        root=settings.config_root,
        console=console,
        owner_uid=settings.owner_uid,
        owner_gid=settings.owner_gid,
    )
    composer = DeploymentComposer(
        admin=admin,
        resolver=resolver,
        console=console,
        network=settings.network_name,
    )

    rollback = RollbackStack(f"workspace {options.name}")
    with rollback.guard():
        provisioner.provision(options.name, options.remote, rollback=rollback)
        secret = issue_secret(paths, settings.owner_uid, settings.owner_gid)
        deployment = composer.deploy(
            DeploymentRequest(
                paths=paths,
                domain=options.domain,
                secret=secret,
                has_custom_certs=has_custom_certs,
                no_ide=options.no_ide,
                gitops_image=options.gitops_image,
                editor_image=options.editor_image,
            ),
            rollback,
        )

    return InitResult(name=options.name, domain=options.domain, paths=paths, deployment=deployment)


__all__ = ["run_init", "prepare_certificates"]
