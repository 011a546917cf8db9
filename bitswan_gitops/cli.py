"""Typer CLI entrypoint for bitswan-gitops."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from . import __version__, render
from .config import DEFAULT_WORKSPACE_NAME, Settings, load_settings, validate_workspace_name
from .exceptions import GitopsError, ValidationError
from .interactive import is_interactive, text_input
from .listing import list_workspaces
from .models import InitOptions
from .orchestrator import run_init

app = typer.Typer(
    help="Provision BitSwan GitOps workspaces behind a shared Caddy proxy",
    add_completion=False,
    no_args_is_help=True,
)


@dataclass(slots=True)
class AppState:
    verbose: bool = False


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", force=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"bitswan-gitops {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the bitswan-gitops version and exit.",
    ),
) -> None:
    _ = version  # handled via callback
    configure_logging(verbose)
    ctx.obj = AppState(verbose=verbose)


@app.command(help="Initialize a new GitOps workspace, the shared Caddy proxy and the BitSwan editor")
def init(
    name: Optional[str] = typer.Argument(None, help="Name of the GitOps workspace."),
    remote: Optional[str] = typer.Option(None, "--remote", help="The remote repository to clone."),
    domain: Optional[str] = typer.Option(None, "--domain", help="The domain the workspace is served on."),
    certs_dir: Optional[Path] = typer.Option(
        None,
        "--certs-dir",
        help="Directory holding full-chain.pem and private-key.pem for the domain.",
        file_okay=False,
        dir_okay=True,
    ),
    no_ide: bool = typer.Option(False, "--no-ide", help="Do not start the BitSwan editor."),
    mkcerts: bool = typer.Option(
        False,
        "--mkcerts",
        help="Generate local wildcard certificates with the mkcert utility (overrides --certs-dir).",
    ),
    gitops_image: Optional[str] = typer.Option(None, "--gitops-image", help="Custom image for the gitops service."),
    editor_image: Optional[str] = typer.Option(None, "--editor-image", help="Custom image for the editor."),
) -> None:
    try:
        settings = load_settings()
        options = InitOptions(
            name=_resolve_name(name),
            domain=_require_domain(domain),
            remote=remote,
            certs_dir=certs_dir.expanduser().resolve() if certs_dir else None,
            mkcerts=mkcerts,
            no_ide=no_ide,
            gitops_image=gitops_image,
            editor_image=editor_image,
        )
        result = run_init(options, settings, render.console)
    except GitopsError as exc:
        render.error(str(exc))
        raise typer.Exit(1) from exc

    render.success("BitSwan GitOps initialized successfully!")
    render.show_init_result(result)


@app.command(name="list", help="List available BitSwan workspaces")
def list_command(
    passwords: bool = typer.Option(
        False,
        "--passwords",
        help="Show editor passwords and GitOps secrets.",
    ),
) -> None:
    try:
        settings: Settings = load_settings()
        entries = list_workspaces(settings.config_root, with_passwords=passwords)
    except GitopsError as exc:
        render.error(str(exc))
        raise typer.Exit(1) from exc
    if not entries:
        render.info("No workspaces found.")
        return
    render.render_workspaces(entries, show_passwords=passwords)


def _resolve_name(name: str | None) -> str:
    if name:
        return validate_workspace_name(name)
    if is_interactive():
        return validate_workspace_name(text_input("Workspace name", default=DEFAULT_WORKSPACE_NAME))
    return DEFAULT_WORKSPACE_NAME


def _require_domain(domain: str | None) -> str:
    value = (domain or "").strip().lower()
    if not value:
        raise ValidationError("--domain is required.")
    return value


__all__ = ["app"]
