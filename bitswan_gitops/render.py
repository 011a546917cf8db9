"""Rich UI helpers for terminal output."""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.table import Table

from .models import InitResult, WorkspaceSummary

console = Console()


def info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {message}")


def success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def error(message: str) -> None:
    console.print(f"[red]✗[/red] {message}", style="red")


def show_init_result(result: InitResult) -> None:
    """Print the connection details an operator needs after ``init``."""

    deployment = result.deployment
    if result.editor_url:
        console.print("------------BITSWAN EDITOR INFO------------")
        console.print(f"Bitswan Editor URL: {result.editor_url}", highlight=False)
        console.print(f"Bitswan Editor Password: {deployment.editor_password or ''}", highlight=False)
    console.print("------------GITOPS INFO------------")
    console.print(f"GitOps ID: {result.name}", highlight=False)
    console.print(f"GitOps URL: {result.gitops_url}", highlight=False)
    console.print(f"GitOps Secret: {deployment.secret}", highlight=False)


def render_workspaces(entries: Sequence[WorkspaceSummary], *, show_passwords: bool) -> None:
    if not show_passwords:
        for entry in entries:
            console.print(entry.name, highlight=False)
        return
    table = Table(title="Workspaces", show_lines=False)
    table.add_column("Name", no_wrap=True)
    table.add_column("Editor Password")
    table.add_column("GitOps Secret")
    for entry in entries:
        table.add_row(entry.name, entry.editor_password or "-", entry.secret or "-")
    console.print(table)
