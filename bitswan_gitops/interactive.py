"""Interactive prompt helpers built on InquirerPy."""

from __future__ import annotations

import sys

from InquirerPy import inquirer

from .exceptions import UserAbort, ValidationError


def _ensure_tty() -> None:
    if not sys.stdin.isatty():
        raise ValidationError(
            "Interactive mode requires a TTY. Provide the missing arguments to run non-interactively."
        )


def is_interactive() -> bool:
    return sys.stdin.isatty()


def text_input(message: str, default: str | None = None) -> str:
    _ensure_tty()
    try:
        value = inquirer.text(message=message, default=default or "").execute()
    except KeyboardInterrupt as exc:
        raise UserAbort("Cancelled by user.") from exc
    return (value or "").strip()


__all__ = ["is_interactive", "text_input"]
