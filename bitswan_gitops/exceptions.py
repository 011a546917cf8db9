"""Custom error hierarchy for bitswan-gitops."""

from __future__ import annotations

from typing import Sequence


class GitopsError(RuntimeError):
    """Base error for the CLI."""


class ConflictError(GitopsError):
    """Raised when a workspace with the requested name already exists."""


class ConfigError(GitopsError):
    """Raised when local configuration or filesystem setup fails."""


class ValidationError(GitopsError):
    """Raised when user input fails validation."""


class UserAbort(GitopsError):
    """Raised when the user cancels an interactive flow."""


class ExternalToolError(GitopsError):
    """Raised when a spawned process (docker, git, mkcert, chown) fails."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        *,
        stdout: str | None = None,
        stderr: str | None = None,
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        message = f"command failed (exit {returncode}): {' '.join(self.command)}"
        details = "\n".join(
            section
            for section in (self.stdout.strip(), self.stderr.strip())
            if section
        )
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)


class OwnershipError(ExternalToolError):
    """Raised when ownership of a directory could not be reassigned."""


class NetworkError(GitopsError):
    """Raised when the reverse-proxy admin API cannot be reached or rejects a call."""


class VersionLookupError(GitopsError):
    """Raised when no published image tag matches the expected pattern."""


__all__ = [
    "GitopsError",
    "ConflictError",
    "ConfigError",
    "ValidationError",
    "UserAbort",
    "ExternalToolError",
    "OwnershipError",
    "NetworkError",
    "VersionLookupError",
]
