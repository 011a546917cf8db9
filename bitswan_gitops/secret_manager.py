"""Per-workspace secrets directory and deployment token."""

from __future__ import annotations

import logging
import os
import secrets

from .exceptions import ConfigError
from .fs import change_ownership, ensure_directory
from .models import WorkspacePaths

logger = logging.getLogger(__name__)

SECRETS_DIR_MODE = 0o700


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def issue_secret(paths: WorkspacePaths, owner_uid: int = 1000, owner_gid: int = 1000) -> str:
    """Create ``secrets/`` (owner only) and return a fresh deployment token.

    The token is not written to disk here; it ends up in the rendered compose file.
    """

    secrets_dir = paths.secrets_dir
    ensure_directory(secrets_dir, mode=SECRETS_DIR_MODE)
    try:
        # mkdir honours the umask, so set the mode explicitly
        os.chmod(secrets_dir, SECRETS_DIR_MODE)
    except OSError as exc:
        raise ConfigError(f"Failed to restrict permissions on {secrets_dir}: {exc}") from exc
    change_ownership(secrets_dir, owner_uid, owner_gid)
    logger.debug("Created secrets directory %s", secrets_dir)
    return generate_token()


__all__ = ["issue_secret", "generate_token", "SECRETS_DIR_MODE"]
