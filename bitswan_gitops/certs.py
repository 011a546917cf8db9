"""Install TLS certificates into the proxy certificate store."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from .commands import run_command
from .exceptions import ConfigError
from .fs import ensure_directory, working_directory

logger = logging.getLogger(__name__)

PRIVATE_KEY_NAME = "private-key.pem"
FULL_CHAIN_NAME = "full-chain.pem"


def generate_wildcard_certs(domain: str) -> Path:
    """Generate a ``*.domain`` certificate with mkcert in a fresh temp directory."""

    temp_dir = Path(tempfile.mkdtemp(prefix="certs-"))
    with working_directory(temp_dir):
        run_command(["mkcert", f"*.{domain}"])
        renames = (
            (f"_wildcard.{domain}-key.pem", PRIVATE_KEY_NAME),
            (f"_wildcard.{domain}.pem", FULL_CHAIN_NAME),
        )
        for source, target in renames:
            try:
                Path(source).rename(target)
            except OSError as exc:
                raise ConfigError(f"mkcert did not produce {source}: {exc}") from exc
    return temp_dir


def install_certs(source_dir: Path, cert_store: Path, domain: str) -> Path:
    """Copy every regular file from ``source_dir`` into ``cert_store/domain``."""

    if not source_dir.is_dir():
        raise ConfigError(f"Certificate directory does not exist: {source_dir}")
    target_dir = cert_store / domain
    ensure_directory(target_dir)
    copied = 0
    for entry in sorted(source_dir.iterdir()):
        if not entry.is_file():
            continue
        try:
            shutil.copyfile(entry, target_dir / entry.name)
        except OSError as exc:
            raise ConfigError(f"Failed to copy {entry} to {target_dir}: {exc}") from exc
        copied += 1
    for required in (PRIVATE_KEY_NAME, FULL_CHAIN_NAME):
        if not (target_dir / required).exists():
            logger.warning("%s is missing from %s; HTTPS for %s will not use it", required, target_dir, domain)
    logger.info("Installed %d certificate file(s) into %s", copied, target_dir)
    return target_dir


__all__ = ["generate_wildcard_certs", "install_certs", "PRIVATE_KEY_NAME", "FULL_CHAIN_NAME"]
