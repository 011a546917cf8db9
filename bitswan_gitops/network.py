"""Shared docker network provisioning."""

from __future__ import annotations

import logging

from . import docker
from .exceptions import ExternalToolError

logger = logging.getLogger(__name__)


def network_exists(name: str) -> bool:
    return name in docker.list_networks()


def ensure_network(name: str) -> bool:
    """Create the docker network ``name`` unless it already exists.

    Listing failures propagate as ``ExternalToolError``. A failed create is
    re-checked against a fresh listing so that a concurrent create counts as
    success; any other create failure is logged and the pipeline continues.
    """

    if network_exists(name):
        logger.info("Network '%s' exists", name)
        return True

    logger.info("Creating docker network '%s'...", name)
    try:
        docker.create_network(name)
    except ExternalToolError as exc:
        if network_exists(name):
            logger.info("Network '%s' was created concurrently", name)
            return True
        logger.warning("Failed to create docker network '%s': %s", name, exc)
        return False
    logger.info("Docker network '%s' created", name)
    return True


__all__ = ["network_exists", "ensure_network"]
