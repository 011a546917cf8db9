"""Resolve the newest published image tag from Docker Hub."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

import requests

from .exceptions import VersionLookupError

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"^\d{4}-\d+-git-[a-fA-F0-9]+$")


def select_version(tags: Iterable[str]) -> str:
    """Return the first tag that looks like a dated build (``2024-11-git-abc123``)."""

    for tag in tags:
        if VERSION_PATTERN.match(tag):
            return tag
    raise VersionLookupError("No valid version found")


@dataclass
class VersionResolver:
    timeout: float = 10.0
    session: requests.Session = field(default_factory=requests.Session)

    def latest(self, repository_url: str) -> str:
        try:
            response = self.session.get(repository_url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise VersionLookupError(f"Failed to fetch tags from {repository_url}: {exc}") from exc
        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise VersionLookupError(f"Unexpected tag listing from {repository_url}")
        tag = select_version(
            str(item["name"]) for item in results if isinstance(item, dict) and "name" in item
        )
        logger.debug("Latest tag for %s is %s", repository_url, tag)
        return tag


__all__ = ["VERSION_PATTERN", "select_version", "VersionResolver"]
