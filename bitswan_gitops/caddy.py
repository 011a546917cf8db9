"""Client for the Caddy admin API used by the shared reverse proxy."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import requests

from .exceptions import NetworkError

logger = logging.getLogger(__name__)

SERVER_NAME = "srv0"
GITOPS_PORT = 8079
EDITOR_PORT = 9999
CERTS_MOUNT = "/tls"


def gitops_service(name: str) -> str:
    return f"bitswan-gitops-{name}"


def editor_service(name: str) -> str:
    return f"bitswan-editor-{name}"


def _route(route_id: str, host: str, upstream: str) -> dict[str, Any]:
    return {
        "@id": route_id,
        "match": [{"host": [host]}],
        "handle": [
            {
                "handler": "subroute",
                "routes": [
                    {
                        "handle": [
                            {
                                "handler": "reverse_proxy",
                                "upstreams": [{"dial": upstream}],
                            }
                        ]
                    }
                ],
            }
        ],
        "terminal": True,
    }


@dataclass
class CaddyAdmin:
    base_url: str
    timeout: float = 10.0
    session: requests.Session = field(default_factory=requests.Session)
    sleep: Callable[[float], None] = time.sleep

    def is_reachable(self, timeout: float = 2.0) -> bool:
        try:
            self.session.get(f"{self.base_url}/config/", timeout=timeout)
        except requests.RequestException:
            return False
        return True

    def wait_until_ready(
        self,
        max_wait: float = 30.0,
        *,
        initial_delay: float = 0.5,
        max_delay: float = 5.0,
    ) -> None:
        """Poll the admin endpoint with exponential backoff until it answers."""

        deadline = time.monotonic() + max_wait
        delay = initial_delay
        while not self.is_reachable():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise NetworkError(
                    f"Caddy admin API at {self.base_url} did not become ready within {max_wait:.0f}s"
                )
            self.sleep(min(delay, remaining))
            delay = min(delay * 2, max_delay)

    def init(self) -> None:
        """Make sure server ``srv0`` and the ``load_files`` list exist.

        The Caddyfile's global options already produce a ``tls`` app (automation
        policies for the ACME email), so only the missing pieces are added and
        whatever Caddy generated stays in place.
        """

        server = {"listen": [":80", ":443"], "routes": []}
        apps = self._get_json("/config/apps")
        if not apps:
            config = {
                "http": {"servers": {SERVER_NAME: server}},
                "tls": {"certificates": {"load_files": []}},
            }
            self._request("POST", "/config/apps", json=config)
            return
        self._ensure_path(apps, ("http", "servers", SERVER_NAME), server)
        self._ensure_path(apps, ("tls", "certificates", "load_files"), [])

    def _ensure_path(self, apps: dict[str, Any], keys: tuple[str, ...], value: Any) -> None:
        # Caddy cannot traverse missing keys, so post at the first absent one.
        node: Any = apps
        for depth, key in enumerate(keys):
            child = node.get(key) if isinstance(node, dict) else None
            if child is None:
                nested = value
                for parent in reversed(keys[depth + 1 :]):
                    nested = {parent: nested}
                path = "/".join(keys[: depth + 1])
                logger.debug("Creating Caddy config apps/%s", path)
                self._request("POST", f"/config/apps/{path}", json=nested)
                return
            node = child
        logger.debug("Caddy config apps/%s already present", "/".join(keys))

    def add_records(self, name: str, domain: str, has_custom_certs: bool, no_ide: bool) -> None:
        # Replace any records left over from an earlier workspace with the same name.
        self.remove_records(name)
        if has_custom_certs:
            self._request(
                "POST",
                "/config/apps/tls/certificates/load_files",
                json={
                    "@id": f"{name}_tlscerts",
                    "certificate": f"{CERTS_MOUNT}/{domain}/full-chain.pem",
                    "key": f"{CERTS_MOUNT}/{domain}/private-key.pem",
                    "tags": [name],
                },
            )
        routes_path = f"/config/apps/http/servers/{SERVER_NAME}/routes"
        self._request(
            "POST",
            routes_path,
            json=_route(f"{name}_gitops", domain, f"{gitops_service(name)}:{GITOPS_PORT}"),
        )
        if not no_ide:
            self._request(
                "POST",
                routes_path,
                json=_route(f"{name}_editor", f"editor.{domain}", f"{editor_service(name)}:{EDITOR_PORT}"),
            )

    def remove_records(self, name: str) -> None:
        for suffix in ("gitops", "editor", "tlscerts"):
            self._request("DELETE", f"/id/{name}_{suffix}", allow_missing=True)

    def _get_json(self, path: str) -> Any:
        response = self._request("GET", path)
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(f"Caddy admin request GET {path} returned invalid JSON: {exc}") from exc

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        allow_missing: bool = False,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NetworkError(f"Caddy admin request {method} {path} failed: {exc}") from exc
        if allow_missing and response.status_code == 404:
            return response
        if response.status_code >= 400:
            raise NetworkError(
                f"Caddy admin request {method} {path} returned {response.status_code}: {response.text.strip()}"
            )
        return response


__all__ = ["CaddyAdmin", "gitops_service", "editor_service"]
