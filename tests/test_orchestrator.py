"""End-to-end tests for ``init`` with docker, git and the proxy API faked out."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

from bitswan_gitops.config import Settings
from bitswan_gitops.exceptions import ConflictError, ExternalToolError
from bitswan_gitops.models import InitOptions
from bitswan_gitops.orchestrator import run_init


class RunInitTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name) / "bitswan"
        self.settings = Settings(
            config_root=self.root,
            owner_uid=os.getuid(),
            owner_gid=os.getgid(),
        )
        self.console = Console(quiet=True)
        self.admin = mock.Mock()
        self.admin.is_reachable.return_value = True
        self.resolver = mock.Mock()
        self.resolver.latest.return_value = "2024-11-git-abc123"

        self.docker = mock.patch.multiple(
            "bitswan_gitops.docker",
            list_networks=mock.DEFAULT,
            create_network=mock.DEFAULT,
            compose_up=mock.DEFAULT,
            compose_down=mock.DEFAULT,
            read_editor_password=mock.DEFAULT,
        ).start()
        self.docker["list_networks"].return_value = ["bridge"]
        self.docker["read_editor_password"].return_value = "hunter2"
        self.git = mock.patch.multiple(
            "bitswan_gitops.git",
            init=mock.DEFAULT,
            clone=mock.DEFAULT,
            worktree_add_orphan=mock.DEFAULT,
            add_safe_directory=mock.DEFAULT,
            remove_safe_directory=mock.DEFAULT,
            commit_empty=mock.DEFAULT,
            push_upstream=mock.DEFAULT,
        ).start()
        self.git["worktree_add_orphan"].side_effect = lambda repo, target, branch: target.mkdir()
        self.addCleanup(mock.patch.stopall)

    def _run(self, **overrides):
        values = dict(name="demo", domain="demo.example.com")
        values.update(overrides)
        return run_init(
            InitOptions(**values),
            self.settings,
            self.console,
            admin=self.admin,
            resolver=self.resolver,
        )

    def test_end_to_end_layout(self) -> None:
        result = self._run()

        workspace = self.root / "demo"
        self.assertEqual(
            sorted(p.name for p in workspace.iterdir()),
            ["deployment", "gitops", "secrets", "workspace"],
        )
        self.assertTrue((workspace / "deployment" / "docker-compose.yml").is_file())
        self.git["worktree_add_orphan"].assert_called_once_with(
            workspace / "workspace", workspace / "gitops", "demo"
        )
        self.assertEqual(result.editor_url, "https://editor.demo.example.com")
        self.assertEqual(result.gitops_url, "https://demo.example.com")
        self.assertTrue(result.deployment.secret)
        self.assertEqual(result.deployment.editor_password, "hunter2")
        self.docker["create_network"].assert_called_once_with("bitswan_network")

    def test_conflict_has_no_side_effects(self) -> None:
        (self.root / "demo").mkdir(parents=True)

        with self.assertRaises(ConflictError):
            self._run()

        self.docker["list_networks"].assert_not_called()
        self.admin.is_reachable.assert_not_called()
        self.assertEqual([p.name for p in self.root.iterdir()], ["demo"])

    def test_deployment_failure_rolls_back_workspace_only(self) -> None:
        caddy_dir = self.root / "caddy"
        caddy_dir.mkdir(parents=True)
        (caddy_dir / "Caddyfile").write_text("{}")
        self.docker["compose_up"].side_effect = ExternalToolError(["docker", "compose", "up"], 1)

        with self.assertRaises(ExternalToolError):
            self._run()

        self.assertFalse((self.root / "demo").exists())
        self.assertTrue((caddy_dir / "Caddyfile").exists())
        self.admin.remove_records.assert_called_once_with("demo")
        self.git["remove_safe_directory"].assert_called_once_with(self.root / "demo" / "gitops")

    def test_version_lookup_failure_rolls_back_workspace(self) -> None:
        from bitswan_gitops.exceptions import VersionLookupError

        self.resolver.latest.side_effect = VersionLookupError("No valid version found")

        with self.assertRaises(VersionLookupError):
            self._run()

        self.assertFalse((self.root / "demo").exists())
        self.docker["compose_up"].assert_not_called()

    def test_custom_certs_are_installed(self) -> None:
        source = Path(self.root.parent) / "certs"
        source.mkdir()
        (source / "full-chain.pem").write_text("CHAIN")
        (source / "private-key.pem").write_text("KEY")

        self._run(certs_dir=source)

        installed = self.root / "caddy" / "certs" / "demo.example.com"
        self.assertEqual((installed / "full-chain.pem").read_text(), "CHAIN")
        self.admin.add_records.assert_called_once_with("demo", "demo.example.com", True, False)

    def test_mkcerts_takes_precedence_over_certs_dir(self) -> None:
        explicit = Path(self.root.parent) / "certs"
        explicit.mkdir()
        (explicit / "full-chain.pem").write_text("EXPLICIT")
        (explicit / "private-key.pem").write_text("EXPLICIT")
        generated = Path(self.root.parent) / "generated"
        generated.mkdir()
        (generated / "full-chain.pem").write_text("MKCERT")
        (generated / "private-key.pem").write_text("MKCERT")

        with mock.patch(
            "bitswan_gitops.orchestrator.generate_wildcard_certs", return_value=generated
        ) as generate:
            self._run(certs_dir=explicit, mkcerts=True)

        generate.assert_called_once_with("demo.example.com")
        installed = self.root / "caddy" / "certs" / "demo.example.com"
        self.assertEqual((installed / "full-chain.pem").read_text(), "MKCERT")
        self.assertFalse(generated.exists())
        self.assertTrue(explicit.exists())


if __name__ == "__main__":
    unittest.main()
