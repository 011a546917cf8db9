"""Tests for starting a workspace's container stack."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

import yaml
from rich.console import Console

from bitswan_gitops.deployment import DeploymentComposer
from bitswan_gitops.exceptions import ExternalToolError, NetworkError, VersionLookupError
from bitswan_gitops.models import DeploymentRequest, WorkspacePaths
from bitswan_gitops.rollback import RollbackStack


class DeploymentComposerTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.paths = WorkspacePaths(name="demo", root=Path(tmp.name))
        self.paths.config_dir.mkdir()
        self.admin = mock.Mock()
        self.resolver = mock.Mock()
        self.resolver.latest.return_value = "2024-11-git-abc123"
        self.composer = DeploymentComposer(
            admin=self.admin,
            resolver=self.resolver,
            console=Console(quiet=True),
            sleep=lambda _: None,
        )
        self.docker = mock.patch.multiple(
            "bitswan_gitops.deployment.docker",
            compose_up=mock.DEFAULT,
            compose_down=mock.DEFAULT,
            read_editor_password=mock.DEFAULT,
        ).start()
        self.addCleanup(mock.patch.stopall)
        self.docker["read_editor_password"].return_value = "hunter2"
        self.rollback = RollbackStack("workspace demo")

    def _request(self, **overrides) -> DeploymentRequest:
        values = dict(paths=self.paths, domain="demo.example.com", secret="tok-123")
        values.update(overrides)
        return DeploymentRequest(**values)

    def _compose(self) -> dict:
        return yaml.safe_load(self.paths.compose_file.read_text())

    def test_secret_embedded_matches_returned_token(self) -> None:
        result = self.composer.deploy(self._request(), self.rollback)

        environment = self._compose()["services"]["bitswan-editor-demo"]["environment"]
        self.assertIn(f"BITSWAN_DEPLOY_SECRET={result.secret}", environment)
        self.assertEqual(result.secret, "tok-123")
        self.assertEqual(result.editor_password, "hunter2")
        self.assertEqual(result.gitops_image, "bitswan/gitops:2024-11-git-abc123")
        self.assertEqual(result.editor_image, "bitswan/bitswan-editor:2024-11-git-abc123")
        self.admin.add_records.assert_called_once_with("demo", "demo.example.com", False, False)
        self.docker["compose_up"].assert_called_once_with("demo-site", cwd=self.paths.deployment_dir)

    def test_explicit_images_skip_lookup(self) -> None:
        result = self.composer.deploy(
            self._request(gitops_image="acme/gitops:1", editor_image="acme/editor:1"),
            self.rollback,
        )
        self.resolver.latest.assert_not_called()
        self.assertEqual(result.gitops_image, "acme/gitops:1")

    def test_no_ide(self) -> None:
        result = self.composer.deploy(self._request(no_ide=True), self.rollback)

        self.assertIsNone(result.editor_password)
        self.assertIsNone(result.editor_image)
        self.assertEqual(self.resolver.latest.call_count, 1)
        self.admin.add_records.assert_called_once_with("demo", "demo.example.com", False, True)
        self.docker["read_editor_password"].assert_not_called()
        self.assertNotIn("bitswan-editor-demo", self._compose()["services"])

    def test_lookup_failure_happens_before_any_mutation(self) -> None:
        self.resolver.latest.side_effect = VersionLookupError("No valid version found")

        with self.assertRaises(VersionLookupError):
            self.composer.deploy(self._request(), self.rollback)

        self.admin.add_records.assert_not_called()
        self.docker["compose_up"].assert_not_called()
        self.assertEqual(self.rollback.actions, [])

    def test_route_failure_is_fatal(self) -> None:
        self.admin.add_records.side_effect = NetworkError("admin down")
        with self.assertRaises(NetworkError):
            self.composer.deploy(self._request(), self.rollback)
        self.docker["compose_up"].assert_not_called()

    def test_registers_compensating_actions(self) -> None:
        self.composer.deploy(self._request(), self.rollback)
        self.rollback.unwind()
        self.docker["compose_down"].assert_called_once_with("demo-site", cwd=self.paths.deployment_dir)
        self.admin.remove_records.assert_called_once_with("demo")

    def test_password_retries_until_available(self) -> None:
        self.docker["read_editor_password"].side_effect = [
            ExternalToolError(["docker"], 1),
            None,
            "hunter2",
        ]
        result = self.composer.deploy(self._request(), self.rollback)
        self.assertEqual(result.editor_password, "hunter2")
        self.assertEqual(self.docker["read_editor_password"].call_count, 3)

    def test_password_never_available(self) -> None:
        self.docker["read_editor_password"].return_value = None
        with self.assertRaises(ExternalToolError):
            self.composer.deploy(self._request(), self.rollback)


if __name__ == "__main__":
    unittest.main()
