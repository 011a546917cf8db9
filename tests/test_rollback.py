"""Tests for the scoped rollback stack."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from bitswan_gitops.rollback import RollbackStack


class RollbackStackTests(unittest.TestCase):
    def test_unwinds_in_reverse_order_and_reraises(self) -> None:
        calls: list[str] = []
        stack = RollbackStack("workspace demo")
        with self.assertRaises(RuntimeError):
            with stack.guard():
                stack.push("first", lambda: calls.append("first"))
                stack.push("second", lambda: calls.append("second"))
                raise RuntimeError("boom")
        self.assertEqual(calls, ["second", "first"])
        self.assertEqual(stack.actions, [])

    def test_success_discards_actions(self) -> None:
        calls: list[str] = []
        stack = RollbackStack("workspace demo")
        with stack.guard():
            stack.push("first", lambda: calls.append("first"))
        self.assertEqual(calls, [])
        self.assertEqual(stack.actions, [])

    def test_failed_action_does_not_stop_unwind(self) -> None:
        calls: list[str] = []

        def broken() -> None:
            raise OSError("nope")

        stack = RollbackStack("workspace demo")
        stack.push("first", lambda: calls.append("first"))
        stack.push("broken", broken)
        failures = stack.unwind()
        self.assertEqual(calls, ["first"])
        self.assertEqual(len(failures), 1)
        self.assertIn("broken", failures[0])

    def test_remove_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "demo"
            (target / "nested").mkdir(parents=True)
            stack = RollbackStack("workspace demo")
            stack.remove_tree(target)
            stack.unwind()
            self.assertFalse(target.exists())
            # a second unwind of an already removed tree is harmless
            stack.remove_tree(target)
            self.assertEqual(stack.unwind(), [])

    def test_scopes_are_independent(self) -> None:
        calls: list[str] = []
        proxy = RollbackStack("reverse proxy")
        proxy.push("remove proxy", lambda: calls.append("proxy"))
        workspace = RollbackStack("workspace demo")
        with self.assertRaises(ValueError):
            with workspace.guard():
                workspace.push("remove workspace", lambda: calls.append("workspace"))
                raise ValueError("deploy failed")
        self.assertEqual(calls, ["workspace"])
        self.assertEqual(len(proxy.actions), 1)


if __name__ == "__main__":
    unittest.main()
