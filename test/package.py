"""
Package metadata tests.

Scope
- Validate the exposed metadata and the aggregated public API.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

import cmdweave


class TestPackage(TestCase):
    """Behavioral tests for the package namespace."""

    def testMetadata(self):
        self.assertEqual(cmdweave.__title__, "cmdweave")
        self.assertIn("cmdweave", cmdweave.__author__)
        self.assertEqual(cmdweave.version_info[:3], (0, 0, 0))

    def testPublicApiIsExported(self):
        for name in ("Command", "invoke", "cmdline", "dispatch", "Type", "tokenize", "FaultCode"):
            self.assertIn(name, cmdweave.__all__)
            self.assertTrue(hasattr(cmdweave, name))


if __name__ == "__main__":
    unittest.main()
