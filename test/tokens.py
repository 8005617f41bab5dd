"""
Tokens module behavioral tests.

Scope
- Validate the option-looking test and dash trimming.
- Validate token classification and "--name=value" splitting.
- Validate short-option cluster expansion (all-or-nothing).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from cmdweave import Token, TokenKind, isoption, trim, tokenize, expand

NAME = TokenKind.OPTION_NAME
VALUE = TokenKind.OPTION_VALUE
NORMAL = TokenKind.NORMAL


def registered(*names):
    return set(names).__contains__


class TestHelpers(TestCase):
    """Behavioral tests for isoption/trim."""

    def testIsOption(self):
        self.assertTrue(isoption("-a"))
        self.assertTrue(isoption("--all"))
        self.assertTrue(isoption("-"))
        self.assertFalse(isoption("all"))
        self.assertFalse(isoption(""))
        self.assertFalse(isoption(None))

    def testTrim(self):
        self.assertEqual(trim("--tab"), "tab")
        self.assertEqual(trim("-t"), "t")
        self.assertEqual(trim("tab"), "tab")
        self.assertEqual(trim("$1"), "$1")
        self.assertIsNone(trim(None))


class TestTokenize(TestCase):
    """Behavioral tests for tokenize()."""

    def testClassification(self):
        self.assertEqual(tokenize(["hello", "-t", "--tab"]), [
            Token("hello", NORMAL),
            Token("-t", NAME),
            Token("--tab", NAME),
        ])

    def testSplitsAtFirstEquals(self):
        self.assertEqual(tokenize(["--define=a=b"]), [
            Token("--define", NAME),
            Token("a=b", VALUE),
        ])

    def testValueHalfIsNeverAnOptionName(self):
        self.assertEqual(tokenize(["--offset=-5"]), [
            Token("--offset", NAME),
            Token("-5", VALUE),
        ])

    def testEmptyValueIsKept(self):
        self.assertEqual(tokenize(["--name="]), [
            Token("--name", NAME),
            Token("", VALUE),
        ])

    def testEqualsInNormalTokenIsIgnored(self):
        self.assertEqual(tokenize(["a=b"]), [Token("a=b", NORMAL)])

    def testTokenDefaultsToNormal(self):
        self.assertIs(Token("x").kind, NORMAL)


class TestExpand(TestCase):
    """Behavioral tests for short-option cluster expansion."""

    def testExpandsKnownCluster(self):
        tokens = [Token("-abc", NAME)]
        self.assertEqual(expand(tokens, registered("-a", "-b", "-c")), [
            Token("-a", NAME),
            Token("-b", NAME),
            Token("-c", NAME),
        ])

    def testUnknownLetterLeavesTokenUntouched(self):
        tokens = [Token("-ax", NAME)]
        self.assertEqual(expand(tokens, registered("-a")), tokens)

    def testRepeatedLetterLeavesTokenUntouched(self):
        tokens = [Token("-aa", NAME)]
        self.assertEqual(expand(tokens, registered("-a")), tokens)

    def testRegisteredNameIsNotExpanded(self):
        tokens = [Token("-ab", NAME)]
        self.assertEqual(expand(tokens, registered("-ab", "-a", "-b")), tokens)

    def testSingleLetterIsNotExpanded(self):
        tokens = [Token("-a", NAME)]
        self.assertEqual(expand(tokens, registered()), tokens)

    def testValuesAreNotExpanded(self):
        tokens = tokenize(["--x=-ab"])
        self.assertEqual(expand(tokens, registered("-a", "-b")), tokens)

    def testInputIsNotMutated(self):
        tokens = [Token("hello"), Token("-ab", NAME)]
        copy = list(tokens)
        expanded = expand(tokens, registered("-a", "-b"))
        self.assertEqual(tokens, copy)
        self.assertEqual(len(expanded), 3)


if __name__ == "__main__":
    unittest.main()
