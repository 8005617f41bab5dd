"""
Tests for the shared utilities.

This module verifies:
- The Unset sentinel (singleton identity, falsy semantics, finality).
- coalesce() preserving legitimate falsy values.
- rename() in function and decorator forms.
- ordinal() labels used by position-first fault messages.
- SpecType read-only mirrors and generated representations.
"""
import unittest
from unittest import TestCase

from cmdweave.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the Unset sentinel and coalesce().
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyButDistinct(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))


class RenameTest(TestCase):
    """
    Test suite for rename().
    """

    def testFunctionForm(self):
        def original():
            pass

        self.assertEqual(rename(original, "renamed").__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testDecoratorForm(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")

    def testRejectsInvalidArguments(self):
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename()


class OrdinalTest(TestCase):
    """
    Test suite for ordinal().
    """

    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(112), "112th")


class SpecTypeTest(TestCase):
    """
    Test suite for the SpecType metaclass.
    """

    def setUp(self):
        class SampleSpec(metaclass=SpecType):
            __introspectable__ = ("items", "label")

            def __init__(self):
                self._items = ["a", "b"]
                self._label = "sample"

        self.spec = SampleSpec()

    def testTypename(self):
        self.assertEqual(type(self.spec).__typename__, "sample-spec")

    def testMirrorsAreReadOnlyCopies(self):
        self.spec.items.append("c")
        self.assertEqual(self.spec.items, ["a", "b"])
        with self.assertRaises(AttributeError):
            self.spec.label = "other"

    def testRepr(self):
        self.assertEqual(repr(self.spec), "sample-spec(items=['a', 'b'], label='sample')")


if __name__ == "__main__":
    unittest.main()
