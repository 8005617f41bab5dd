"""
Arguments module behavioral tests.

Scope
- Validate Option names normalization, type resolution and alias keys.
- Validate Argument type resolution.
- Validate parameter-key spelling (keys) and signature inspection.
- Validate Action 'required' resolution into ANY / NONE / RequiredNames and
  their eligibility rules.

Conventions
- Test method names follow CamelCase per project convention.
- Eligibility is checked against a minimal parsed-state stand-in.
"""

from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import TestCase

from cmdweave import (
    Option,
    Argument,
    Action,
    RequiredNames,
    ANY,
    NONE,
    keys,
    parameters,
    STRING,
    NUMBER,
)


def parsed(argv=(), **options):
    params = {"argv": list(argv), "argc": len(argv), **options}
    params.update(("$%d" % index, value) for index, value in enumerate(argv, 1))
    return SimpleNamespace(argc=len(argv), options=options, has=params.__contains__)


class TestOption(TestCase):
    """Behavioral tests for Option specifications."""

    def testSingleNameIsPromoted(self):
        self.assertEqual(Option("--tab").names, ["--tab"])

    def testNamesKeepOrder(self):
        option = Option(["-t", "--tab"], "number")
        self.assertEqual(option.names, ["-t", "--tab"])
        self.assertEqual(option.keys, ("t", "tab"))

    def testNamesMustBeDashPrefixed(self):
        with self.assertRaises(ValueError):
            Option("tab")

    def testNamesRejectEquals(self):
        with self.assertRaises(ValueError):
            Option("--tab=1")

    def testNamesRejectDuplicates(self):
        with self.assertRaises(ValueError):
            Option(["-t", "-t"])

    def testNamesRejectNonStrings(self):
        with self.assertRaises(TypeError):
            Option([1])
        with self.assertRaises(TypeError):
            Option(1)

    def testRequiresAtLeastOneName(self):
        with self.assertRaises(TypeError):
            Option([])

    def testTypeResolution(self):
        self.assertIs(Option("-t", "number").type, NUMBER)
        self.assertIs(Option("-t").type, STRING)
        self.assertIs(Option("-t", "no-such-type").type, STRING)

    def testHasTestConvert(self):
        option = Option(["-t", "--tab"], "number")
        self.assertTrue(option.has("--tab"))
        self.assertFalse(option.has("tab"))
        self.assertTrue(option.test("12"))
        self.assertFalse(option.test("x"))
        self.assertEqual(option.convert("12"), 12)

    def testNamesViewIsACopy(self):
        option = Option(["-t", "--tab"])
        option.names.append("--other")
        self.assertEqual(option.names, ["-t", "--tab"])


class TestArgument(TestCase):
    """Behavioral tests for positional Argument specifications."""

    def testDefaultsToString(self):
        self.assertIs(Argument().type, STRING)

    def testValidatesThroughType(self):
        argument = Argument("number")
        self.assertTrue(argument.test("5"))
        self.assertFalse(argument.test("five"))


class TestKeys(TestCase):
    """Behavioral tests for handler parameter key spelling."""

    def testPlainName(self):
        self.assertEqual(list(keys("tab")), ["tab"])

    def testPositionalName(self):
        self.assertEqual(list(keys("_1")), ["_1", "$1"])
        self.assertEqual(list(keys("_0")), ["_0", "$0"])

    def testDashedName(self):
        self.assertEqual(list(keys("dry_run")), ["dry_run", "dry-run"])

    def testOuterUnderscoresAreKept(self):
        self.assertEqual(list(keys("_private")), ["_private"])

    def testParametersSkipVariadics(self):
        def handler(a, /, b, *args, c=1, **kwargs):
            pass

        self.assertEqual([parameter.name for parameter in parameters(handler)], ["a", "b", "c"])


class TestAction(TestCase):
    """Behavioral tests for Action 'required' resolution and eligibility."""

    def testHandlerMustBeCallable(self):
        with self.assertRaises(TypeError):
            Action("handler")

    def testStarResolvesToAny(self):
        self.assertIs(Action(lambda: None, "*").required, ANY)
        self.assertIs(Action(lambda: None, ANY).required, ANY)

    def testFalseResolvesToNone(self):
        self.assertIs(Action(lambda: None, False).required, NONE)

    def testNameResolvesToNames(self):
        required = Action(lambda: None, "tab").required
        self.assertIsInstance(required, RequiredNames)
        self.assertEqual(required.names, ["tab"])

    def testIterableResolvesToNames(self):
        self.assertEqual(Action(lambda: None, ["tab", "$1"]).required.names, ["tab", "$1"])

    def testDerivedFromEveryNamedParameter(self):
        def handler(tab, _1, verbose=False, *rest, **extra):
            pass

        self.assertEqual(Action(handler).required.names, ["tab", "_1", "verbose"])

    def testDefaultedParameterIsStillRequired(self):
        action = Action(lambda verbose=False: None)
        self.assertFalse(action.matches(parsed()))
        self.assertTrue(action.matches(parsed(verbose=True)))

    def testInvalidRequiredRejected(self):
        with self.assertRaises(TypeError):
            Action(lambda: None, 42)
        with self.assertRaises(TypeError):
            Action(lambda: None, [1])

    def testAnyAlwaysMatches(self):
        self.assertTrue(ANY.matches(parsed()))
        self.assertTrue(ANY.matches(parsed(["x"], tab=1)))

    def testNoneMatchesOnlyEmptyInput(self):
        self.assertTrue(NONE.matches(parsed()))
        self.assertFalse(NONE.matches(parsed(["x"])))
        self.assertFalse(NONE.matches(parsed(tab=1)))

    def testNamesRequireEveryName(self):
        action = Action(lambda tab, _1: None)
        self.assertTrue(action.matches(parsed(["x"], tab=1)))
        self.assertFalse(action.matches(parsed(tab=1)))
        self.assertFalse(action.matches(parsed(["x"])))

    def testDashedNamesMatch(self):
        action = Action(lambda dry_run: None)
        self.assertTrue(action.matches(parsed(**{"dry-run": True})))

    def testRepr(self):
        self.assertEqual(repr(ANY), "ANY")
        self.assertEqual(repr(NONE), "NONE")
        self.assertEqual(repr(RequiredNames(["tab"])), "required-names(names=['tab'])")


if __name__ == "__main__":
    unittest.main()
