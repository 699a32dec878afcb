"""
Matching engine behavioral tests.

Scope
- Validate flag location (anchored, any dash count, first occurrence wins).
- Validate value windows for fixed and greedy arity, and presence types.
- Validate conversion/choice failures: False result, warning surfaced, value untouched.
- Validate shell-mode rendering of argument faults.

Conventions
- Test method names follow CamelCase per project convention.
- Outside shell mode argument faults are Python warnings; assertWarns checks them.
"""

from __future__ import annotations

import contextlib
import io
import unittest
from unittest import TestCase

from commandargs import (
    Argument,
    parse_argument,
    locate,
    window,
    MissingRequiredWarning,
    NotEnoughValuesWarning,
    ConversionFailedWarning,
    InvalidChoiceWarning,
)


class TestLocate(TestCase):
    """Behavioral tests for flag location."""

    def testFindsFlagAnywhere(self):
        self.assertEqual(locate(Argument("name"), ["x", "--other", "y", "--name", "z"]), 3)

    def testSingleDashMatches(self):
        self.assertEqual(locate(Argument("verbose", flag="v"), ["-v"]), 0)

    def testFirstOccurrenceWins(self):
        self.assertEqual(locate(Argument("name"), ["--name", "a", "--name", "b"]), 0)

    def testMatchIsAnchored(self):
        self.assertIsNone(locate(Argument("name"), ["--names", "--filename", "name"]))

    def testFlagIsMatchedLiterally(self):
        self.assertIsNone(locate(Argument("a.b"), ["--axb"]))
        self.assertEqual(locate(Argument("a.b"), ["--a.b"]), 0)


class TestWindow(TestCase):
    """Behavioral tests for value windows."""

    def testFixedArity(self):
        self.assertEqual(window(Argument("p", nargs=2), ["--p", "1", "2", "3"], 0), ["1", "2"])

    def testFixedArityShortReturnsNone(self):
        self.assertIsNone(window(Argument("p", nargs=3), ["--p", "1", "2"], 0))

    def testGreedyStopsBeforeNextFlag(self):
        self.assertEqual(window(Argument("p", nargs=-1), ["--p", "a", "b", "-q", "c"], 0), ["a", "b"])

    def testGreedyRunsToEnd(self):
        self.assertEqual(window(Argument("p", nargs=-1), ["x", "--p", "a", "b"], 1), ["a", "b"])


class TestParseArgument(TestCase):
    """Behavioral tests for parse_argument outcomes."""

    def testFixedArityScalar(self):
        argument = Argument("name")
        self.assertTrue(parse_argument(argument, ["--name", "alice"]))
        self.assertEqual(argument.value, "alice")

    def testFixedArityList(self):
        argument = Argument("point", nargs=3)
        self.assertTrue(parse_argument(argument, ["--point", "x", "y", "z", "w"]))
        self.assertEqual(argument.value, ["x", "y", "z"])

    def testZeroArityStoresEmptyList(self):
        argument = Argument("marker", nargs=0)
        self.assertTrue(parse_argument(argument, ["--marker", "x"]))
        self.assertEqual(argument.value, [])

    def testRequiredMissingFails(self):
        argument = Argument("name", required=True, default="nobody")
        with self.assertWarns(MissingRequiredWarning):
            self.assertFalse(parse_argument(argument, ["--other", "x"]))
        self.assertEqual(argument.value, "nobody")

    def testRequiredMissingRestoresDefault(self):
        argument = Argument("name", required=True, default="nobody")
        self.assertTrue(parse_argument(argument, ["--name", "alice"]))
        with self.assertWarns(MissingRequiredWarning):
            self.assertFalse(parse_argument(argument, ["--other"]))
        self.assertEqual(argument.value, "nobody")

    def testOptionalMissingKeepsDefault(self):
        argument = Argument("name", default="nobody")
        self.assertTrue(parse_argument(argument, []))
        self.assertEqual(argument.value, "nobody")

    def testOptionalMissingRestoresDefault(self):
        argument = Argument("name", default="nobody")
        parse_argument(argument, ["--name", "alice"])
        self.assertTrue(parse_argument(argument, ["--other"]))
        self.assertEqual(argument.value, "nobody")

    def testOptionalMissingKeepsListDefault(self):
        argument = Argument("files", nargs=-1, default=["a.txt"])
        self.assertTrue(parse_argument(argument, ["--other"]))
        self.assertEqual(argument.value, ["a.txt"])
        self.assertIsInstance(argument.value, list)

    def testGreedyStopsAtNextFlag(self):
        argument = Argument("list", nargs=-1)
        self.assertTrue(parse_argument(argument, ["--list", "a", "b", "--other", "x"]))
        self.assertEqual(argument.value, ["a", "b"])

    def testGreedySingleValueIsList(self):
        argument = Argument("list", nargs=-1)
        self.assertTrue(parse_argument(argument, ["--list", "a"]))
        self.assertEqual(argument.value, ["a"])

    def testGreedyWithoutValuesIsEmpty(self):
        argument = Argument("list", nargs=-1, default=["z"])
        self.assertTrue(parse_argument(argument, ["--list", "--other"]))
        self.assertEqual(argument.value, [])

    def testGreedyStopsAtNegativeNumber(self):
        argument = Argument("values", type="numeric", nargs=-1)
        self.assertTrue(parse_argument(argument, ["--values", "1", "2.5", "-5"]))
        self.assertEqual(argument.value, [1, 2.5])

    def testPresenceTrueIgnoresTrailingTokens(self):
        argument = Argument("verbose", type="presence-true", default=False)
        self.assertTrue(parse_argument(argument, ["--verbose", "anything"]))
        self.assertIs(argument.value, True)

    def testPresenceFalse(self):
        argument = Argument("plot", flag="no-plot", type="presence-false", default=True)
        self.assertTrue(parse_argument(argument, ["--no-plot"]))
        self.assertIs(argument.value, False)

    def testPresenceAbsentKeepsDefault(self):
        argument = Argument("verbose", type="presence-true", default=False)
        self.assertTrue(parse_argument(argument, ["--other"]))
        self.assertIs(argument.value, False)

    def testBooleanValue(self):
        argument = Argument("plot", type="boolean", default=False)
        self.assertTrue(parse_argument(argument, ["--plot", "yes"]))
        self.assertIs(argument.value, True)
        self.assertTrue(parse_argument(argument, ["--plot", "nope"]))
        self.assertIs(argument.value, False)

    def testIntegerValue(self):
        argument = Argument("count", type="integer")
        self.assertTrue(parse_argument(argument, ["--count", "3"]))
        self.assertEqual(argument.value, 3)
        self.assertIsInstance(argument.value, int)

    def testConversionFailureLeavesValueUntouched(self):
        argument = Argument("count", type="integer", default=1)
        with self.assertWarns(ConversionFailedWarning):
            self.assertFalse(parse_argument(argument, ["--count", "three"]))
        self.assertEqual(argument.value, 1)

    def testNotEnoughValues(self):
        argument = Argument("point", nargs=3, default=[0, 0, 0])
        with self.assertWarns(NotEnoughValuesWarning):
            self.assertFalse(parse_argument(argument, ["--point", "1", "2"]))
        self.assertEqual(argument.value, [0, 0, 0])

    def testChoiceViolation(self):
        argument = Argument("level", type="integer", choices={1, 2, 3}, default=1)
        with self.assertWarns(InvalidChoiceWarning):
            self.assertFalse(parse_argument(argument, ["--level", "5"]))
        self.assertEqual(argument.value, 1)

    def testChoiceAccepted(self):
        argument = Argument("level", type="integer", choices={1, 2, 3}, default=1)
        self.assertTrue(parse_argument(argument, ["--level", "2"]))
        self.assertEqual(argument.value, 2)

    def testGreedyChoicesCheckEveryValue(self):
        argument = Argument("modes", nargs=-1, choices=("fast", "safe"))
        self.assertTrue(parse_argument(argument, ["--modes", "fast", "safe"]))
        with self.assertWarns(InvalidChoiceWarning):
            self.assertFalse(parse_argument(argument, ["--modes", "fast", "slow"]))
        self.assertEqual(argument.value, ["fast", "safe"])

    def testShellModeRendersDiagnostic(self):
        argument = Argument("level", type="integer", choices={1, 2, 3})
        stream = io.StringIO()
        with contextlib.redirect_stderr(stream):
            self.assertFalse(parse_argument(argument, ["--level", "5"], shell=True))
        self.assertIn("22122", stream.getvalue())
        self.assertIn("Invalid Choice", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
