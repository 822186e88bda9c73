"""
Options module tests (construction, defaulting, validation).

Scope
- Kind tagging and result keys.
- Required/default rules per kind (Flag forced, Named optional, Pos/Rest required).
- Short alias promotion for one-character names.
- Validation errors for names, shorts, value labels, describe and parse.
- Representation via the metaclass.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argot import Kind, Option, Flag, Named, Pos, Rest


class TestFlag(TestCase):
    def testKind(self):
        self.assertIs(Flag("verbose").kind, Kind.FLAG)

    def testRequiredAndDefaultAreForced(self):
        flag = Flag("verbose", required=True, default=True)
        self.assertFalse(flag.required)
        self.assertIs(flag.default, False)
        self.assertTrue(flag.defaulted)

    def testShortPromotion(self):
        self.assertEqual(Flag("v").short, "v")
        self.assertIsNone(Flag("verbose").short)
        self.assertEqual(Flag("verbose", short="V").short, "V")

    def testDescribeIsTrimmed(self):
        self.assertEqual(Flag("verbose", "  print more  ").describe, "print more")
        self.assertIsNone(Flag("verbose", "   ").describe)
        self.assertIsNone(Flag("verbose").describe)

    def testNameValidation(self):
        with self.assertRaises(TypeError):
            Flag(1)
        with self.assertRaises(ValueError):
            Flag("")
        with self.assertRaises(ValueError):
            Flag("--verbose")
        with self.assertRaises(ValueError):
            Flag("a=b")
        with self.assertRaises(ValueError):
            Flag("two words")

    def testShortValidation(self):
        with self.assertRaises(ValueError):
            Flag("verbose", short="vv")
        with self.assertRaises(ValueError):
            Flag("verbose", short="-")
        with self.assertRaises(ValueError):
            Flag("verbose", short="=")
        with self.assertRaises(TypeError):
            Flag("verbose", short=1)

    def testRequiredValidation(self):
        with self.assertRaises(TypeError):
            Flag("verbose", required="yes")

    def testRepr(self):
        self.assertEqual(
            repr(Flag("verbose", short="v")),
            "flag(name='verbose', short='v', describe=None, required=False, default=False)",
        )


class TestNamed(TestCase):
    def testKind(self):
        self.assertIs(Named("jobs").kind, Kind.NAMED)

    def testOptionalByDefault(self):
        named = Named("jobs")
        self.assertFalse(named.required)
        self.assertFalse(named.defaulted)
        self.assertTrue(Named("jobs", required=True).required)

    def testKeyIsValueLabel(self):
        self.assertEqual(Named("jobs", value="workers").key, "workers")
        self.assertEqual(Named("jobs").key, "jobs")

    def testValueValidation(self):
        with self.assertRaises(ValueError):
            Named("jobs", value="  ")
        with self.assertRaises(TypeError):
            Named("jobs", value=3)

    def testParseValidation(self):
        self.assertIs(Named("jobs", parse=int).parse, int)
        self.assertIsNone(Named("jobs").parse)
        with self.assertRaises(TypeError):
            Named("jobs", parse=3)

    def testShortPromotion(self):
        self.assertEqual(Named("o").short, "o")


class TestPositional(TestCase):
    def testKind(self):
        self.assertIs(Pos("source").kind, Kind.POS)
        self.assertIs(Rest("files").kind, Kind.REST)

    def testRequiredByDefault(self):
        self.assertTrue(Pos("source").required)
        self.assertTrue(Rest("files").required)
        self.assertFalse(Pos("source", required=False).required)
        self.assertFalse(Rest("files", required=False).required)

    def testNoneDefaultCountsAsDeclared(self):
        self.assertTrue(Pos("source", default=None).defaulted)
        self.assertFalse(Pos("source").defaulted)

    def testNamesMayContainEquals(self):
        self.assertEqual(Pos("key=value").name, "key=value")

    def testNoShortAlias(self):
        self.assertFalse(hasattr(Pos("s"), "short"))

    def testDefaultIsCopiedOnRead(self):
        rest = Rest("files", default=["a"])
        rest.default.append("b")
        self.assertEqual(rest.default, ["a"])


class TestOption(TestCase):
    def testBaseCannotBeInstantiated(self):
        with self.assertRaises(TypeError):
            Option("name")

    def testTypename(self):
        self.assertEqual(Named.__typename__, "named")
        self.assertEqual(Rest.__typename__, "rest")


if __name__ == "__main__":
    unittest.main()
