"""
Faults module tests (codes, rendering, trigger dispatch).

Scope
- FaultCode normalization and getdoc() lookups.
- trigger(): protocol validation, shell rendering, raise/warn in embedding mode.
- copy.replace() on faults merges options without mutating the original.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from argot import (
    FaultCode,
    CommandException,
    CommandWarning,
    UnknownCommandError,
    DuplicateNameWarning,
    trigger,
    getdoc,
)


class TestFaultCode(TestCase):
    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "11102")

    def testErrorsAndWarningsAreGrouped(self):
        self.assertTrue(all(str(code.value).startswith("11") for code in (
            FaultCode.MISSING_COMMAND,
            FaultCode.UNKNOWN_COMMAND,
            FaultCode.MISSING_REQUIRED_OPTION,
            FaultCode.VALUE_COERCION,
        )))
        self.assertTrue(all(str(code.value).startswith("12") for code in (
            FaultCode.DUPLICATE_NAME,
            FaultCode.DUPLICATE_SHORT,
            FaultCode.DUPLICATE_VALUE_LABEL,
            FaultCode.DUPLICATE_REST,
            FaultCode.UNCONFIGURED_HANDLER,
            FaultCode.EXTRANEOUS_POSITIONAL,
        )))

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.DUPLICATE_NAME))
        with self.assertRaises(TypeError):
            getdoc(12101)


class TestTrigger(TestCase):
    def setUp(self):
        self.stdout = Console(file=io.StringIO(), width=200)
        self.stderr = Console(file=io.StringIO(), width=200)

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("boom"))

    def testWarningRendersOnStdout(self):
        trigger(
            DuplicateNameWarning(
                "option name 'x' is already in use",
                title="duplicate option name",
                code=FaultCode.DUPLICATE_NAME,
                hint="rename one",
            ),
            shell=True,
            stdout=self.stdout,
            stderr=self.stderr,
        )
        self.assertEqual(
            self.stdout.file.getvalue(),
            "[ argot | 12101 | Duplicate Option Name ]\n"
            "option name 'x' is already in use\n"
            " → rename one\n",
        )
        self.assertEqual(self.stderr.file.getvalue(), "")

    def testErrorRendersOnStderr(self):
        trigger(
            UnknownCommandError("unknown command 'x'", title="unknown command", code=FaultCode.UNKNOWN_COMMAND),
            shell=True,
            stdout=self.stdout,
            stderr=self.stderr,
        )
        self.assertEqual(
            self.stderr.file.getvalue(),
            "[ argot | 11102 | Unknown Command ]\nunknown command 'x'\n",
        )
        self.assertEqual(self.stdout.file.getvalue(), "")

    def testErrorRaisesWithoutShell(self):
        with self.assertRaises(UnknownCommandError) as context:
            trigger(UnknownCommandError("unknown command 'x'", input="x"), shell=False)
        self.assertEqual(context.exception.options["input"], "x")
        self.assertFalse(context.exception.options["shell"])
        self.assertEqual(str(context.exception), "unknown command 'x'")

    def testWarningWarnsWithoutShell(self):
        with self.assertWarns(DuplicateNameWarning):
            trigger(DuplicateNameWarning("option name 'x' is already in use"), shell=False)


class TestReplace(TestCase):
    def testReplaceMergesOptions(self):
        fault = CommandException("boom", title="first", code=FaultCode.VALUE_COERCION)
        replaced = copy.replace(fault, title="second")
        self.assertIsNot(replaced, fault)
        self.assertIs(type(replaced), CommandException)
        self.assertEqual(replaced.options["title"], "second")
        self.assertIs(replaced.options["code"], FaultCode.VALUE_COERCION)
        self.assertEqual(fault.options["title"], "first")

    def testOptionsAreReadOnly(self):
        fault = CommandWarning("careful")
        with self.assertRaises(TypeError):
            fault.options["title"] = "x"

    def testReplaceRejectsPositionals(self):
        with self.assertRaises(AssertionError):
            DuplicateNameWarning("x").__replace__("y")


if __name__ == "__main__":
    unittest.main()
