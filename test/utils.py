"""
Tests for the internal helpers.

This module verifies semantic guarantees of `argot.utils`:
- The `Unset` sentinel: singleton identity, falsy semantics, copy and pickle stability.
- coalesce(): only Unset is replaced.
- rename(): stable names on callables, both call forms.
- mirror(): read-only properties returning container copies.
- pluralize(): labels used in help sections and messages.
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from unittest import TestCase

from argot.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        """
        Unset is falsy but distinct from other falsy values.
        """
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)
        self.assertNotEqual(Unset, "")

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyPreservesIdentity(self) -> None:
        """
        copy, deepcopy and pickle all hand back the singleton.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testThreadSafety(self) -> None:
        """
        Concurrent construction attempts all return the same instance.
        """
        results = []
        lock = Lock()

        def construct():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads = [Thread(target=construct) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertTrue(all(result is Unset for result in results))

    def testFinal(self) -> None:
        """
        The type is final and cannot be subclassed.
        """
        with self.assertRaises(TypeError):
            class Subclass(UnsetType): ...

    def testUnionWithTypes(self) -> None:
        """
        Unset composes with types for isinstance checks.
        """
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(1, str | Unset)
        self.assertIsInstance(Unset, Unset | bool)


class CoalesceTest(TestCase):
    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testKeepsFalseyValues(self) -> None:
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertEqual(coalesce([], [1]), [])


class RenameTest(TestCase):
    def testDirectForm(self) -> None:
        def function(): ...
        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testDecoratorForm(self) -> None:
        @rename("renamed")
        def function(): ...
        self.assertEqual(function.__name__, "renamed")

    def testValidation(self) -> None:
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(print, 1)
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename("name")(1)


class MirrorTest(TestCase):
    def setUp(self) -> None:
        class Holder:
            items = mirror("items")
            label = mirror("label")

            def __init__(self):
                self._items = {"a": [1, 2]}
                self._label = "holder"

        self.holder = Holder()

    def testReadsBackingField(self) -> None:
        self.assertEqual(self.holder.items, {"a": [1, 2]})
        self.assertEqual(self.holder.label, "holder")

    def testReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.holder.label = "other"

    def testContainersAreCopies(self) -> None:
        self.holder.items["a"].append(3)
        self.holder.items["b"] = []
        self.assertEqual(self.holder.items, {"a": [1, 2]})

    def testNameValidation(self) -> None:
        with self.assertRaises(TypeError):
            mirror(1)


class PluralizeTest(TestCase):
    def testRegular(self) -> None:
        self.assertEqual(pluralize("option"), "options")
        self.assertEqual(pluralize("argument"), "arguments")

    def testSuffixes(self) -> None:
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("box"), "boxes")
        self.assertEqual(pluralize("day"), "days")

    def testCasingAndPhrases(self) -> None:
        self.assertEqual(pluralize("Subcommand"), "Subcommands")
        self.assertEqual(pluralize("rest entry"), "rest entries")
        self.assertEqual(pluralize("child"), "children")

    def testValidation(self) -> None:
        with self.assertRaises(TypeError):
            pluralize(1)


if __name__ == "__main__":
    unittest.main()
